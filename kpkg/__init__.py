"""
kpkg - Helpers for kernel packaging.

This package provides tools for:
- Filing kernel patches in Bugzilla and tagging them with the bug reference
- Generating device tree (dtb) spec files per architecture family
"""

__version__ = "1.0.0"

from kpkg.config import ArchFamily, TrackerConfig, SUPPORTED_ARCHS
from kpkg.models import (
    DtbPackage,
    FilingResult,
    PatchRecord,
    Ticket,
)

__all__ = [
    "__version__",
    "ArchFamily",
    "TrackerConfig",
    "SUPPORTED_ARCHS",
    "DtbPackage",
    "FilingResult",
    "PatchRecord",
    "Ticket",
]
