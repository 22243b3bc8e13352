"""
Configuration constants and architecture mappings for the kpkg tools.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional
import os


class ArchFamily(str, Enum):
    """Architecture families that get a dtb spec file."""
    ARMV6 = "armv6"
    ARMV7 = "armv7"
    AARCH64 = "aarch64"
    RISCV64 = "riscv64"


class ConfigError(Exception):
    """Exception raised for missing or invalid configuration."""
    pass


@dataclass
class ArchMapping:
    """Mapping between an architecture family and its kernel tree layout."""
    family: ArchFamily
    dts_arch: str
    exclusive_arch: List[str]

    @property
    def package_name(self) -> str:
        """Get source package name for this family."""
        return f"dtb-{self.family.value}"

    @property
    def spec_name(self) -> str:
        """Get output spec file name for this family."""
        return f"{self.package_name}.spec"


ARCH_MAPPINGS: Dict[ArchFamily, ArchMapping] = {
    ArchFamily.ARMV6: ArchMapping(
        family=ArchFamily.ARMV6,
        dts_arch="arm",
        exclusive_arch=["armv6l", "armv6hl"],
    ),
    ArchFamily.ARMV7: ArchMapping(
        family=ArchFamily.ARMV7,
        dts_arch="arm",
        exclusive_arch=["armv7l", "armv7hl"],
    ),
    ArchFamily.AARCH64: ArchMapping(
        family=ArchFamily.AARCH64,
        dts_arch="arm64",
        exclusive_arch=["aarch64"],
    ),
    ArchFamily.RISCV64: ArchMapping(
        family=ArchFamily.RISCV64,
        dts_arch="riscv",
        exclusive_arch=["riscv64"],
    ),
}

SUPPORTED_ARCHS = [family.value for family in ARCH_MAPPINGS]

# Families whose dtb packages also carry device tree overlays
OVERLAY_FAMILIES = (ArchFamily.AARCH64, ArchFamily.RISCV64)


@dataclass
class TrackerConfig:
    """Configuration for filing patches in Bugzilla."""

    assignee: Optional[str] = None
    product: str = "SUSE Linux Enterprise Server 15 SP6"
    component: str = "Kernel"
    arch: str = "All"
    status: str = "NEW"
    keyword: str = "Maintenance"
    subject_tag: str = "[PATCH]"
    comment: str = "Tracking bug for a kernel patch, see the attached patch for details."

    # External tool
    bugzilla_cmd: str = "bugzilla"
    timeout: int = 120

    debug: bool = False
    extra_references: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "TrackerConfig":
        """Create configuration from environment variables."""
        defaults = cls()
        timeout = os.getenv("KPKG_BUGZILLA_TIMEOUT", str(defaults.timeout))
        try:
            timeout = int(timeout)
        except ValueError:
            raise ConfigError(f"Invalid KPKG_BUGZILLA_TIMEOUT: {timeout!r}") from None
        if timeout <= 0:
            raise ConfigError(f"Invalid KPKG_BUGZILLA_TIMEOUT: {timeout}")
        return cls(
            assignee=os.getenv("KPKG_BUGZILLA_EMAIL") or None,
            product=os.getenv("KPKG_BUGZILLA_PRODUCT", defaults.product),
            component=os.getenv("KPKG_BUGZILLA_COMPONENT", defaults.component),
            arch=os.getenv("KPKG_BUGZILLA_ARCH", defaults.arch),
            bugzilla_cmd=os.getenv("KPKG_BUGZILLA_CMD", defaults.bugzilla_cmd),
            timeout=timeout,
        )

    @property
    def qa_contact(self) -> Optional[str]:
        """QA contact is only set in debug mode, pointing back at the assignee."""
        return self.assignee if self.debug else None

    def validate(self) -> None:
        """Raise ConfigError if required settings are missing."""
        if not self.assignee:
            raise ConfigError(
                "No assignee configured, use --email or set KPKG_BUGZILLA_EMAIL"
            )
        if not self.product:
            raise ConfigError("No product configured, use --product or set KPKG_BUGZILLA_PRODUCT")
