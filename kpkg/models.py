"""
Data models for the kpkg tools using Pydantic for validation.
"""

from pathlib import Path
from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator
import re


REFERENCE_PREFIX = "bsc#"


class DtbPackage(BaseModel):
    """A dtb subpackage: name, glob of its .dts sources and a description."""
    model_config = ConfigDict(frozen=True)

    name: str
    source_glob: str
    description: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate subpackage name format."""
        if not re.match(r"^dtb-[A-Za-z0-9_.+-]+$", v):
            raise ValueError(f"Invalid dtb package name: {v}")
        return v

    @classmethod
    def of(cls, name: str, source_glob: str, description: str) -> "DtbPackage":
        """Build a descriptor from a positional table row."""
        return cls(name=name, source_glob=source_glob, description=description)


class Ticket(BaseModel):
    """A bug created in the tracker."""
    bug_id: int

    @property
    def reference(self) -> str:
        """Reference token for patch headers, e.g. 'bsc#123456'."""
        return f"{REFERENCE_PREFIX}{self.bug_id}"

    @classmethod
    def parse(cls, output: str) -> "Ticket":
        """Parse the id printed by the tracker after creating a bug."""
        text = output.strip()
        if not text.isdigit():
            raise ValueError(f"Unexpected bug id in tracker response: {text!r}")
        return cls(bug_id=int(text))


class PatchRecord(BaseModel):
    """A patch file and the fields derived from its headers."""
    path: Path
    subject: str = ""
    body: str = ""
    references: List[str] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.path.name


class FilingResult(BaseModel):
    """Outcome of filing a single patch."""
    path: Path
    ticket: Ticket
    subject: str
    references: List[str] = Field(default_factory=list)

    @property
    def bug_id(self) -> int:
        return self.ticket.bug_id
