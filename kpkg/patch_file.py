"""
Patch file parsing and header rewriting.
"""

import re
import shutil
from pathlib import Path
from typing import List, Optional, Tuple

from kpkg.common import logger, unique
from kpkg.models import PatchRecord


_HEADER = re.compile(r"^([A-Za-z0-9-]+):\s?(.*)$")
_MBOX_FROM = re.compile(r"^From \S+")


def format_references(
    existing: List[str],
    new_ref: str,
    extra: Optional[List[str]] = None,
) -> str:
    """
    Build a References header line.

    Existing tokens come first, then the new ticket reference, then any
    extra tokens. Duplicates are dropped, first occurrence wins.

    Args:
        existing: Tokens of the current References header
        new_ref: Reference of the new ticket, e.g. 'bsc#123456'
        extra: Additional user supplied tokens

    Returns:
        Header line without trailing newline
    """
    tokens = unique(list(existing) + [new_ref] + list(extra or []))
    return "References: " + " ".join(tokens)


def split_references(value: str) -> List[str]:
    """Split a References header value into tokens."""
    return [t for t in re.split(r"[\s,]+", value) if t]


def has_tag(subject: str, tag: str) -> bool:
    """
    Check if a subject already starts with a tag.

    A bracketed tag also matches its versioned and numbered forms, so
    '[PATCH]' covers '[PATCH v2]' and '[PATCH 1/3]' but not '[PATCHES]'.
    """
    if tag.startswith("[") and tag.endswith("]"):
        return re.match(rf"\[{re.escape(tag[1:-1])}(?!\w)", subject) is not None
    return subject.startswith(tag)


class PatchFile:
    """
    Represents an email formatted patch (git format-patch, quilt).

    The file starts with RFC-822 headers, optionally preceded by an mbox
    'From <sha>' line. The commit message body ends at the first line
    starting with '---'.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lines: Optional[List[str]] = None

        if not self.path.exists():
            raise FileNotFoundError(f"Patch file not found: {self.path}")

    @property
    def lines(self) -> List[str]:
        """Get file lines with line endings, loading if necessary."""
        if self._lines is None:
            with open(self.path, encoding="utf-8", errors="surrogateescape") as f:
                self._lines = f.readlines()
        return self._lines

    # -------------------------------------------------------------------------
    # Header access
    # -------------------------------------------------------------------------

    def header_block(self) -> Optional[Tuple[int, int]]:
        """
        Locate the header block.

        Returns:
            (start, end) line indexes, end exclusive, or None if the file
            does not start with headers
        """
        lines = self.lines
        start = 0
        if lines and _MBOX_FROM.match(lines[0]) and not _HEADER.match(lines[0]):
            start = 1
        if start >= len(lines) or not _HEADER.match(lines[start]):
            return None

        end = start
        while end < len(lines):
            line = lines[end]
            if not line.strip():
                break
            if not (_HEADER.match(line) or line[0] in " \t"):
                break
            end += 1
        return start, end

    def _find_header(self, name: str) -> Optional[Tuple[int, int, str]]:
        """
        Find a header by name.

        Returns:
            (first_line, end_line, unfolded_value) or None
        """
        block = self.header_block()
        if block is None:
            return None
        start, end = block
        lines = self.lines
        for i in range(start, end):
            match = _HEADER.match(lines[i])
            if match and match.group(1).lower() == name.lower():
                parts = [match.group(2).strip()]
                j = i + 1
                while j < end and lines[j][:1] in (" ", "\t"):
                    parts.append(lines[j].strip())
                    j += 1
                return i, j, " ".join(p for p in parts if p)
        return None

    def get_header(self, name: str) -> Optional[str]:
        """Get an unfolded header value, or None if absent."""
        found = self._find_header(name)
        return found[2] if found else None

    @property
    def subject(self) -> str:
        """Get the Subject header value."""
        return self.get_header("Subject") or ""

    @property
    def references(self) -> List[str]:
        """Get the tokens of the References header."""
        value = self.get_header("References")
        return split_references(value) if value else []

    @property
    def body(self) -> str:
        """
        Get the commit message: every line before the first '---' line,
        without the Subject header.
        """
        lines = self.lines
        subject = self._find_header("Subject")
        result = []
        for i, line in enumerate(lines):
            if line.startswith("---"):
                break
            if subject and subject[0] <= i < subject[1]:
                continue
            result.append(line)
        return "".join(result)

    def to_record(self) -> PatchRecord:
        """Snapshot the derived fields."""
        return PatchRecord(
            path=self.path,
            subject=self.subject,
            body=self.body,
            references=self.references,
        )

    def tagged_subject(self, tag: str = "[PATCH]") -> str:
        """Get the subject with a leading tag, unless it already has one."""
        subject = self.subject
        if not tag or has_tag(subject, tag):
            return subject
        return f"{tag} {subject}" if subject else tag

    # -------------------------------------------------------------------------
    # Modification
    # -------------------------------------------------------------------------

    def rewrite_references(self, new_ref: str, extra: Optional[List[str]] = None) -> List[str]:
        """
        Compute the new file lines with an updated References header.

        Raises:
            ValueError: If the file has no header block
        """
        block = self.header_block()
        if block is None:
            raise ValueError(f"No header block found in {self.path.name}")

        header = format_references(self.references, new_ref, extra) + "\n"
        lines = self.lines.copy()
        found = self._find_header("References")
        if found:
            first, end, _ = found
            lines[first:end] = [header]
        else:
            lines.insert(block[1], header)
        return lines

    def set_references(
        self,
        new_ref: str,
        extra: Optional[List[str]] = None,
        scratch_dir: Optional[Path] = None,
    ) -> bool:
        """
        Rewrite the References header in place, best effort.

        The new content is written to a copy in scratch_dir and moved over
        the original. On failure the original file is left untouched.

        Args:
            new_ref: Reference of the new ticket
            extra: Additional tokens appended after new_ref
            scratch_dir: Directory for the rewritten copy (default: next to the file)

        Returns:
            True if the file was rewritten
        """
        try:
            lines = self.rewrite_references(new_ref, extra)
        except ValueError as e:
            logger.warning(f"Keeping {self.path.name} unchanged: {e}")
            return False

        work_dir = Path(scratch_dir) if scratch_dir else self.path.parent
        tmp_path = work_dir / f"{self.path.name}.new"
        try:
            with open(tmp_path, "w", encoding="utf-8", errors="surrogateescape") as f:
                f.writelines(lines)
            shutil.copymode(self.path, tmp_path)
            shutil.move(str(tmp_path), str(self.path))
        except OSError as e:
            logger.warning(f"Keeping {self.path.name} unchanged, rewrite failed: {e}")
            if tmp_path.exists():
                tmp_path.unlink()
            return False

        self._lines = lines
        logger.info(f"Updated References in {self.path.name}: {' '.join(self.references)}")
        return True
