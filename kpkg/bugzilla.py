"""
Wrapper around the python-bugzilla command line tool.
"""

import re
from pathlib import Path
from typing import List, Optional

from kpkg.common import logger, run_command
from kpkg.config import TrackerConfig
from kpkg.models import Ticket


class BugzillaError(Exception):
    """Exception raised when a bugzilla call fails or returns garbage."""
    pass


_MAINTENANCE_VERSION = re.compile(r"maintenance|unspecified", re.IGNORECASE)


class BugzillaCli:
    """Create bugs and attachments by running the 'bugzilla' tool."""

    def __init__(self, config: TrackerConfig):
        self.config = config

    def _run(self, args: List[str], action: str) -> str:
        cmd = [self.config.bugzilla_cmd] + args
        if self.config.debug:
            logger.debug(f"bugzilla {action}: {cmd}")
        returncode, stdout, stderr = run_command(cmd, timeout=self.config.timeout)
        if returncode != 0:
            detail = stderr.strip() or stdout.strip() or f"exit code {returncode}"
            raise BugzillaError(f"bugzilla {action} failed: {detail}")
        return stdout

    def active_versions(self, product: str) -> List[str]:
        """Get the active versions of a product, in tracker order."""
        stdout = self._run(["info", "--versions", product], "info")
        return [line.strip() for line in stdout.splitlines() if line.strip()]

    def maintenance_version(self, product: str) -> str:
        """
        Get the latest maintenance version of a product.

        Raises:
            BugzillaError: If the query fails or no version qualifies
        """
        versions = [v for v in self.active_versions(product) if _MAINTENANCE_VERSION.search(v)]
        if not versions:
            raise BugzillaError(f"No maintenance or unspecified version found for {product}")
        version = versions[-1]
        logger.debug(f"Using version {version!r} of {product}")
        return version

    def create_bug(self, summary: str, version: str) -> Ticket:
        """
        Create a bug with the configured fields.

        Raises:
            BugzillaError: If creation fails or the response is not a bug id
        """
        cfg = self.config
        args = [
            "new",
            "--product", cfg.product,
            "--component", cfg.component,
            "--assigned_to", cfg.assignee or "",
            "--summary", summary,
            "--version", version,
            "--comment", cfg.comment,
            "--status", cfg.status,
            "--arch", cfg.arch,
            "--keywords", cfg.keyword,
            "--outputformat", "%{id}",
        ]
        if cfg.qa_contact:
            args.extend(["--qa_contact", cfg.qa_contact])

        stdout = self._run(args, "new")
        try:
            ticket = Ticket.parse(stdout)
        except ValueError as e:
            raise BugzillaError(str(e)) from e
        logger.info(f"Created {ticket.reference}: {summary}")
        return ticket

    def attach(self, ticket: Ticket, path: Path, description: str, comment: Optional[str] = None) -> None:
        """Upload a file as an attachment to a bug."""
        args = ["attach", "--file", str(path), "--desc", description]
        if comment:
            args.extend(["--comment", comment])
        args.append(str(ticket.bug_id))
        self._run(args, "attach")
        logger.info(f"Attached {Path(path).name} to {ticket.reference}")
