"""
File kernel patches as bugs and tag them with the new bug reference.
"""

from pathlib import Path
from typing import Iterable, List, Optional

from kpkg.bugzilla import BugzillaCli, BugzillaError
from kpkg.common import logger, scratch_dir
from kpkg.config import TrackerConfig
from kpkg.models import FilingResult
from kpkg.patch_file import PatchFile


def file_patch(
    patch: PatchFile,
    cli: BugzillaCli,
    config: TrackerConfig,
    work_dir: Optional[Path] = None,
) -> FilingResult:
    """
    File one patch: create the bug, update References, attach the patch.

    Any failure raises and stops processing of this patch; nothing that
    already happened in the tracker is rolled back.

    Args:
        patch: Patch to file
        cli: Tracker client
        config: Tracker configuration
        work_dir: Scratch directory for the header rewrite

    Returns:
        FilingResult for the new bug
    """
    record = patch.to_record()
    if not record.subject:
        raise BugzillaError(f"No Subject header in {record.name}")
    logger.info(f"Filing {record.name}: {record.subject}")

    version = cli.maintenance_version(config.product)
    ticket = cli.create_bug(record.subject, version)

    patch.set_references(ticket.reference, config.extra_references, scratch_dir=work_dir)

    subject = patch.tagged_subject(config.subject_tag)
    cli.attach(ticket, patch.path, subject, record.body)

    return FilingResult(
        path=patch.path,
        ticket=ticket,
        subject=subject,
        references=patch.references,
    )


def file_patches(paths: Iterable[Path], config: TrackerConfig) -> List[FilingResult]:
    """
    File every patch in order. The first failure aborts the batch.

    Args:
        paths: Patch files
        config: Tracker configuration

    Returns:
        One FilingResult per patch
    """
    config.validate()
    # Missing patch files abort before any bug is filed
    patches = [PatchFile(Path(p)) for p in paths]
    cli = BugzillaCli(config)

    results = []
    with scratch_dir(prefix="kpkg-bugs-") as work_dir:
        for patch in patches:
            results.append(file_patch(patch, cli, config, work_dir))
    return results
