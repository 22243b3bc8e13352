"""Tests for ticket_filer module."""

import tempfile
from pathlib import Path

import pytest
from unittest.mock import MagicMock, patch

from kpkg.bugzilla import BugzillaCli, BugzillaError
from kpkg.config import ConfigError, TrackerConfig
from kpkg.models import Ticket
from kpkg.patch_file import PatchFile
from kpkg.ticket_filer import file_patch, file_patches


PATCH_TEXT = """\
From: Jane Developer <jane@example.com>
Subject: net: fix foo
Patch-mainline: v6.11

Fix foo.
---
 foo.c | 1 +
"""


def fake_bugzilla(new_output="123456\n"):
    """Build a run_command replacement answering info/new/attach."""
    calls = []

    def run(cmd, cwd=None, timeout=None, capture_output=True):
        calls.append(cmd)
        action = cmd[1]
        if action == "info":
            return 0, "15-SP6\nMaintenance 15-SP6\n", ""
        if action == "new":
            return 0, new_output, ""
        return 0, "", ""

    return run, calls


@pytest.fixture
def config():
    return TrackerConfig(assignee="dev@example.com", extra_references=["jsc#PED-1"])


@pytest.fixture
def patch_path(tmp_path):
    path = tmp_path / "0001-net-fix-foo.patch"
    path.write_text(PATCH_TEXT)
    return path


class TestFilePatch:
    """Tests for filing a single patch."""

    def test_steps_in_order(self, config, patch_path):
        cli = MagicMock(spec=BugzillaCli)
        cli.maintenance_version.return_value = "Maintenance 15-SP6"
        cli.create_bug.return_value = Ticket(bug_id=123456)

        result = file_patch(PatchFile(patch_path), cli, config)

        cli.maintenance_version.assert_called_once_with(config.product)
        cli.create_bug.assert_called_once_with("net: fix foo", "Maintenance 15-SP6")
        ticket, path, desc, comment = cli.attach.call_args[0]
        assert ticket.bug_id == 123456
        assert path == patch_path
        assert desc == "[PATCH] net: fix foo"
        assert "Fix foo." in comment
        assert "Subject:" not in comment

        assert result.bug_id == 123456
        assert result.references == ["bsc#123456", "jsc#PED-1"]
        assert "References: bsc#123456 jsc#PED-1\n" in patch_path.read_text()

    def test_non_numeric_id_no_attachment(self, config, patch_path):
        run, calls = fake_bugzilla(new_output="Server error")
        with patch("kpkg.bugzilla.run_command", side_effect=run):
            with pytest.raises(BugzillaError):
                file_patch(PatchFile(patch_path), BugzillaCli(config), config)

        assert [c[1] for c in calls] == ["info", "new"]
        assert "References:" not in patch_path.read_text()

    def test_missing_subject(self, config, tmp_path):
        path = tmp_path / "nosubject.patch"
        path.write_text("From: a\n\nbody\n---\n")
        cli = MagicMock(spec=BugzillaCli)

        with pytest.raises(BugzillaError, match="No Subject"):
            file_patch(PatchFile(path), cli, config)
        cli.create_bug.assert_not_called()


class TestFilePatches:
    """Tests for the batch."""

    def test_batch(self, config, tmp_path):
        paths = []
        for i in range(2):
            path = tmp_path / f"000{i}.patch"
            path.write_text(PATCH_TEXT)
            paths.append(path)

        run, calls = fake_bugzilla()
        with patch("kpkg.bugzilla.run_command", side_effect=run):
            results = file_patches(paths, config)

        assert len(results) == 2
        assert [c[1] for c in calls] == ["info", "new", "attach"] * 2
        attach = calls[2]
        assert attach[attach.index("--file") + 1] == str(paths[0])

    def test_first_failure_aborts(self, config, tmp_path):
        paths = []
        for i in range(2):
            path = tmp_path / f"000{i}.patch"
            path.write_text(PATCH_TEXT)
            paths.append(path)

        run, calls = fake_bugzilla(new_output="oops")
        with patch("kpkg.bugzilla.run_command", side_effect=run):
            with pytest.raises(BugzillaError):
                file_patches(paths, config)

        assert [c[1] for c in calls] == ["info", "new"]

    def test_missing_file_before_tracker(self, config, tmp_path, patch_path):
        run, calls = fake_bugzilla()
        with patch("kpkg.bugzilla.run_command", side_effect=run):
            with pytest.raises(FileNotFoundError):
                file_patches([patch_path, tmp_path / "missing.patch"], config)
        assert calls == []

    def test_missing_assignee(self, patch_path):
        with pytest.raises(ConfigError):
            file_patches([patch_path], TrackerConfig())

    def test_scratch_dir_removed_on_failure(self, config, patch_path):
        created = []
        real_mkdtemp = tempfile.mkdtemp

        def tracking_mkdtemp(*args, **kwargs):
            path = real_mkdtemp(*args, **kwargs)
            created.append(Path(path))
            return path

        run, _ = fake_bugzilla(new_output="oops")
        with patch("kpkg.bugzilla.run_command", side_effect=run), \
                patch("kpkg.common.tempfile.mkdtemp", side_effect=tracking_mkdtemp):
            with pytest.raises(BugzillaError):
                file_patches([patch_path], config)

        assert len(created) == 1
        assert not created[0].exists()
