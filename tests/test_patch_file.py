"""Tests for patch_file module."""

import pytest

from kpkg.patch_file import PatchFile, format_references, split_references


SAMPLE_PATCH = """\
From 1234567890abcdef1234567890abcdef12345678 Mon Sep 17 00:00:00 2001
From: Jane Developer <jane@example.com>
Date: Tue, 3 Sep 2024 10:00:00 +0200
Subject: [PATCH] net: fix use after free in
 foo_release()
Patch-mainline: v6.11-rc7
Git-commit: 1234567890abcdef1234567890abcdef12345678

The foo device may be freed while a release is pending.
Keep a reference until the work is done.

Signed-off-by: Jane Developer <jane@example.com>
---
 drivers/net/foo.c | 2 ++
 1 file changed, 2 insertions(+)

diff --git a/drivers/net/foo.c b/drivers/net/foo.c
--- a/drivers/net/foo.c
+++ b/drivers/net/foo.c
@@ -1,3 +1,5 @@
"""

PATCH_WITH_REFERENCES = """\
From: Jane Developer <jane@example.com>
Subject: kernel: fix a thing
References: bsc#1
Patch-mainline: Never

Body text.
---
 foo.c | 1 +
"""


@pytest.fixture
def patch_file(tmp_path):
    """Create a temporary patch without References."""
    path = tmp_path / "0001-net-fix.patch"
    path.write_text(SAMPLE_PATCH)
    return PatchFile(path)


@pytest.fixture
def referenced_patch(tmp_path):
    """Create a temporary patch with a References header."""
    path = tmp_path / "0002-kernel-fix.patch"
    path.write_text(PATCH_WITH_REFERENCES)
    return PatchFile(path)


class TestFormatReferences:
    """Tests for References header formatting."""

    def test_no_existing(self):
        assert format_references([], "bsc#123456") == "References: bsc#123456"

    def test_existing(self):
        assert format_references(["bsc#1"], "bsc#123456") == "References: bsc#1 bsc#123456"

    def test_extra_after_new(self):
        header = format_references(["bsc#1"], "bsc#2", ["jsc#PED-3", "CVE-2024-1"])
        assert header == "References: bsc#1 bsc#2 jsc#PED-3 CVE-2024-1"

    def test_no_duplicates(self):
        header = format_references(["bsc#1", "bsc#2"], "bsc#2", ["bsc#1"])
        assert header == "References: bsc#1 bsc#2"

    def test_split_references(self):
        assert split_references("bsc#1, bsc#2  jsc#X") == ["bsc#1", "bsc#2", "jsc#X"]


class TestPatchFileRead:
    """Tests for reading patches."""

    def test_subject_unfolded(self, patch_file):
        assert patch_file.subject == "[PATCH] net: fix use after free in foo_release()"

    def test_body_stops_at_separator(self, patch_file):
        body = patch_file.body
        assert "Keep a reference until the work is done." in body
        assert "Signed-off-by: Jane Developer" in body
        assert "drivers/net/foo.c" not in body

    def test_body_without_subject(self, patch_file):
        body = patch_file.body
        assert "Subject:" not in body
        assert "foo_release()" not in body
        assert "From: Jane Developer" in body

    def test_no_references(self, patch_file):
        assert patch_file.references == []

    def test_references(self, referenced_patch):
        assert referenced_patch.references == ["bsc#1"]

    def test_header_block(self, patch_file):
        assert patch_file.header_block() == (1, 7)

    def test_get_header_case_insensitive(self, patch_file):
        assert patch_file.get_header("patch-mainline") == "v6.11-rc7"
        assert patch_file.get_header("Missing") is None

    def test_to_record(self, referenced_patch):
        record = referenced_patch.to_record()
        assert record.subject == "kernel: fix a thing"
        assert record.references == ["bsc#1"]
        assert record.name == "0002-kernel-fix.patch"

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PatchFile(tmp_path / "missing.patch")


class TestTaggedSubject:
    """Tests for the subject tag."""

    def test_already_tagged(self, patch_file):
        assert patch_file.tagged_subject("[PATCH]") == patch_file.subject

    def test_adds_tag(self, referenced_patch):
        assert referenced_patch.tagged_subject("[PATCH]") == "[PATCH] kernel: fix a thing"

    def test_empty_tag(self, referenced_patch):
        assert referenced_patch.tagged_subject("") == "kernel: fix a thing"

    @pytest.mark.parametrize("subject", [
        "[PATCH v2] net: fix foo",
        "[PATCH 1/3] net: fix foo",
        "[PATCH v3 2/5] net: fix foo",
    ])
    def test_versioned_tag_kept(self, tmp_path, subject):
        path = tmp_path / "0001.patch"
        path.write_text(f"From: Jane Developer <jane@example.com>\nSubject: {subject}\n\nBody.\n---\n")
        assert PatchFile(path).tagged_subject("[PATCH]") == subject

    def test_similar_tag_not_matched(self, tmp_path):
        path = tmp_path / "0001.patch"
        path.write_text("From: Jane Developer <jane@example.com>\nSubject: [PATCHES] net: fix foo\n\nBody.\n---\n")
        assert PatchFile(path).tagged_subject("[PATCH]") == "[PATCH] [PATCHES] net: fix foo"


class TestSetReferences:
    """Tests for rewriting the References header."""

    def test_insert_header(self, patch_file, tmp_path):
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        assert patch_file.set_references("bsc#123456", scratch_dir=scratch) is True

        lines = patch_file.path.read_text().splitlines()
        assert "References: bsc#123456" in lines
        # Inserted at the end of the header block, before the blank line
        idx = lines.index("References: bsc#123456")
        assert lines[idx - 1] == "Git-commit: 1234567890abcdef1234567890abcdef12345678"
        assert lines[idx + 1] == ""
        assert list(scratch.iterdir()) == []

    def test_replace_header(self, referenced_patch):
        assert referenced_patch.set_references("bsc#123456") is True
        text = referenced_patch.path.read_text()
        assert "References: bsc#1 bsc#123456\n" in text
        assert text.count("References:") == 1

    def test_extra_references(self, referenced_patch):
        referenced_patch.set_references("bsc#2", ["jsc#PED-1"])
        assert referenced_patch.references == ["bsc#1", "bsc#2", "jsc#PED-1"]

    def test_rest_unchanged(self, patch_file):
        patch_file.set_references("bsc#9")
        text = patch_file.path.read_text()
        assert text.replace("References: bsc#9\n", "") == SAMPLE_PATCH

    def test_folded_header_replaced(self, tmp_path):
        path = tmp_path / "folded.patch"
        path.write_text("Subject: x\nReferences: bsc#1\n bsc#2\nFrom: a\n\nbody\n")
        patch = PatchFile(path)
        assert patch.references == ["bsc#1", "bsc#2"]

        patch.set_references("bsc#3")
        assert path.read_text() == "Subject: x\nReferences: bsc#1 bsc#2 bsc#3\nFrom: a\n\nbody\n"

    def test_no_headers_left_untouched(self, tmp_path):
        path = tmp_path / "plain.patch"
        path.write_text("just a diff\n--- a/foo\n+++ b/foo\n")
        patch = PatchFile(path)

        assert patch.set_references("bsc#1") is False
        assert path.read_text() == "just a diff\n--- a/foo\n+++ b/foo\n"
