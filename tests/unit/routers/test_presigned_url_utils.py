"""Tests for signed upload key construction."""

import re

import pytest

from knowledge_backend.api.routers.router_utils.presigned_url_utils import (
    generate_upload_key,
    sanitize_filename,
)


class TestSanitizeFilename:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("My Report (v2).PDF", "my-report-v2.pdf"),
            ("", "document"),
            (None, "document"),
            ("README", "readme"),
            ("???.txt", "document.txt"),
            ("archive.tar.gz", "archive-tar.gz"),
        ],
    )
    def test_sanitize(self, name, expected) -> None:
        assert sanitize_filename(name) == expected

    def test_long_names_truncated(self) -> None:
        base = sanitize_filename("a" * 200 + ".md").split(".")[0]
        assert len(base) == 60


class TestGenerateUploadKey:
    def test_key_format(self) -> None:
        key = generate_upload_key("/raw/tenant-1", "Notes.TXT")
        assert re.fullmatch(r"raw/tenant-1/notes__\d+_[0-9a-f]{10}\.txt", key)

    def test_keys_unique(self) -> None:
        assert generate_upload_key("raw/", "a.pdf") != generate_upload_key("raw/", "a.pdf")

    def test_no_extension(self) -> None:
        key = generate_upload_key("raw/", "Makefile")
        assert re.fullmatch(r"raw/makefile__\d+_[0-9a-f]{10}", key)
