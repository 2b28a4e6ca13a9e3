"""Tests for the local filesystem checks used by validation."""

from __future__ import annotations

import os

import pytest

from mediahub.config import ConfigValidator, LocalFileSystem, RejectionReason, ServerConfiguration
from mediahub.config import filesystem


class TestLocalFileSystem:
    """Real disk checks."""

    def test_existence_checks(self, tmp_path):
        fs = LocalFileSystem()
        directory = tmp_path / "dir"
        directory.mkdir()
        regular = tmp_path / "cert.pem"
        regular.write_text("cert", encoding="utf-8")

        assert fs.directory_exists(str(directory)) is True
        assert fs.directory_exists(str(regular)) is False
        assert fs.file_exists(str(regular)) is True
        assert fs.file_exists(str(directory)) is False
        assert fs.directory_exists(str(tmp_path / "missing")) is False
        assert fs.file_exists(str(tmp_path / "missing")) is False

    def test_write_check_leaves_no_files(self, tmp_path):
        (tmp_path / "existing.txt").write_text("x", encoding="utf-8")
        before = sorted(os.listdir(tmp_path))

        LocalFileSystem().ensure_write_access(str(tmp_path))

        assert sorted(os.listdir(tmp_path)) == before

    def test_write_check_on_regular_file_raises(self, tmp_path):
        regular = tmp_path / "not-a-dir"
        regular.write_text("x", encoding="utf-8")

        with pytest.raises(OSError):
            LocalFileSystem().ensure_write_access(str(regular))

    def test_unwritable_directory_rejected_as_access_denied(self, tmp_path, monkeypatch):
        target = tmp_path / "meta"
        target.mkdir()

        def deny(path, mode="r", *args, **kwargs):
            raise PermissionError(13, "Permission denied", path)

        monkeypatch.setattr(filesystem, "open", deny, raising=False)

        result = ConfigValidator(LocalFileSystem()).validate(
            ServerConfiguration(metadata_path=str(target)), ServerConfiguration()
        )

        assert result.reason is RejectionReason.ACCESS_DENIED
        assert result.path == str(target)
        assert isinstance(result.error.__cause__, PermissionError)
        assert os.listdir(target) == []
