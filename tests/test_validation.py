"""Tests for the configuration replacement rules."""

from __future__ import annotations

import pytest

from mediahub.config import ConfigValidator, RejectionReason, ReplaceResult, ServerConfiguration
from mediahub.error_handling import (
    AccessDeniedError,
    ConfigFileNotFoundError,
    ConfigurationError,
    PathNotFoundError,
)

from conftest import FakeFileSystem


class TestMetadataPathRule:
    """A changed metadata path must be an existing, writable directory."""

    def test_missing_directory_is_rejected(self):
        validator = ConfigValidator(FakeFileSystem())
        result = validator.validate(ServerConfiguration(metadata_path="/data/meta"), ServerConfiguration())

        assert not result.accepted
        assert result.reason is RejectionReason.PATH_NOT_FOUND
        assert result.path == "/data/meta"
        assert result.field == "metadata_path"
        assert isinstance(result.error, PathNotFoundError)

    def test_read_only_directory_is_rejected(self):
        fs = FakeFileSystem(directories={"/data/meta"}, read_only={"/data/meta"})
        result = ConfigValidator(fs).validate(ServerConfiguration(metadata_path="/data/meta"), ServerConfiguration())

        assert result.reason is RejectionReason.ACCESS_DENIED
        assert isinstance(result.error, AccessDeniedError)
        assert isinstance(result.error.__cause__, PermissionError)

    def test_writable_directory_is_accepted(self):
        fs = FakeFileSystem(directories={"/data/meta"})
        result = ConfigValidator(fs).validate(ServerConfiguration(metadata_path="/data/meta"), ServerConfiguration())

        assert result.accepted
        assert fs.calls == [("directory_exists", "/data/meta"), ("ensure_write_access", "/data/meta")]

    def test_unchanged_path_is_not_checked_even_if_missing(self):
        fs = FakeFileSystem()
        current = ServerConfiguration(metadata_path="/gone")
        result = ConfigValidator(fs).validate(ServerConfiguration(metadata_path="/gone"), current)

        assert result.accepted
        assert fs.calls == []

    @pytest.mark.parametrize("empty", ["", "   "])
    def test_unset_path_is_not_checked(self, empty):
        fs = FakeFileSystem()
        current = ServerConfiguration(metadata_path="/old")
        assert ConfigValidator(fs).validate(ServerConfiguration(metadata_path=empty), current).accepted
        assert fs.calls == []

    def test_comparison_is_case_sensitive(self):
        fs = FakeFileSystem()
        current = ServerConfiguration(metadata_path="/Data/Meta")
        result = ConfigValidator(fs).validate(ServerConfiguration(metadata_path="/data/meta"), current)

        assert result.reason is RejectionReason.PATH_NOT_FOUND

    def test_current_none_treated_as_empty(self):
        fs = FakeFileSystem(directories={"/data/meta"})
        current = ServerConfiguration(metadata_path=None)
        assert ConfigValidator(fs).validate(ServerConfiguration(metadata_path="/data/meta"), current).accepted


class TestCertificatePathRule:
    """A changed certificate path must be an existing file."""

    def test_missing_file_is_rejected(self):
        result = ConfigValidator(FakeFileSystem()).validate(
            ServerConfiguration(certificate_path="/certs/new.pem"),
            ServerConfiguration(certificate_path="/certs/old.pem"),
        )

        assert result.reason is RejectionReason.FILE_NOT_FOUND
        assert result.path == "/certs/new.pem"
        assert result.field == "certificate_path"
        assert isinstance(result.error, ConfigFileNotFoundError)

    def test_existing_file_is_accepted(self):
        fs = FakeFileSystem(files={"/certs/new.pem"})
        result = ConfigValidator(fs).validate(
            ServerConfiguration(certificate_path="/certs/new.pem"),
            ServerConfiguration(certificate_path="/certs/old.pem"),
        )
        assert result.accepted

    def test_directory_is_not_a_certificate(self):
        fs = FakeFileSystem(directories={"/certs"})
        result = ConfigValidator(fs).validate(ServerConfiguration(certificate_path="/certs"), ServerConfiguration())
        assert result.reason is RejectionReason.FILE_NOT_FOUND

    def test_unchanged_certificate_is_not_checked(self):
        fs = FakeFileSystem()
        config = ServerConfiguration(certificate_path="/certs/old.pem")
        assert ConfigValidator(fs).validate(config, config).accepted
        assert fs.calls == []


class TestRuleOrder:
    """Rules run metadata first and stop at the first failure."""

    def test_metadata_failure_reported_before_certificate(self):
        fs = FakeFileSystem()
        candidate = ServerConfiguration(metadata_path="/missing", certificate_path="/missing.pem")
        result = ConfigValidator(fs).validate(candidate, ServerConfiguration())

        assert result.reason is RejectionReason.PATH_NOT_FOUND
        assert ("file_exists", "/missing.pem") not in fs.calls

    def test_check_raises_first_failure(self):
        validator = ConfigValidator(FakeFileSystem())
        with pytest.raises(PathNotFoundError) as exc_info:
            validator.check(ServerConfiguration(metadata_path="/missing"), ServerConfiguration())
        assert exc_info.value.to_dict()["context"] == {"path": "/missing", "field": "metadata_path"}

    def test_custom_rules_replace_defaults(self):
        calls = []
        validator = ConfigValidator(FakeFileSystem(), rules=[lambda c, cur, fs: calls.append(c)])
        candidate = ServerConfiguration(metadata_path="/missing")

        assert validator.validate(candidate, ServerConfiguration()).accepted
        assert calls == [candidate]


class TestReplaceResult:
    """Result type behavior."""

    def test_ok_is_truthy(self):
        result = ReplaceResult.ok()
        assert result
        assert result.reason is None
        assert result.message is None
        result.raise_for_rejection()

    def test_rejected_is_falsy_and_raises(self):
        error = PathNotFoundError("/x does not exist.", "/x", "metadata_path")
        result = ReplaceResult.rejected(error)

        assert not result
        assert result.message == "/x does not exist."
        with pytest.raises(ConfigurationError):
            result.raise_for_rejection()

    def test_inconsistent_results_refused(self):
        with pytest.raises(ValueError):
            ReplaceResult(accepted=True, reason=RejectionReason.ACCESS_DENIED)
        with pytest.raises(ValueError):
            ReplaceResult(accepted=False)
