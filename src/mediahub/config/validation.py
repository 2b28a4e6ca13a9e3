"""
Configuration Validation for MediaHub

This module decides whether a candidate server configuration may replace the
current one. Rules only look at paths that changed: a path that is empty or
identical (ordinal comparison) to the current value is never checked, even if
the filesystem has changed since it was first accepted.

Rules run in a fixed order and the first failure aborts validation:
    1. metadata_path must be an existing, writable directory
    2. certificate_path must be an existing file

Example:
    >>> validator = ConfigValidator(LocalFileSystem())
    >>> result = validator.validate(candidate, current)
    >>> if not result.accepted:
    ...     print(result.reason, result.path)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ..error_handling import (
    AccessDeniedError,
    ConfigFileNotFoundError,
    PathNotFoundError,
    PathValidationError,
)
from .filesystem import FileSystem
from .server_config import ServerConfiguration

logger = logging.getLogger(__name__)


class RejectionReason(Enum):
    """Why a candidate configuration was rejected.

    Attributes:
        PATH_NOT_FOUND: A candidate directory does not exist
        FILE_NOT_FOUND: A candidate file does not exist
        ACCESS_DENIED: A candidate directory is not writable
    """
    PATH_NOT_FOUND = "path_not_found"
    FILE_NOT_FOUND = "file_not_found"
    ACCESS_DENIED = "access_denied"


_REASONS = {
    PathNotFoundError: RejectionReason.PATH_NOT_FOUND,
    ConfigFileNotFoundError: RejectionReason.FILE_NOT_FOUND,
    AccessDeniedError: RejectionReason.ACCESS_DENIED,
}


@dataclass(frozen=True)
class ReplaceResult:
    """Outcome of validating or replacing a configuration.

    Attributes:
        accepted: True if the candidate passed every rule
        reason: Rejection reason, None when accepted
        path: Offending path, None when accepted
        field: Configuration field holding the offending path
        error: The rule's exception, kept for callers that prefer raising
    """
    accepted: bool
    reason: Optional[RejectionReason] = None
    path: Optional[str] = None
    field: Optional[str] = None
    error: Optional[PathValidationError] = None

    def __post_init__(self):
        if self.accepted and self.reason is not None:
            raise ValueError("Accepted result cannot carry a rejection reason")
        if not self.accepted and self.reason is None:
            raise ValueError("Rejected result must carry a rejection reason")

    def __bool__(self) -> bool:
        return self.accepted

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error is not None else None

    @classmethod
    def ok(cls) -> "ReplaceResult":
        return cls(accepted=True)

    @classmethod
    def rejected(cls, error: PathValidationError) -> "ReplaceResult":
        for error_type, reason in _REASONS.items():
            if isinstance(error, error_type):
                break
        else:
            raise ValueError(f"No rejection reason for {type(error).__name__}")
        return cls(
            accepted=False,
            reason=reason,
            path=error.path,
            field=error.field,
            error=error,
        )

    def raise_for_rejection(self) -> None:
        """Raise the rule's exception if the candidate was rejected."""
        if self.error is not None:
            raise self.error


def _is_set(path: Optional[str]) -> bool:
    return bool(path and path.strip())


def _changed(new_path: str, current_path: Optional[str]) -> bool:
    return _is_set(new_path) and new_path != (current_path or "")


ValidationRule = Callable[[ServerConfiguration, ServerConfiguration, FileSystem], None]


def validate_metadata_path(
    candidate: ServerConfiguration,
    current: ServerConfiguration,
    file_system: FileSystem
) -> None:
    """Require a changed metadata path to be an existing, writable directory.

    Raises:
        PathNotFoundError: If the directory does not exist
        AccessDeniedError: If the directory is not writable
    """
    new_path = candidate.metadata_path
    if not _changed(new_path, current.metadata_path):
        return

    if not file_system.directory_exists(new_path):
        raise PathNotFoundError(f"{new_path} does not exist.", new_path, "metadata_path")

    try:
        file_system.ensure_write_access(new_path)
    except OSError as e:
        raise AccessDeniedError(
            f"Access to {new_path} is denied: {e}", new_path, "metadata_path"
        ) from e


def validate_certificate_path(
    candidate: ServerConfiguration,
    current: ServerConfiguration,
    file_system: FileSystem
) -> None:
    """Require a changed certificate path to be an existing file.

    Raises:
        ConfigFileNotFoundError: If the file does not exist
    """
    new_path = candidate.certificate_path
    if not _changed(new_path, current.certificate_path):
        return

    if not file_system.file_exists(new_path):
        raise ConfigFileNotFoundError(
            f"Certificate file '{new_path}' does not exist.", new_path, "certificate_path"
        )


DEFAULT_RULES: List[ValidationRule] = [
    validate_metadata_path,
    validate_certificate_path,
]


class ConfigValidator:
    """Runs the replacement rules against a candidate configuration.

    Example:
        >>> validator = ConfigValidator(file_system)
        >>> validator.validate(candidate, current).accepted
        True
    """

    def __init__(self, file_system: FileSystem, rules: Optional[List[ValidationRule]] = None):
        self.file_system = file_system
        self.rules = list(DEFAULT_RULES if rules is None else rules)

    def check(self, candidate: ServerConfiguration, current: ServerConfiguration) -> None:
        """Run every rule in order, raising the first failure.

        Raises:
            PathValidationError: From the first failing rule
        """
        for rule in self.rules:
            rule(candidate, current, self.file_system)

    def validate(self, candidate: ServerConfiguration, current: ServerConfiguration) -> ReplaceResult:
        """Run every rule in order and report the first failure as a result."""
        try:
            self.check(candidate, current)
        except PathValidationError as e:
            logger.debug(f"Validation rule failed for {e.field}: {e.message}")
            return ReplaceResult.rejected(e)
        return ReplaceResult.ok()
