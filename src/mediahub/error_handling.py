"""
Centralized error handling for MediaHub.

This module provides the exception hierarchy used by the configuration core,
so that callers can tell validation rejections apart from persistence faults
and unknown configuration keys.
"""

from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class MediaHubError(Exception):
    """
    Base exception for all MediaHub errors.

    Attributes:
        message: Human-readable error message
        component: Name of the component where the error occurred
        context: Additional context information about the error
    """

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.component = component
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.component:
            return f"[{self.component}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "component": self.component,
            "context": self.context
        }


class ConfigurationError(MediaHubError):
    """
    Error in configuration.

    Raised when configuration is invalid or cannot be loaded, including:
    - Candidate paths that fail filesystem preconditions
    - Configuration file parsing errors
    - Configuration file write failures
    """

    def __init__(
        self,
        message: str,
        component: str = "configuration",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, component, context)


class PathValidationError(ConfigurationError):
    """
    A candidate configuration path failed a filesystem precondition.

    Attributes:
        path: The offending path as given in the candidate configuration
        field: Name of the configuration field holding the path
    """

    def __init__(self, message: str, path: str, field: str) -> None:
        self.path = path
        self.field = field
        super().__init__(
            message,
            component="validation",
            context={"path": path, "field": field}
        )


class PathNotFoundError(PathValidationError):
    """The candidate directory does not exist."""


class ConfigFileNotFoundError(PathValidationError):
    """The candidate file does not exist."""


class AccessDeniedError(PathValidationError):
    """The process cannot write to the candidate directory."""


def handle_error(
    error: Exception,
    reraise: bool = False,
    level: str = "error"
) -> None:
    """
    Handle an error with consistent logging behavior.

    Args:
        error: The exception to handle
        reraise: Whether to re-raise the exception after logging
        level: Log level (debug, info, warning, error, critical)
    """
    if isinstance(error, MediaHubError):
        error_dict = error.to_dict()
        log_message = f"{error_dict['error_type']}: {error_dict['message']}"
        if error_dict.get('context'):
            log_message += f" | Context: {error_dict['context']}"
    else:
        log_message = f"{type(error).__name__}: {error}"

    log_func = getattr(logger, level, logger.error)
    log_func(log_message, exc_info=True)

    if reraise:
        raise error


def wrap_error(
    error: Exception,
    message: str,
    error_class: type = ConfigurationError,
    **context
) -> MediaHubError:
    """
    Wrap an exception in a MediaHubError with additional context.

    Args:
        error: The original exception
        message: Additional message explaining the context
        error_class: The MediaHubError subclass to use
        **context: Additional context key-value pairs

    Returns:
        A new MediaHubError instance with the wrapped error

    Example:
        >>> try:
        ...     path.write_text(document)
        ... except OSError as e:
        ...     raise wrap_error(e, "Failed to write configuration", file=str(path))
    """
    wrapped_context = {
        "original_error": str(error),
        "original_type": type(error).__name__,
        **context
    }
    return error_class(f"{message}: {error}", context=wrapped_context)
