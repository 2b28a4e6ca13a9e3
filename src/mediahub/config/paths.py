"""
Application paths for MediaHub.

The program data directory is fixed for the life of the process; everything
else is derived from it, except two slots that the configuration manager
recomputes from configuration whenever it changes:

- internal_metadata_path: ``metadata_path`` or ``<program data>/metadata``
- transcode_path: ``<transcoding_temp_path>/transcodes`` or None
"""

import logging
import os
from pathlib import Path
from typing import Optional, Protocol

from .server_config import EncodingOptions, ServerConfiguration

logger = logging.getLogger(__name__)

"""Default program data directory in the user's home directory."""
DEFAULT_DATA_DIR = "~/.mediahub"

"""Environment variable overriding the program data directory."""
DATA_DIR_ENV = "MEDIAHUB_DATA_DIR"

METADATA_DIR_NAME = "metadata"
TRANSCODES_DIR_NAME = "transcodes"
SYSTEM_CONFIG_FILE_NAME = "system.yaml"


def metadata_path(config: ServerConfiguration, program_data_path: str) -> str:
    """Resolve the metadata directory for a configuration.

    Examples:
        >>> metadata_path(ServerConfiguration(), "/var/lib/mediahub")
        '/var/lib/mediahub/metadata'
        >>> metadata_path(ServerConfiguration(metadata_path="/srv/meta"), "/var/lib/mediahub")
        '/srv/meta'
    """
    if not config.metadata_path or not config.metadata_path.strip():
        return os.path.join(program_data_path, METADATA_DIR_NAME)
    return config.metadata_path


def transcode_path(encoding: EncodingOptions) -> Optional[str]:
    """Resolve the transcode directory, or None when no temp path is set.

    Examples:
        >>> transcode_path(EncodingOptions()) is None
        True
        >>> transcode_path(EncodingOptions(transcoding_temp_path="/tmp/x"))
        '/tmp/x/transcodes'
    """
    if not encoding.transcoding_temp_path:
        return None
    return os.path.join(encoding.transcoding_temp_path, TRANSCODES_DIR_NAME)


class ApplicationPaths(Protocol):
    """What the configuration manager needs from the application paths."""

    @property
    def program_data_path(self) -> str:
        ...

    internal_metadata_path: Optional[str]
    transcode_path: Optional[str]


class ServerApplicationPaths:
    """Process-wide paths, shared by the components that read or publish them.

    Args:
        program_data_path: Root directory for configuration, logs and data
    """

    def __init__(self, program_data_path: str):
        if not program_data_path:
            raise ValueError("program_data_path cannot be empty")
        self._program_data_path = os.path.expanduser(str(program_data_path))
        self.internal_metadata_path: Optional[str] = None
        self.transcode_path: Optional[str] = None

    @classmethod
    def from_environment(cls) -> "ServerApplicationPaths":
        """Build paths from MEDIAHUB_DATA_DIR, else ~/.mediahub."""
        data_dir = os.environ.get(DATA_DIR_ENV) or DEFAULT_DATA_DIR
        paths = cls(data_dir)
        logger.debug(f"Program data directory: {paths.program_data_path}")
        return paths

    @property
    def program_data_path(self) -> str:
        return self._program_data_path

    @property
    def configuration_directory_path(self) -> str:
        return os.path.join(self._program_data_path, "config")

    @property
    def system_configuration_file_path(self) -> str:
        return os.path.join(self.configuration_directory_path, SYSTEM_CONFIG_FILE_NAME)

    @property
    def log_directory_path(self) -> str:
        return os.path.join(self._program_data_path, "log")

    @property
    def cache_path(self) -> str:
        return os.path.join(self._program_data_path, "cache")

    def ensure_directories(self) -> None:
        """Create the configuration directory if it does not exist.

        Raises:
            OSError: If directory creation fails
        """
        directory = Path(self.configuration_directory_path)
        try:
            directory.mkdir(mode=0o700, parents=True, exist_ok=True)
            logger.debug(f"Directory ensured: {directory}")
        except OSError as e:
            logger.error(f"Failed to create directory {directory}: {e}")
            raise

    def __repr__(self) -> str:
        return (
            f"ServerApplicationPaths(program_data_path={self._program_data_path!r}, "
            f"internal_metadata_path={self.internal_metadata_path!r}, "
            f"transcode_path={self.transcode_path!r})"
        )
