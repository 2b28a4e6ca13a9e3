"""
Configuration Management Package for MediaHub

This package owns the server configuration: validated wholesale replacement,
named configuration fragments, YAML persistence, change notifications, and
the application paths derived from configuration.

Modules:
    server_config: Configuration dataclasses and named store registration
    validation: Replacement rules and the ReplaceResult type
    filesystem: Pass/fail filesystem checks used by validation
    paths: Application paths and derived path calculation
    events: Pre-replace and post-update notification channels
    persistence: YAML and in-memory load/save backends
    manager: ServerConfigurationManager

Example Usage:
    >>> from mediahub.config import (
    ...     ServerApplicationPaths, ServerConfigurationManager, YamlConfigurationPersistence,
    ... )
    >>> paths = ServerApplicationPaths.from_environment()
    >>> manager = ServerConfigurationManager(
    ...     paths, YamlConfigurationPersistence(paths.configuration_directory_path)
    ... )
    >>> print(paths.internal_metadata_path)
    /home/user/.mediahub/metadata
"""

from .server_config import (
    ENCODING_CONFIG_KEY,
    RECOMMENDED_FLAGS,
    ConfigurationFactory,
    ConfigurationStore,
    EncodingConfigurationFactory,
    EncodingOptions,
    ServerConfiguration,
)
from .validation import ConfigValidator, RejectionReason, ReplaceResult
from .filesystem import FileSystem, LocalFileSystem
from .paths import ServerApplicationPaths, metadata_path, transcode_path
from .events import (
    ConfigurationEvents,
    ConfigurationUpdatedEvent,
    ConfigurationUpdatingEvent,
    EventChannel,
    NamedConfigurationUpdatedEvent,
)
from .persistence import (
    ConfigurationPersistence,
    InMemoryConfigurationPersistence,
    YamlConfigurationPersistence,
)
from .manager import ServerConfigurationManager

__all__ = [
    # Model
    'ENCODING_CONFIG_KEY',
    'RECOMMENDED_FLAGS',
    'ConfigurationFactory',
    'ConfigurationStore',
    'EncodingConfigurationFactory',
    'EncodingOptions',
    'ServerConfiguration',
    # Validation
    'ConfigValidator',
    'RejectionReason',
    'ReplaceResult',
    'FileSystem',
    'LocalFileSystem',
    # Paths
    'ServerApplicationPaths',
    'metadata_path',
    'transcode_path',
    # Events
    'ConfigurationEvents',
    'ConfigurationUpdatedEvent',
    'ConfigurationUpdatingEvent',
    'EventChannel',
    'NamedConfigurationUpdatedEvent',
    # Persistence
    'ConfigurationPersistence',
    'InMemoryConfigurationPersistence',
    'YamlConfigurationPersistence',
    # Manager
    'ServerConfigurationManager',
]
