"""
Server Configuration Model for MediaHub

This module defines the root server configuration, the encoding options
fragment, and the store/factory types used to register named configuration
fragments with the configuration manager.

The root configuration is replaced wholesale by the manager; callers build a
modified copy (``dataclasses.replace``) rather than editing the current one.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterable, Protocol, Tuple, Type


ENCODING_CONFIG_KEY = "encoding"

# Flags switched on by ServerConfigurationManager.apply_recommended_defaults()
RECOMMENDED_FLAGS: Tuple[str, ...] = (
    "enable_case_sensitive_item_ids",
    "skip_deserialization_for_basic_types",
    "enable_simple_artist_detection",
    "enable_normalized_item_by_name_ids",
    "disable_live_tv_channel_user_data_name",
    "enable_new_omdb_support",
    "camera_upload_upgraded",
    "collections_upgraded",
)


@dataclass
class ServerConfiguration:
    """Root server configuration.

    Attributes:
        metadata_path: Directory for item metadata (empty = under program data)
        certificate_path: TLS certificate file (empty = unset)
        server_name: Friendly server name
        ui_culture: UI culture code
        http_port: Local HTTP port
        https_port: Local HTTPS port
        enable_https: Serve HTTPS using certificate_path
        log_file_retention_days: Days to keep log files
    """

    metadata_path: str = ""
    certificate_path: str = ""
    server_name: str = ""
    ui_culture: str = "en-US"
    http_port: int = 8096
    https_port: int = 8920
    enable_https: bool = False
    log_file_retention_days: int = 3

    enable_case_sensitive_item_ids: bool = False
    skip_deserialization_for_basic_types: bool = False
    enable_simple_artist_detection: bool = False
    enable_normalized_item_by_name_ids: bool = False
    disable_live_tv_channel_user_data_name: bool = False
    enable_new_omdb_support: bool = False
    camera_upload_upgraded: bool = False
    collections_upgraded: bool = False


@dataclass
class EncodingOptions:
    """Transcoding settings stored under the ``encoding`` key.

    Attributes:
        transcoding_temp_path: Parent directory for transcodes (empty = unset)
        encoding_thread_count: Encoder threads, -1 for automatic
        enable_hardware_encoding: Allow hardware encoders
        hardware_acceleration_type: Accelerator name (e.g. "vaapi"), empty for none
    """

    transcoding_temp_path: str = ""
    encoding_thread_count: int = -1
    enable_hardware_encoding: bool = True
    hardware_acceleration_type: str = ""


@dataclass(frozen=True)
class ConfigurationStore:
    """Registration of a named configuration fragment type.

    Attributes:
        key: Name the fragment is stored under (case-insensitive)
        configuration_type: Class instantiated with no arguments for defaults
    """

    key: str
    configuration_type: Type[Any]

    def __post_init__(self):
        if not self.key or not self.key.strip():
            raise ValueError("ConfigurationStore key cannot be empty")
        object.__setattr__(self, "key", normalize_key(self.key))

    def create_default(self) -> Any:
        return self.configuration_type()


class ConfigurationFactory(Protocol):
    """Anything that contributes named configuration stores."""

    def get_configurations(self) -> Iterable[ConfigurationStore]:
        ...


@dataclass
class EncodingConfigurationFactory:
    """Contributes the ``encoding`` store."""

    stores: Tuple[ConfigurationStore, ...] = field(
        default_factory=lambda: (ConfigurationStore(ENCODING_CONFIG_KEY, EncodingOptions),)
    )

    def get_configurations(self) -> Iterable[ConfigurationStore]:
        return self.stores


def normalize_key(key: str) -> str:
    """Named configuration keys compare case-insensitively."""
    return key.strip().lower()


def field_names(configuration_type: Type[Any]) -> Tuple[str, ...]:
    return tuple(f.name for f in fields(configuration_type))


def to_dict(configuration: Any) -> Dict[str, Any]:
    """Flat dataclass to dict, preserving declaration order."""
    return {name: getattr(configuration, name) for name in field_names(type(configuration))}
