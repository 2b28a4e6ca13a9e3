"""
Configuration Persistence for MediaHub

Loads and saves the root server configuration and named configuration
fragments. The configuration manager only depends on the
ConfigurationPersistence protocol; YAML files are the default backend.

Layout of the YAML backend inside the configuration directory:
    system.yaml     root ServerConfiguration
    <key>.yaml      one file per named fragment (e.g. encoding.yaml)

Key Features:
- Deep merge of stored values over dataclass defaults
- Unknown keys are ignored with a warning
- Comment header on every written file
- Secure file permissions (0o600)
"""

import copy
import logging
import os
from dataclasses import is_dataclass
from typing import Any, Dict, Optional, Protocol, Type, TypeVar

import yaml

from ..error_handling import ConfigurationError, wrap_error
from .server_config import ServerConfiguration, field_names, normalize_key, to_dict

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConfigurationPersistence(Protocol):
    """Load/save contract used by the configuration manager."""

    def load_root(self) -> ServerConfiguration:
        ...

    def save_root(self, config: ServerConfiguration) -> None:
        ...

    def load_named(self, key: str, configuration_type: Type[T]) -> Optional[T]:
        """Return the stored fragment, or None if nothing is stored for key."""
        ...

    def save_named(self, key: str, configuration: Any) -> None:
        ...


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = copy.deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def serialize(configuration: Any) -> Dict[str, Any]:
    """Convert a dataclass or mapping fragment to a plain dict."""
    if is_dataclass(configuration):
        return to_dict(configuration)
    if isinstance(configuration, dict):
        return copy.deepcopy(configuration)
    raise ConfigurationError(
        f"Cannot serialize configuration of type {type(configuration).__name__}"
    )


def _check_types(
    values: Dict[str, Any],
    defaults: Dict[str, Any],
    source: str
) -> Dict[str, Any]:
    """Reject stored values whose type differs from the field default.

    A null value (an empty YAML entry) falls back to the default.

    Raises:
        ConfigurationError: If a value has the wrong type
    """
    checked = {}
    for key, value in values.items():
        default = defaults[key]
        if value is None:
            checked[key] = default
            continue

        if isinstance(default, bool):
            valid = isinstance(value, bool)
        elif isinstance(default, int):
            valid = isinstance(value, int) and not isinstance(value, bool)
        elif isinstance(default, str):
            valid = isinstance(value, str)
        else:
            valid = True

        if not valid:
            raise ConfigurationError(
                f"Invalid type for {key} in {source}: expected {type(default).__name__}, "
                f"got {type(value).__name__}",
                context={"field": key, "file": source}
            )
        checked[key] = value
    return checked


def deserialize(data: Dict[str, Any], configuration_type: Type[T], source: str = "") -> T:
    """Build configuration_type from data merged over its defaults.

    Raises:
        ConfigurationError: If a known field holds a value of the wrong type
    """
    if not is_dataclass(configuration_type):
        return configuration_type(_deep_merge(serialize(configuration_type()), data))

    source = source or configuration_type.__name__
    known = field_names(configuration_type)
    unknown = sorted(set(data) - set(known))
    if unknown:
        logger.warning(f"Ignoring unknown configuration keys in {source}: {unknown}")

    defaults = to_dict(configuration_type())
    values = _check_types({k: v for k, v in data.items() if k in known}, defaults, source)
    merged = _deep_merge(defaults, values)
    return configuration_type(**merged)


class YamlConfigurationPersistence:
    """Stores configuration as YAML files in a directory.

    Example:
        >>> persistence = YamlConfigurationPersistence(paths.configuration_directory_path)
        >>> config = persistence.load_root()
    """

    ROOT_FILE_NAME = "system.yaml"

    def __init__(self, config_dir: str):
        self.config_dir = os.path.expanduser(str(config_dir))

    def _path_for(self, key: Optional[str]) -> str:
        if key is None:
            return os.path.join(self.config_dir, self.ROOT_FILE_NAME)
        return os.path.join(self.config_dir, f"{self._check_key(key)}.yaml")

    def _check_key(self, key: str) -> str:
        """Return the normalized key if it names a file inside config_dir.

        Raises:
            ConfigurationError: If the key is empty, names the root file, or
                contains a path separator or ``..``
        """
        normalized = normalize_key(key or "")
        root_name = os.path.splitext(self.ROOT_FILE_NAME)[0]
        separators = [sep for sep in (os.sep, os.altsep, "/") if sep]

        if not normalized:
            reason = "cannot be empty"
        elif normalized == root_name:
            reason = f"is reserved for {self.ROOT_FILE_NAME}"
        elif ".." in normalized or any(sep in normalized for sep in separators):
            reason = "cannot contain path separators or '..'"
        else:
            return normalized

        raise ConfigurationError(
            f"Invalid configuration key {key!r}: {reason}",
            context={"key": key, "config_dir": self.config_dir}
        )

    def _ensure_config_directory(self) -> None:
        if self.config_dir and not os.path.exists(self.config_dir):
            os.makedirs(self.config_dir, mode=0o700, exist_ok=True)

    def _read(self, path: str) -> Optional[Dict[str, Any]]:
        if not os.path.exists(path):
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise wrap_error(e, "Failed to parse YAML config", file=path)
        except OSError as e:
            raise wrap_error(e, "Failed to read config file", file=path)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")
        return data

    def _write(self, path: str, data: Dict[str, Any], title: str) -> None:
        self._ensure_config_directory()

        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(f"# MediaHub {title}\n")
                f.write("# Written by the server; edit while the server is stopped\n")
                f.write("\n")

                yaml.safe_dump(
                    data,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True
                )

            os.chmod(path, 0o600)
        except OSError as e:
            raise wrap_error(e, "Failed to write config file", file=path)

        logger.debug(f"Wrote {title} to {path}")

    def load_root(self) -> ServerConfiguration:
        """Load the root configuration, creating the file on first run.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        path = self._path_for(None)
        data = self._read(path)

        if data is None:
            logger.info(f"No server configuration at {path}, writing defaults")
            config = ServerConfiguration()
            self.save_root(config)
            return config

        return deserialize(data, ServerConfiguration, source=path)

    def save_root(self, config: ServerConfiguration) -> None:
        """Raises ConfigurationError if the file cannot be written."""
        self._write(self._path_for(None), serialize(config), "server configuration")

    def load_named(self, key: str, configuration_type: Type[T]) -> Optional[T]:
        """Return the stored fragment; keys that cannot be stored have none."""
        try:
            path = self._path_for(key)
        except ConfigurationError as e:
            logger.warning(f"Not loading named configuration: {e.message}")
            return None

        data = self._read(path)
        if data is None:
            return None
        return deserialize(data, configuration_type, source=path)

    def save_named(self, key: str, configuration: Any) -> None:
        self._write(self._path_for(key), serialize(configuration), f"{normalize_key(key)} configuration")


class InMemoryConfigurationPersistence:
    """Keeps serialized copies in memory; for embedding and tests.

    Values are stored serialized so that later edits to a saved object do not
    leak into what a subsequent load returns.
    """

    def __init__(self, root: Optional[ServerConfiguration] = None):
        self._root: Dict[str, Any] = serialize(root or ServerConfiguration())
        self._named: Dict[str, Dict[str, Any]] = {}
        self.save_count = 0

    def load_root(self) -> ServerConfiguration:
        return deserialize(self._root, ServerConfiguration)

    def save_root(self, config: ServerConfiguration) -> None:
        self._root = serialize(config)
        self.save_count += 1

    def load_named(self, key: str, configuration_type: Type[T]) -> Optional[T]:
        data = self._named.get(normalize_key(key))
        if data is None:
            return None
        return deserialize(data, configuration_type)

    def save_named(self, key: str, configuration: Any) -> None:
        self._named[normalize_key(key)] = serialize(configuration)
        self.save_count += 1
