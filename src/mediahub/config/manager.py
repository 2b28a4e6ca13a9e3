"""
Server Configuration Manager for MediaHub

Owns the current server configuration and the named configuration fragments,
and keeps the derived application paths in step with them.

Replacing the root configuration:
    1. Validate the candidate against the current configuration
       (rejections are returned, nothing else happens)
    2. Publish configuration_updating with the candidate
    3. Persist the candidate
    4. Make the candidate current
    5. Recompute internal_metadata_path
    6. Publish configuration_updated

Replacing a named fragment persists and commits it, recomputes
transcode_path when the key is ``encoding``, then publishes
named_configuration_updated.

Thread Safety:
    Readers may call current() and get_named() from any thread and always
    see either the old or the new object. Replacements are expected to be
    serialized by the caller; the manager does not lock across
    validate/commit/notify.

Example:
    >>> paths = ServerApplicationPaths.from_environment()
    >>> persistence = YamlConfigurationPersistence(paths.configuration_directory_path)
    >>> manager = ServerConfigurationManager(paths, persistence)
    >>> candidate = dataclasses.replace(manager.current(), metadata_path="/srv/meta")
    >>> result = manager.replace_root(candidate)
    >>> if not result.accepted:
    ...     print(f"Rejected: {result.message}")
"""

import copy
import dataclasses
import logging
import threading
from typing import Any, Dict, Iterable, Optional, Tuple, Type, TypeVar

from .events import (
    ConfigurationEvents,
    ConfigurationUpdatedEvent,
    ConfigurationUpdatingEvent,
    NamedConfigurationUpdatedEvent,
)
from .filesystem import FileSystem, LocalFileSystem
from .paths import ApplicationPaths, metadata_path, transcode_path
from .persistence import ConfigurationPersistence
from .server_config import (
    ENCODING_CONFIG_KEY,
    RECOMMENDED_FLAGS,
    ConfigurationFactory,
    ConfigurationStore,
    EncodingConfigurationFactory,
    EncodingOptions,
    ServerConfiguration,
    normalize_key,
)
from .validation import ConfigValidator, ReplaceResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServerConfigurationManager:
    """Single source of truth for the server configuration.

    Args:
        application_paths: Shared paths object whose derived slots are updated
        persistence: Load/save backend for root and named configuration
        file_system: Filesystem checks for validation (defaults to local disk)
        factories: Configuration factories registering named fragment types;
            defaults to the encoding factory

    Attributes:
        events: Notification channels (see ConfigurationEvents)
        validator: Rules applied by replace_root()
    """

    def __init__(
        self,
        application_paths: ApplicationPaths,
        persistence: ConfigurationPersistence,
        file_system: Optional[FileSystem] = None,
        factories: Optional[Iterable[ConfigurationFactory]] = None,
    ):
        self.application_paths = application_paths
        self.persistence = persistence
        self.file_system = file_system or LocalFileSystem()
        self.validator = ConfigValidator(self.file_system)
        self.events = ConfigurationEvents()

        self._named_lock = threading.Lock()
        self._stores: Dict[str, ConfigurationStore] = {}
        self._named: Dict[str, Any] = {}

        self._configuration: ServerConfiguration = persistence.load_root()
        self._update_metadata_path()

        if factories is None:
            factories = [EncodingConfigurationFactory()]
        self.add_parts(factories)

        logger.info("ServerConfigurationManager initialized")

    def current(self) -> ServerConfiguration:
        """Return a copy of the current root configuration; never None.

        Edits to the copy have no effect until passed to replace_root().
        """
        return copy.deepcopy(self._configuration)

    @property
    def configuration_stores(self) -> Tuple[ConfigurationStore, ...]:
        return tuple(self._stores.values())

    def add_parts(self, factories: Iterable[ConfigurationFactory]) -> None:
        """Register the named configuration stores contributed by factories."""
        for factory in factories:
            for store in factory.get_configurations():
                self._stores[store.key] = store
                logger.debug(f"Registered configuration store '{store.key}' ({store.configuration_type.__name__})")

        self._update_transcode_path()

    def get_named(self, key: str, configuration_type: Optional[Type[T]] = None) -> Any:
        """Return a copy of the fragment stored under key.

        The fragment is taken from the cache, else loaded through persistence,
        else default-constructed. The type comes from the registered store,
        then from configuration_type, and falls back to a plain dict. Edits to
        the copy have no effect until passed to replace_named().

        Args:
            key: Configuration key, compared case-insensitively
            configuration_type: Type to use when no store is registered for key
        """
        return copy.deepcopy(self._get_named(normalize_key(key), configuration_type))

    def _get_named(self, key: str, configuration_type: Optional[Type[Any]]) -> Any:
        cached = self._named.get(key)
        if cached is not None:
            return cached

        store = self._stores.get(key)
        fragment_type = self._fragment_type(store, configuration_type)
        loaded = self.persistence.load_named(key, fragment_type)
        if loaded is None:
            loaded = store.create_default() if store is not None else fragment_type()

        with self._named_lock:
            # A concurrent replace_named wins over a lazy load.
            existing = self._named.get(key)
            if existing is not None:
                return existing
            named = dict(self._named)
            named[key] = loaded
            self._named = named

        return loaded

    def _fragment_type(
        self,
        store: Optional[ConfigurationStore],
        configuration_type: Optional[Type[Any]]
    ) -> Type[Any]:
        if store is not None:
            return store.configuration_type
        if configuration_type is not None:
            return configuration_type
        return dict

    def get_encoding_options(self) -> EncodingOptions:
        return self.get_named(ENCODING_CONFIG_KEY, EncodingOptions)

    def replace_root(self, candidate: ServerConfiguration) -> ReplaceResult:
        """Validate and, if accepted, commit a new root configuration.

        Returns:
            ReplaceResult.ok() when committed, otherwise the first rejection;
            a rejected candidate changes nothing and notifies no one

        Raises:
            TypeError: If candidate is not a ServerConfiguration
            ConfigurationError: If persisting the candidate fails (nothing committed)
            Exception: Whatever a subscriber raised during notification
        """
        if not isinstance(candidate, ServerConfiguration):
            raise TypeError(
                f"Expected ServerConfiguration, got {type(candidate).__name__}"
            )

        result = self.validator.validate(candidate, self._configuration)
        if not result.accepted:
            logger.warning(
                f"Configuration replacement rejected: {result.reason.value} "
                f"for {result.field}={result.path!r}"
            )
            return result

        candidate = copy.deepcopy(candidate)

        self.events.configuration_updating.publish(ConfigurationUpdatingEvent(copy.deepcopy(candidate)))

        self.persistence.save_root(candidate)
        self._configuration = candidate
        logger.info("Server configuration replaced")

        self._on_configuration_updated()
        return result

    def save_configuration(self) -> None:
        """Persist the current root configuration and publish it as updated.

        Used after in-process changes such as apply_recommended_defaults().
        """
        self.persistence.save_root(self._configuration)
        logger.info("Server configuration saved")
        self._on_configuration_updated()

    def replace_named(self, key: str, configuration: Any) -> ReplaceResult:
        """Commit a named fragment and publish named_configuration_updated.

        Raises:
            TypeError: If configuration is None or not an instance of the
                type registered for key
            ConfigurationError: If persisting the fragment fails (nothing committed)
        """
        key = normalize_key(key)
        if configuration is None:
            raise TypeError("configuration cannot be None")

        store = self._stores.get(key)
        if store is not None and not isinstance(configuration, store.configuration_type):
            raise TypeError(
                f"Configuration for '{key}' must be {store.configuration_type.__name__}, "
                f"got {type(configuration).__name__}"
            )

        configuration = copy.deepcopy(configuration)
        self.persistence.save_named(key, configuration)

        with self._named_lock:
            named = dict(self._named)
            named[key] = configuration
            self._named = named
        logger.info(f"Named configuration '{key}' replaced")

        if key == ENCODING_CONFIG_KEY:
            self._update_transcode_path()

        self.events.named_configuration_updated.publish(
            NamedConfigurationUpdatedEvent(key=key, configuration=copy.deepcopy(configuration))
        )
        return ReplaceResult.ok()

    def apply_recommended_defaults(self) -> bool:
        """Switch on every recommended flag that is still off.

        The current configuration is swapped for an updated copy; nothing is
        persisted or published until save_configuration() is called.

        Returns:
            True if any flag changed
        """
        config = self._configuration
        updates = {name: True for name in RECOMMENDED_FLAGS if not getattr(config, name)}
        if not updates:
            return False

        self._configuration = dataclasses.replace(config, **updates)
        logger.info(f"Applied recommended defaults: {sorted(updates)}")
        return True

    def _on_configuration_updated(self) -> None:
        self._update_metadata_path()
        self.events.configuration_updated.publish(ConfigurationUpdatedEvent(copy.deepcopy(self._configuration)))

    def _update_metadata_path(self) -> None:
        path = metadata_path(self._configuration, self.application_paths.program_data_path)
        self.application_paths.internal_metadata_path = path
        logger.debug(f"Internal metadata path: {path}")

    def _update_transcode_path(self) -> None:
        path = transcode_path(self.get_encoding_options())
        self.application_paths.transcode_path = path
        logger.debug(f"Transcode path: {path}")
