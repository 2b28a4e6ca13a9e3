"""
Configuration change notifications for MediaHub.

Subscribers are plain callables taking a single event object. Delivery is
synchronous, on the calling thread, in subscription order. A subscriber that
raises stops delivery and the exception reaches whoever triggered the
change; there is no per-subscriber isolation, so later subscribers can rely
on earlier ones having run.

Example:
    >>> def on_updating(event):
    ...     print(f"About to apply {event.configuration}")
    >>> manager.events.configuration_updating.subscribe(on_updating)
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, TypeVar

from .server_config import ServerConfiguration

logger = logging.getLogger(__name__)

E = TypeVar("E")


@dataclass(frozen=True)
class ConfigurationUpdatingEvent:
    """Fired before a root configuration is committed.

    Attributes:
        configuration: The accepted candidate about to become current
    """
    configuration: ServerConfiguration


@dataclass(frozen=True)
class ConfigurationUpdatedEvent:
    """Fired after the root configuration is committed and paths refreshed.

    Attributes:
        configuration: The configuration now current
    """
    configuration: ServerConfiguration


@dataclass(frozen=True)
class NamedConfigurationUpdatedEvent:
    """Fired after a named configuration fragment is committed.

    Attributes:
        key: Normalized configuration key
        configuration: The fragment now stored under key
    """
    key: str
    configuration: Any


Subscriber = Callable[[E], None]


def _name(subscriber: Callable) -> str:
    return getattr(subscriber, "__name__", repr(subscriber))


class EventChannel(Generic[E]):
    """Ordered list of subscribers for one kind of event."""

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()
        self._subscribers: List[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        """Add a subscriber; subscribing twice delivers twice.

        Raises:
            TypeError: If subscriber is not callable
        """
        if not callable(subscriber):
            raise TypeError("Subscriber must be callable")

        with self._lock:
            self._subscribers.append(subscriber)
            logger.debug(f"Added subscriber {_name(subscriber)} to {self.name}, total: {len(self._subscribers)}")

    def unsubscribe(self, subscriber: Subscriber) -> bool:
        """Remove the first registration of subscriber.

        Returns:
            True if subscriber was found and removed, False otherwise
        """
        with self._lock:
            try:
                self._subscribers.remove(subscriber)
            except ValueError:
                logger.warning(f"Subscriber {_name(subscriber)} not found on {self.name}")
                return False
            logger.debug(f"Removed subscriber {_name(subscriber)} from {self.name}, remaining: {len(self._subscribers)}")
            return True

    def publish(self, event: E) -> None:
        """Deliver event to a snapshot of the current subscribers.

        Raises:
            Exception: Whatever the first failing subscriber raised
        """
        with self._lock:
            subscribers = self._subscribers.copy()

        for subscriber in subscribers:
            try:
                subscriber(event)
            except Exception:
                logger.debug(f"Subscriber {_name(subscriber)} on {self.name} raised, aborting delivery")
                raise

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)


class ConfigurationEvents:
    """The notification channels owned by a configuration manager.

    Attributes:
        configuration_updating: Pre-replace signal for the root configuration
        configuration_updated: Post-update signal for the root configuration
        named_configuration_updated: Post-update signal for named fragments
    """

    def __init__(self):
        self.configuration_updating: EventChannel[ConfigurationUpdatingEvent] = EventChannel("configuration_updating")
        self.configuration_updated: EventChannel[ConfigurationUpdatedEvent] = EventChannel("configuration_updated")
        self.named_configuration_updated: EventChannel[NamedConfigurationUpdatedEvent] = EventChannel(
            "named_configuration_updated"
        )
