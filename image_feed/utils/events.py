"""Typed publish/subscribe channels for service change events."""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FeedChanged:
    """The photo feed changed.

    ``index`` is set when a single photo was replaced in place; ``None`` means
    the whole feed must be re-read (page appended or feed cleared).
    """
    index: Optional[int] = None


@dataclass(frozen=True)
class AvatarChanged:
    """The profile image URL was updated."""
    url: str


class Subscription:
    """Handle returned by EventChannel.subscribe."""

    def __init__(self, channel: "EventChannel", callback: Callable):
        self._channel = channel
        self._callback = callback

    def unsubscribe(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        self._channel._remove(self._callback)


class EventChannel(Generic[T]):
    """Delivers events of one payload type to subscribers in subscription order."""

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()
        self._handlers: List[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        """Register a callback.

        Args:
            callback: Called with each published event

        Returns:
            Subscription that can be used to unsubscribe
        """
        with self._lock:
            self._handlers.append(callback)
        return Subscription(self, callback)

    def publish(self, event: T) -> None:
        """Deliver an event to every current subscriber."""
        with self._lock:
            handlers = list(self._handlers)

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Subscriber of %s failed handling %s", self.name, event)

    def _remove(self, callback: Callable) -> None:
        with self._lock:
            if callback in self._handlers:
                self._handlers.remove(callback)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)
