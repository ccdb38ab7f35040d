"""Synchronous publish/subscribe channels.

A listener that raises is logged and skipped; the remaining listeners on the
channel still receive the value.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
import itertools
from typing import Generic, TypeVar

from feedline.errors import NotifierError
from feedline.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

ListenerId = str
Listener = Callable[[T], None]

_listener_ids = itertools.count(1)


def next_listener_id() -> ListenerId:
    return f"lid-{next(_listener_ids)}"


class Channel(Generic[T]):
    """Fan a value out to every subscribed listener."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._listeners: dict[ListenerId, Listener[T]] = {}

    @property
    def name(self) -> str:
        return self._name

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener[T]) -> ListenerId:
        if not callable(listener):
            raise NotifierError(f"Listener for channel '{self._name}' must be callable.")
        listener_id = next_listener_id()
        self._listeners[listener_id] = listener
        return listener_id

    def unsubscribe(self, listener_id: ListenerId) -> bool:
        """Remove a listener; unknown or already-removed ids are a no-op."""
        return self._listeners.pop(listener_id, None) is not None

    def publish(self, value: T) -> int:
        """Deliver ``value`` to each listener and return how many completed."""
        delivered = 0
        # Snapshot so listeners may unsubscribe while being called.
        for listener_id, listener in tuple(self._listeners.items()):
            try:
                listener(value)
            except Exception:
                logger.exception(
                    "Listener %s on channel '%s' raised; continuing with remaining listeners.",
                    listener_id,
                    self._name,
                )
                continue
            delivered += 1
        return delivered


class KeyedChannel(Generic[K, T]):
    """One :class:`Channel` per key, created on first subscribe and released when empty."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._channels: dict[K, Channel[T]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._channels

    def listener_count(self, key: K) -> int:
        channel = self._channels.get(key)
        return len(channel) if channel is not None else 0

    def subscribe(self, key: K, listener: Listener[T]) -> ListenerId:
        channel = self._channels.get(key)
        if channel is None:
            channel = Channel(f"{self._name}[{key}]")
            self._channels[key] = channel
        return channel.subscribe(listener)

    def unsubscribe(self, key: K, listener_id: ListenerId) -> bool:
        channel = self._channels.get(key)
        if channel is None:
            return False
        removed = channel.unsubscribe(listener_id)
        if not len(channel):
            del self._channels[key]
        return removed

    def publish(self, key: K, value: T) -> int:
        channel = self._channels.get(key)
        if channel is None:
            return 0
        return channel.publish(value)
