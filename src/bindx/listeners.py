"""Synchronous event channels.

A Listeners instance is one named channel: callbacks are invoked in
registration order, on the calling thread, before trigger() returns.
EventEmitter groups channels by event type and is the event mechanism
widgets, properties and bindings talk through.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

Disposer = Callable[[], None]

_EVENT_ATTR = re.compile(r"^on_[a-z]")


@dataclass
class ChangeEvent:
    """Payload of every ``<property>_changed`` event."""

    target: Any
    type: str
    value: Any
    timestamp: float = field(default_factory=time.time)


class Listeners(Generic[T]):
    """Ordered set of callbacks for a single event type."""

    def __init__(self, target: object = None, type: str = "") -> None:
        self.target = target
        self.type = type
        self._subscribers: list[Callable[[T], Any]] = []
        self._disposed = False

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, callback: object) -> bool:
        return callback in self._subscribers

    def add_listener(self, callback: Callable[[T], Any]) -> Disposer:
        """Register a callback. Returns a function that removes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            self.remove_listener(callback)

        return _unsubscribe

    def remove_listener(self, callback: Callable[[T], Any]) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass  # already removed

    def once(self, callback: Callable[[T], Any]) -> Disposer:
        """Register a callback that removes itself after the first event."""

        def _once(event: T) -> None:
            self.remove_listener(_once)
            callback(event)

        return self.add_listener(_once)

    def trigger(self, event: T) -> None:
        """Push an event to all callbacks registered at call time."""
        if self._disposed:
            return
        for callback in list(self._subscribers):
            callback(event)

    def dispose(self) -> None:
        self._disposed = True
        self._subscribers.clear()

    def __repr__(self) -> str:
        return f"Listeners({self.type!r}, {len(self._subscribers)} listener(s))"


class EventEmitter:
    """Mixin: named event channels, created on first use."""

    def _listener_store(self) -> dict[str, Listeners]:
        store = self.__dict__.get("_bindx_listeners")
        if store is None:
            store = {}
            self.__dict__["_bindx_listeners"] = store
        return store

    def listeners(self, type: str) -> Listeners:
        store = self._listener_store()
        if type not in store:
            store[type] = Listeners(self, type)
        return store[type]

    def on(self, type: str, callback: Callable[[Any], Any]) -> Disposer:
        return self.listeners(type).add_listener(callback)

    def off(self, type: str, callback: Callable[[Any], Any]) -> None:
        store = self._listener_store()
        if type in store:
            store[type].remove_listener(callback)

    def once(self, type: str, callback: Callable[[Any], Any]) -> Disposer:
        return self.listeners(type).once(callback)

    def trigger(self, type: str, event: Any = None) -> None:
        store = self._listener_store()
        if type in store:
            store[type].trigger(event)

    def _dispose_listeners(self) -> None:
        store = self._listener_store()
        for channel in store.values():
            channel.dispose()
        store.clear()


def change_event(property_name: str) -> str:
    """Name of the event fired when ``property_name`` changes."""
    return f"{property_name}_changed"


class EventChannel:
    """Descriptor created by event()."""

    def __init__(self) -> None:
        self.name = ""
        self.type = ""

    def __set_name__(self, owner: type, name: str) -> None:
        if not _EVENT_ATTR.match(name):
            raise TypeError(f'Invalid name for event property "{name}", it must start with "on_"')
        self.name = name
        self.type = name[3:]

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        if isinstance(instance, EventEmitter):
            return instance.listeners(self.type)
        key = f"_bindx_event_{self.name}"
        if key not in instance.__dict__:
            instance.__dict__[key] = Listeners(instance, self.type)
        return instance.__dict__[key]

    def __set__(self, instance: Any, value: Any) -> None:
        raise AttributeError(f'Event property "{self.name}" is read-only')

    def __repr__(self) -> str:
        return f"event({self.type!r})"


def event() -> EventChannel:
    """A read-only Listeners attribute; ``on_select = event()`` dispatches ``select``.

    On an EventEmitter the channel is the one on()/trigger() use, so both
    APIs see the same events.
    """
    return EventChannel()
