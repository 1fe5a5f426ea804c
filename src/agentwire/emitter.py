"""Minimal synchronous listener registry shared by the stream components."""

from __future__ import annotations

from collections import defaultdict

from agentwire.constants import Listener


class Emitter:
    """Register callbacks per event name and invoke them in order.

    Listeners run synchronously on the caller's stack, in registration
    order.  Exceptions raised by a listener propagate to whoever triggered
    the emit.
    """

    #: Event names this emitter accepts.  Empty means any name.
    EVENTS: tuple[str, ...] = ()

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def on(self, event: str, callback: Listener) -> None:
        """Register *callback* for *event*."""
        self._check_event(event)
        self._listeners[event].append(callback)

    def off(self, event: str, callback: Listener) -> None:
        """Remove a previously registered *callback*.  Unknown ones are ignored."""
        self._check_event(event)
        listeners = self._listeners.get(event)
        if listeners and callback in listeners:
            listeners.remove(callback)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def _emit(self, event: str, *args: object) -> None:
        # Snapshot so a listener may unsubscribe itself mid-dispatch.
        for callback in list(self._listeners.get(event, ())):
            callback(*args)

    def _check_event(self, event: str) -> None:
        if self.EVENTS and event not in self.EVENTS:
            msg = f"Unknown event {event!r} for {type(self).__name__}"
            raise ValueError(msg)
