"""
"Background update completed" notification channel.

The loader publishes the refreshed event collection here after a background
refresh has written it to the cache. Delivery is in-process and synchronous
on the publishing thread: every listener registered at publish time is
called once, in registration order. Nothing is persisted or replayed.

Listeners are explicit and lifetime-bound: `subscribe()` returns a
`Subscription` handle that removes the listener when cancelled or when its
``with`` block exits.

Example
-------
>>> channel = BackgroundUpdateChannel()
>>> with channel.subscribe(lambda events: print(len(events))):
...     _ = channel.publish([])
0
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from types import TracebackType

from sportevents.core.contracts.event import SportEvent
from sportevents.core.settings import get_logger

Listener = Callable[[list[SportEvent]], None]

logger = get_logger(__name__)


class Subscription:
    """Handle for one registered listener."""

    __slots__ = ("_channel", "_listener", "_active")

    def __init__(self, channel: BackgroundUpdateChannel, listener: Listener) -> None:
        self._channel = channel
        self._listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Unregister the listener; cancelling twice is a no-op."""
        if self._active:
            self._channel._remove(self._listener)
            self._active = False

    def __enter__(self) -> Subscription:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cancel()


class BackgroundUpdateChannel:
    """Fan-out of refreshed event collections to in-process listeners."""

    name = "sports_events_updated_in_background"

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Subscription:
        """Register ``listener`` and return its `Subscription`."""
        with self._lock:
            self._listeners.append(listener)
        return Subscription(self, listener)

    @property
    def listeners(self) -> tuple[Listener, ...]:
        """Return the currently registered listeners."""
        with self._lock:
            return tuple(self._listeners)

    def publish(self, events: list[SportEvent]) -> int:
        """
        Deliver ``events`` to every listener and return how many succeeded.

        A listener that raises is logged and skipped; the remaining listeners
        still receive the update and the publisher never sees the error.
        """
        delivered = 0
        for listener in self.listeners:
            try:
                listener(events)
            except Exception:
                logger.exception("Background update listener %r failed", listener)
            else:
                delivered += 1
        logger.debug("Published %d events to %d listeners", len(events), delivered)
        return delivered

    def _remove(self, listener: Listener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass


__all__ = ["BackgroundUpdateChannel", "Listener", "Subscription"]
