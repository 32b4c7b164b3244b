"""
Background cache refresh.

This module provides the worker function the loader submits to its executor
when cache-first serves a stale snapshot. It wraps fetch → save → publish
with exception handling so that nothing ever reaches the caller that
triggered the refresh.

Ordering: the cache write happens before the notification, so a listener
that re-reads the cache sees the refreshed snapshot. A foreground `load()`
running concurrently may see either snapshot.
"""

from __future__ import annotations

from sportevents.cache.store import EventCache
from sportevents.core.contracts.event import SportEvent
from sportevents.core.errors import EventsError, PersistenceError
from sportevents.core.settings import get_logger
from sportevents.remote.base import EventSource

from .notifications import BackgroundUpdateChannel

logger = get_logger(__name__)


def run_background_refresh(
    source: EventSource,
    cache: EventCache[SportEvent],
    channel: BackgroundUpdateChannel,
) -> list[SportEvent] | None:
    """
    Fetch fresh events, store them and notify listeners.

    Never raises. A failed refresh is logged and not retried; the next
    `load()` call is the retry opportunity.

    Returns
    -------
    list[SportEvent] | None
        The refreshed collection, or None if the refresh failed.
    """
    logger.info("Background refresh started")

    try:
        events = source.fetch_events()
    except EventsError as exc:
        logger.warning("Background refresh failed: %s", exc)
        return None
    except Exception:
        logger.exception("Background refresh crashed in the remote source")
        return None

    try:
        cache.save(events)
    except PersistenceError as exc:
        # Listeners still get the data; the next load will find the old snapshot.
        logger.warning("Background refresh could not update the cache: %s", exc)

    logger.info("Background refresh completed: %d events", len(events))
    channel.publish(events)
    return events


__all__ = ["run_background_refresh"]
