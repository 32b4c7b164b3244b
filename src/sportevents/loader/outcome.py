"""LoadResult — events plus where they came from and how much to trust them."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass

from sportevents.core.contracts.event import SportEvent
from sportevents.core.errors import EventsError

from .strategy import DataSource, LoadStrategy

FALLBACK_NOTICE = "Showing cached data (server unavailable)"
STALE_NOTICE = "Showing cached data (may be out of date)"


@dataclass(frozen=True, slots=True)
class LoadResult:
    """
    Successful outcome of one `EventLoader.load()` call.

    Hard failures are raised, never returned, so a `LoadResult` is always
    either a fresh success or a degraded one.

    Attributes
    ----------
    events : list[SportEvent]
        The served collection.
    source : DataSource
        Cache or network.
    strategy : LoadStrategy
        Strategy the call ran with.
    stale : bool
        Served from a cache older than the freshness window.
    fallback : bool
        Served from cache because the remote fetch failed (api-first).
    fallback_error : EventsError | None
        The remote error that triggered the fallback.
    refresh : Future | None
        Handle of the background refresh spawned by this call, if any.
    """

    events: list[SportEvent]
    source: DataSource
    strategy: LoadStrategy
    stale: bool = False
    fallback: bool = False
    fallback_error: EventsError | None = None
    refresh: Future[list[SportEvent] | None] | None = None

    @property
    def from_cache(self) -> bool:
        return self.source is DataSource.CACHE

    @property
    def degraded(self) -> bool:
        """True when the data is a stale or fallback copy from the cache."""
        return self.from_cache and (self.stale or self.fallback)

    @property
    def notice(self) -> str | None:
        """User-facing annotation for degraded results, else None."""
        if self.fallback:
            return FALLBACK_NOTICE
        if self.stale:
            return STALE_NOTICE
        return None


__all__ = ["FALLBACK_NOTICE", "LoadResult", "STALE_NOTICE"]
