"""
Event loader: one entry point reconciling the disk cache and the remote API.

Flow Overview
-------------
``EventLoader.load(strategy)`` consults the cache, optionally calls the
remote source, optionally writes back to the cache, and returns a
:class:`LoadResult` tagged with its provenance.

- **cache-first** (default): a cached snapshot is returned at once. When it
  is older than the freshness window a background refresh is submitted to
  the loader's executor; it saves the new snapshot and publishes it on the
  :class:`BackgroundUpdateChannel`. An empty cache means a synchronous fetch
  whose errors propagate.
- **api-first**: fetch and save; on any remote error serve the cache as a
  fallback, or raise :class:`NoDataAvailableError` when it is empty too.
- **cache-only**: never calls the remote; :class:`NoCacheAvailableError`
  when the cache is empty.
- **api-only**: never reads the cache, but writes through on success.

Design Principles
-----------------
- **Explicit wiring**: the cache, the source and the channel are passed in;
  :meth:`EventLoader.from_settings` is the only place that builds them.
- **Independent calls**: no state crosses `load()` calls except what the
  cache persists and the set of running background refreshes.
- **Scoped background work**: refreshes run on an executor owned by the
  loader; :meth:`EventLoader.close` waits for them to finish.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from types import TracebackType

from sportevents.cache.store import EventCache
from sportevents.core.clock import Clock, utc_now
from sportevents.core.contracts.event import SportEvent
from sportevents.core.contracts.status import CacheStatus
from sportevents.core.errors import (
    EventsError,
    NoCacheAvailableError,
    NoDataAvailableError,
    PersistenceError,
)
from sportevents.core.settings import Settings, get_logger
from sportevents.remote.base import EventSource
from sportevents.remote.client import HttpEventSource

from .background import run_background_refresh
from .notifications import BackgroundUpdateChannel
from .outcome import LoadResult
from .strategy import DEFAULT_STRATEGY, DataSource, LoadStrategy

logger = get_logger(__name__)

RefreshHandle = Future[list[SportEvent] | None]


class EventLoader:
    """
    Load events under one of four strategies.

    Parameters
    ----------
    cache : EventCache[SportEvent]
        Persistent snapshot store.
    source : EventSource
        Remote collaborator.
    channel : BackgroundUpdateChannel | None
        Where background refreshes are published; a private channel is
        created when omitted (see :attr:`channel`).
    executor : Executor | None
        Runs background refreshes. When omitted the loader owns a
        single-worker thread pool and shuts it down in :meth:`close`.
    """

    def __init__(
        self,
        cache: EventCache[SportEvent],
        source: EventSource,
        *,
        channel: BackgroundUpdateChannel | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.cache = cache
        self.source = source
        self.channel = channel or BackgroundUpdateChannel()
        self._owns_executor = executor is None
        self._executor: Executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="sportevents-refresh"
        )
        self._pending: set[RefreshHandle] = set()
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Settings, *, clock: Clock = utc_now) -> EventLoader:
        """Wire a loader from ``settings``: disk cache, HTTP source, new channel."""
        return cls(
            EventCache.from_settings(settings, clock=clock),
            HttpEventSource.from_settings(settings),
        )

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #
    def load(self, strategy: LoadStrategy | str = DEFAULT_STRATEGY) -> LoadResult:
        """
        Return events according to ``strategy``.

        Raises
        ------
        InvalidRequestError, RemoteUnavailableError, RemoteRejectedError, DecodeFailedError
            cache-first with an empty cache, and api-only, propagate remote errors.
        NoDataAvailableError
            api-first found neither remote data nor a cache.
        NoCacheAvailableError
            cache-only found an empty cache.
        """
        strategy = LoadStrategy(strategy)
        logger.info("Loading events with strategy %s", strategy.value)

        if strategy is LoadStrategy.CACHE_FIRST:
            return self._load_cache_first()
        if strategy is LoadStrategy.API_FIRST:
            return self._load_api_first()
        if strategy is LoadStrategy.CACHE_ONLY:
            return self._load_cache_only()
        return self._load_api_only()

    def refresh(self) -> LoadResult:
        """Force a network fetch and cache write (pull-to-refresh)."""
        logger.info("Forced refresh requested")
        return self._load_api_only()

    def clear_cache(self) -> None:
        """Remove the cached snapshot and its timestamp."""
        self.cache.clear()

    def cache_status(self) -> CacheStatus:
        """Return the current cache diagnostics."""
        return self.cache.status()

    @property
    def background_tasks(self) -> tuple[RefreshHandle, ...]:
        """Return the handles of refreshes that have not finished yet."""
        with self._lock:
            return tuple(self._pending)

    def wait_for_background(self, timeout: float | None = None) -> bool:
        """Block until running background refreshes finish.

        Returns False if ``timeout`` elapsed with refreshes still running.
        """
        pending = self.background_tasks
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self) -> None:
        """Stop accepting refreshes and wait for the running ones."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        else:
            self.wait_for_background()

    def __enter__(self) -> EventLoader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # --------------------------------------------------------------------- #
    # Strategies
    # --------------------------------------------------------------------- #
    def _load_cache_first(self) -> LoadResult:
        strategy = LoadStrategy.CACHE_FIRST
        cached = self.cache.load()

        if cached is not None:
            if self.cache.is_fresh():
                logger.info("Serving %d fresh events from cache", len(cached))
                return LoadResult(cached, DataSource.CACHE, strategy)

            logger.info("Cache is stale; serving %d events and refreshing", len(cached))
            handle = self._spawn_refresh()
            return LoadResult(cached, DataSource.CACHE, strategy, stale=True, refresh=handle)

        logger.info("Cache is empty; fetching from remote")
        events = self._fetch_and_cache()
        return LoadResult(events, DataSource.NETWORK, strategy)

    def _load_api_first(self) -> LoadResult:
        strategy = LoadStrategy.API_FIRST
        try:
            events = self._fetch_and_cache()
        except EventsError as exc:
            logger.warning("Remote fetch failed (%s); trying cache", exc)
            cached = self.cache.load()
            if cached is None:
                logger.error("Neither remote nor cache has data")
                raise NoDataAvailableError() from exc
            logger.info("Serving %d cached events as fallback", len(cached))
            return LoadResult(
                cached,
                DataSource.CACHE,
                strategy,
                stale=not self.cache.is_fresh(),
                fallback=True,
                fallback_error=exc,
            )
        return LoadResult(events, DataSource.NETWORK, strategy)

    def _load_cache_only(self) -> LoadResult:
        strategy = LoadStrategy.CACHE_ONLY
        cached = self.cache.load()
        if cached is None:
            raise NoCacheAvailableError()
        logger.info("Serving %d events from cache (offline)", len(cached))
        return LoadResult(
            cached, DataSource.CACHE, strategy, stale=not self.cache.is_fresh()
        )

    def _load_api_only(self) -> LoadResult:
        events = self._fetch_and_cache()
        return LoadResult(events, DataSource.NETWORK, LoadStrategy.API_ONLY)

    # --------------------------------------------------------------------- #
    # Helpers
    # --------------------------------------------------------------------- #
    def _fetch_and_cache(self) -> list[SportEvent]:
        """Fetch from the remote, then write through. A failed write is logged only."""
        events = self.source.fetch_events()
        try:
            self.cache.save(events)
        except PersistenceError as exc:
            logger.warning("Fetched %d events but could not cache them: %s", len(events), exc)
        return events

    def _spawn_refresh(self) -> RefreshHandle | None:
        """Submit a background refresh; return None when it cannot be scheduled."""
        with self._lock:
            if self._closed:
                logger.warning("Loader is closed; skipping background refresh")
                return None
            try:
                handle: RefreshHandle = self._executor.submit(
                    run_background_refresh, self.source, self.cache, self.channel
                )
            except RuntimeError as exc:
                # Raised by an executor that has already been shut down.
                logger.warning("Could not schedule background refresh: %s", exc)
                return None
            self._pending.add(handle)
        handle.add_done_callback(self._forget)
        return handle

    def _forget(self, handle: RefreshHandle) -> None:
        with self._lock:
            self._pending.discard(handle)


__all__ = ["EventLoader"]
