"""Disk-backed cache for the most recently fetched event collection.

Layout
------
- Snapshot:  ``<cache_dir>/sports_events_cache.json``, a JSON array of events,
  datetimes in ISO-8601 UTC (see :mod:`sportevents.core.contracts.event`)
- Timestamp: key ``last_events_update`` in ``<cache_dir>/preferences.json``

Guarantees
----------
- One snapshot per cache directory; every save replaces it whole.
- A save that fails to encode or write leaves the previous payload *and*
  timestamp in place and raises :class:`PersistenceError`.
- "Never saved" and "saved an empty list" are different states.
- Reads never raise: an unreadable snapshot is reported as
  :class:`~sportevents.core.result.Failed` by :meth:`EventCache.read` and as
  ``None`` by :meth:`EventCache.load`.

Usage
-----
>>> cache = EventCache(Path("/tmp/sportevents"))
>>> cache.save(events)
>>> cache.is_fresh()
True
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from datetime import datetime, timedelta
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from sportevents.core.clock import Clock, utc_now
from sportevents.core.contracts.event import SportEvent
from sportevents.core.contracts.status import CacheStatus
from sportevents.core.errors import PersistenceError
from sportevents.core.result import CacheResult, Empty, Failed, Hit
from sportevents.core.settings import DEFAULT_FRESHNESS_SECONDS, Settings, get_logger

from .files import atomic_write
from .preferences import PreferenceStore

M = TypeVar("M", bound=BaseModel)

logger = get_logger(__name__)


class EventCache(Generic[M]):
    """
    Persistent snapshot of one event collection plus its last-update time.

    Parameters
    ----------
    base_dir : Path
        Directory for the snapshot file and the preference store.
    model : type[M]
        Pydantic model of one record. The cache assumes nothing else about it.
    freshness_window : timedelta
        Default maximum age for :meth:`is_fresh`.
    clock : Clock
        Source of "now"; injected by tests.
    preferences : PreferenceStore | None
        Timestamp store; defaults to ``base_dir / preferences.json``.
    """

    CACHE_FILE_NAME = "sports_events_cache.json"
    LAST_UPDATE_KEY = "last_events_update"

    def __init__(
        self,
        base_dir: Path,
        *,
        model: type[M] = SportEvent,  # type: ignore[assignment]
        freshness_window: timedelta = timedelta(seconds=DEFAULT_FRESHNESS_SECONDS),
        clock: Clock = utc_now,
        preferences: PreferenceStore | None = None,
    ) -> None:
        self.base_dir: Path = base_dir
        self.path: Path = base_dir / self.CACHE_FILE_NAME
        self.freshness_window = freshness_window
        self._clock = clock
        self._prefs = preferences or PreferenceStore.in_directory(base_dir)
        self._adapter: TypeAdapter[list[M]] = TypeAdapter(list[model])  # type: ignore[valid-type]
        # Serializes writers and keeps status() consistent with a concurrent save.
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: Settings, *, clock: Clock = utc_now) -> EventCache[SportEvent]:
        """Build the `SportEvent` cache described by ``settings``."""
        return EventCache(
            settings.cache_dir,
            model=SportEvent,
            freshness_window=settings.freshness_window,
            clock=clock,
        )

    # ------------------------------- Writes ---------------------------------

    def save(self, events: Sequence[M]) -> None:
        """
        Replace the snapshot with ``events`` and stamp it with the current time.

        Raises
        ------
        PersistenceError
            If encoding or any disk write fails. The previous snapshot and its
            timestamp are still in place when this is raised.
        """
        try:
            payload = self._adapter.dump_json(list(events), indent=2)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Cannot encode {len(events)} events: {exc}") from exc

        now = self._clock()
        with self._lock:
            previous = self._read_bytes_or_none()
            try:
                atomic_write(self.path, payload)
            except OSError as exc:
                raise PersistenceError(f"Cannot write cache file {self.path}: {exc}") from exc
            try:
                self._prefs.set(self.LAST_UPDATE_KEY, now.isoformat())
            except PersistenceError:
                self._restore(previous)
                raise

        logger.info("Saved %d events to cache (%d bytes)", len(events), len(payload))

    def clear(self) -> None:
        """Remove snapshot and timestamp together. Clearing an empty cache is a no-op.

        The timestamp goes first: if either step fails, what remains is at worst
        a snapshot without a timestamp, which reads as stale.
        """
        with self._lock:
            self._prefs.remove(self.LAST_UPDATE_KEY)
            try:
                existed = self.path.exists()
                self.path.unlink(missing_ok=True)
            except OSError as exc:
                raise PersistenceError(f"Cannot remove cache file {self.path}: {exc}") from exc

        if existed:
            logger.info("Cache cleared")
        else:
            logger.debug("Cache already empty")

    # ------------------------------- Reads ----------------------------------

    def read(self) -> CacheResult[list[M]]:
        """Return the snapshot as `Hit`, `Empty` or `Failed`. Never raises.

        Waits for an in-progress `save()` so the payload is never newer than
        the timestamp a caller reads next.
        """
        with self._lock:
            try:
                raw = self.path.read_bytes()
            except FileNotFoundError:
                return Empty()
            except OSError as exc:
                return Failed(PersistenceError(f"Cannot read cache file {self.path}: {exc}"))

        try:
            events = self._adapter.validate_json(raw)
        except ValidationError as exc:
            return Failed(
                PersistenceError(f"Cached snapshot is unreadable ({exc.error_count()} errors)")
            )
        return Hit(events)

    def load(self) -> list[M] | None:
        """Return the cached events, or ``None`` if absent or unreadable."""
        result = self.read()
        if isinstance(result, Failed):
            logger.warning("Ignoring cache: %s", result.error)
        elif isinstance(result, Hit):
            logger.debug("Loaded %d events from cache", len(result.value))
        return result.to_optional()

    def last_update_time(self) -> datetime | None:
        """Return the time of the last successful save, if any."""
        with self._lock:
            raw = self._prefs.get(self.LAST_UPDATE_KEY)
        if not isinstance(raw, str):
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logger.warning("Ignoring malformed cache timestamp %r", raw)
            return None

    def is_fresh(self, max_age: timedelta | None = None) -> bool:
        """Return True if the last save is younger than ``max_age``.

        ``max_age`` defaults to the cache's freshness window. Without a
        recorded timestamp the cache is never fresh.
        """
        last_update = self.last_update_time()
        if last_update is None:
            return False
        window = max_age if max_age is not None else self.freshness_window
        return self._clock() - last_update < window

    def size_bytes(self) -> int:
        """Return the snapshot file size, 0 when there is none."""
        try:
            return self.path.stat().st_size
        except OSError:
            return 0

    def status(self) -> CacheStatus:
        """Return a fresh `CacheStatus`; `record_count` comes from `load()`."""
        with self._lock:
            events = self.load()
            return CacheStatus(
                has_snapshot=events is not None,
                is_fresh=self.is_fresh(),
                last_update=self.last_update_time(),
                size_bytes=self.size_bytes(),
                record_count=len(events) if events is not None else 0,
            )

    # ------------------------------- Internals ------------------------------

    def _read_bytes_or_none(self) -> bytes | None:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError(f"Cannot read cache file {self.path}: {exc}") from exc

    def _restore(self, previous: bytes | None) -> None:
        """Put the pre-save payload back after a failed timestamp write."""
        try:
            if previous is None:
                self.path.unlink(missing_ok=True)
            else:
                atomic_write(self.path, previous)
        except OSError as exc:
            logger.error("Could not roll back cache file %s: %s", self.path, exc)


__all__ = ["EventCache"]
