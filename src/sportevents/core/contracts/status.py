"""CacheStatus — a read-only projection of the event cache.

Never persisted: the cache recomputes it from the stored snapshot and the
current clock on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


def format_size(size_bytes: int) -> str:
    """Return a short human-readable size (``512 B``, ``1.5 KB``, ``2.0 MB``)."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


@dataclass(frozen=True, slots=True)
class CacheStatus:
    """
    Diagnostic view of the cache at one instant.

    Attributes
    ----------
    has_snapshot : bool
        False only when nothing was ever saved, the cache was cleared, or the
        stored snapshot cannot be decoded.
    is_fresh : bool
        Whether the last update lies within the freshness window.
    last_update : datetime | None
        Timestamp of the last successful save.
    size_bytes : int
        Size of the snapshot file on disk.
    record_count : int
        Number of events `load()` returns right now (0 when absent).
    """

    has_snapshot: bool
    is_fresh: bool
    last_update: datetime | None
    size_bytes: int
    record_count: int

    @property
    def size_label(self) -> str:
        return format_size(self.size_bytes)

    @property
    def description(self) -> str:
        """One-line summary suitable for a settings screen."""
        if not self.has_snapshot:
            return "Cache is empty"
        freshness = "fresh" if self.is_fresh else "stale"
        return f"{self.record_count} events, {freshness}, {self.size_label}"


__all__ = ["CacheStatus", "format_size"]
