"""Data contracts: the event records and the cache status projection."""

from __future__ import annotations

from .event import WIRE_CONTEXT, City, Sport, SportEvent, events_adapter
from .status import CacheStatus, format_size

__all__ = [
    "CacheStatus",
    "City",
    "Sport",
    "SportEvent",
    "WIRE_CONTEXT",
    "events_adapter",
    "format_size",
]
