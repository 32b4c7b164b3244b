"""Injectable wall clock.

Everything that compares timestamps (cache freshness, status) takes a
``Clock`` so tests can move time forward without sleeping.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


__all__ = ["Clock", "utc_now"]
