"""Load orchestration: strategies, results, background refresh notifications.

Currently exposed:

- :class:`EventLoader`: the single entry point, `load(strategy)`
- :class:`LoadStrategy`, :class:`DataSource`, :class:`LoadResult`
- :class:`BackgroundUpdateChannel`: observers of background refreshes
"""

from __future__ import annotations

from .notifications import BackgroundUpdateChannel, Subscription
from .orchestrator import EventLoader
from .outcome import LoadResult
from .strategy import DEFAULT_STRATEGY, DataSource, LoadStrategy

__all__ = [
    "BackgroundUpdateChannel",
    "DEFAULT_STRATEGY",
    "DataSource",
    "EventLoader",
    "LoadResult",
    "LoadStrategy",
    "Subscription",
]
