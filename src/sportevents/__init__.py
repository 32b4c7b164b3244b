"""SportEvents: sports event listings from a remote API with an offline disk cache.

The public entry point is :class:`sportevents.loader.EventLoader`; the
``sportevents`` console script lives in :mod:`sportevents.cli`.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
