"""Core package initializer for SportEvents.

Settings, the error taxonomy, the typed cache-read result and the domain
contracts live in submodules; import them from there directly.
"""

from __future__ import annotations

__all__ = ["__doc__"]
