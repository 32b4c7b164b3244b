"""Persistent event cache: snapshot file plus a small preference store."""

from __future__ import annotations

from .preferences import PreferenceStore
from .store import EventCache

__all__ = ["EventCache", "PreferenceStore"]
