from __future__ import annotations

from .base import EventSource
from .client import HttpEventSource

__all__ = ["EventSource", "HttpEventSource"]
