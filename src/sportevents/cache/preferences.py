"""Small JSON key-value store for cache metadata.

The snapshot's last-update timestamp lives here rather than inside the
snapshot file, so freshness never depends on the file's modification time or
on decoding the (possibly large) payload.

- File:    ``preferences.json`` next to the snapshot
- Content: one flat JSON object of JSON-safe values
- Writes:  whole-file replacement through :func:`atomic_write`

A missing or unreadable file reads as an empty store.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from sportevents.core.errors import PersistenceError
from sportevents.core.settings import get_logger

from .files import atomic_write

logger = get_logger(__name__)


class PreferenceStore:
    """Persist a handful of small values as one JSON object on disk."""

    FILE_NAME = "preferences.json"

    def __init__(self, path: Path) -> None:
        self.path: Path = path
        self._lock = threading.Lock()

    @classmethod
    def in_directory(cls, base_dir: Path) -> PreferenceStore:
        """Return a store backed by ``base_dir / preferences.json``."""
        return cls(base_dir / cls.FILE_NAME)

    # ------------------------------- Read API -------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key``, or ``default``."""
        return self._read_all().get(key, default)

    def keys(self) -> tuple[str, ...]:
        """Return the stored keys as a sorted tuple (stable for tests)."""
        return tuple(sorted(self._read_all()))

    # ------------------------------- Write API ------------------------------

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``.

        Raises
        ------
        PersistenceError
            If the value is not JSON-serialisable or the file cannot be written.
        """
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def remove(self, key: str) -> None:
        """Delete ``key``; removing an absent key is a no-op."""
        with self._lock:
            data = self._read_all()
            if key not in data:
                return
            del data[key]
            self._write_all(data)

    # ------------------------------- Internals ------------------------------

    def _read_all(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("Cannot read preferences at %s: %s", self.path, exc)
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Preferences at %s are corrupt; treating as empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, Any]) -> None:
        try:
            payload = json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Preferences are not JSON-serialisable: {exc}") from exc
        try:
            atomic_write(self.path, (payload + "\n").encode("utf-8"))
        except OSError as exc:
            raise PersistenceError(f"Cannot write preferences to {self.path}: {exc}") from exc


__all__ = ["PreferenceStore"]
