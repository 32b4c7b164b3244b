"""Typed outcome of reading the event cache.

Motivation
----------
A cache read can end three ways: a decodable snapshot, no snapshot at all, or
a snapshot that exists but cannot be read. The loader treats the last two the
same, but diagnostics and tests need to tell them apart without catching
exceptions. This module provides a minimal `CacheResult[T]` with:

- `Hit(value)` / `Empty()` / `Failed(error)` variants,
- `map` to transform the payload of a hit,
- `get_or` / `to_optional` to collapse to a plain value.

Example
-------
>>> from sportevents.core.result import Hit, Empty
>>> Hit([1, 2, 3]).map(len).get_or(0)
3
>>> Empty().get_or(0)
0
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, cast

from .errors import PersistenceError

T = TypeVar("T")
U = TypeVar("U")


class CacheResult(Generic[T]):
    """Sum type: `Hit[T]`, `Empty` or `Failed`."""

    # ----- Introspection -----------------------------------------------------
    def is_hit(self) -> bool:
        """Return ``True`` if a snapshot was read."""
        return isinstance(self, Hit)

    def is_empty(self) -> bool:
        """Return ``True`` if no snapshot has been written (or it was cleared)."""
        return isinstance(self, Empty)

    def is_failed(self) -> bool:
        """Return ``True`` if a snapshot exists but could not be read."""
        return isinstance(self, Failed)

    # ----- Collapsing --------------------------------------------------------
    def get_or(self, default: T) -> T:
        """Return the payload of a hit, else ``default``."""
        if isinstance(self, Hit):
            return cast(Hit[T], self).value
        return default

    def to_optional(self) -> T | None:
        """Return the payload of a hit, else ``None``.

        `Empty` and `Failed` collapse identically: a corrupt cache is an
        absent cache from the caller's point of view.
        """
        if isinstance(self, Hit):
            return cast(Hit[T], self).value
        return None

    # ----- Combinators -------------------------------------------------------
    def map(self, fn: Callable[[T], U]) -> CacheResult[U]:
        """Apply ``fn`` to the payload of a hit; propagate other variants."""
        if isinstance(self, Hit):
            return Hit(fn(cast(Hit[T], self).value))
        return cast(CacheResult[U], self)


@dataclass(frozen=True)
class Hit(CacheResult[T]):
    """A decodable snapshot."""

    value: T


@dataclass(frozen=True)
class Empty(CacheResult[T]):
    """No snapshot stored."""


@dataclass(frozen=True)
class Failed(CacheResult[T]):
    """A stored snapshot that could not be read or decoded."""

    error: PersistenceError


__all__ = ["CacheResult", "Empty", "Failed", "Hit"]
