"""Error taxonomy shared by the cache, the remote source and the loader.

Layers
------
- transport:    :class:`InvalidRequestError`, :class:`RemoteUnavailableError`
- protocol:     :class:`RemoteRejectedError` (carries the HTTP status code)
- payload:      :class:`DecodeFailedError`
- availability: :class:`NoDataAvailableError`, :class:`NoCacheAvailableError`
- persistence:  :class:`PersistenceError` (always recoverable)

None of these are fatal to the loader. Callers decide whether to show an
error, a stale-data banner or nothing; :attr:`EventsError.is_critical` marks
the two availability errors, which mean there is nothing at all to show.
"""

from __future__ import annotations


class EventsError(Exception):
    """Base class for every error raised by this package."""

    default_message = "Events could not be loaded"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def is_critical(self) -> bool:
        """Return True when no data of any kind can be shown."""
        return False


class InvalidRequestError(EventsError):
    """The remote endpoint URL is malformed."""

    default_message = "Invalid server URL"


class RemoteUnavailableError(EventsError):
    """Network or transport failure, including both timeouts."""

    default_message = "Could not connect to the server"


class RemoteRejectedError(EventsError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"Server error: HTTP {status_code}")


class DecodeFailedError(EventsError):
    """The response payload did not match the event schema."""

    default_message = "Could not process data from the server"


class NoDataAvailableError(EventsError):
    """Neither the remote source nor the cache produced data."""

    default_message = "No data available (no connection and no cache)"

    @property
    def is_critical(self) -> bool:
        return True


class NoCacheAvailableError(EventsError):
    """Offline mode found nothing in the cache."""

    default_message = "No data found for offline mode"

    @property
    def is_critical(self) -> bool:
        return True


class PersistenceError(EventsError):
    """Disk I/O or encoding failure inside the cache."""

    default_message = "Cache storage failure"


__all__ = [
    "DecodeFailedError",
    "EventsError",
    "InvalidRequestError",
    "NoCacheAvailableError",
    "NoDataAvailableError",
    "PersistenceError",
    "RemoteRejectedError",
    "RemoteUnavailableError",
]
