"""Abstract remote event source consumed by the loader."""

from __future__ import annotations

from abc import ABC, abstractmethod

from sportevents.core.contracts.event import SportEvent


class EventSource(ABC):
    """Interface that every remote event source must implement."""

    @abstractmethod
    def fetch_events(self) -> list[SportEvent]:
        """Fetch the full event collection.

        Raises
        ------
        InvalidRequestError
            The endpoint URL is malformed.
        RemoteUnavailableError
            Transport failure or timeout.
        RemoteRejectedError
            Non-2xx HTTP status.
        DecodeFailedError
            The body does not match the event schema.
        """


__all__ = ["EventSource"]
