# -----------------------------------------------------------------------------
# HTTP client for the events API.
#
# One operation: GET {base_url}{events_path} and decode the JSON array into
# SportEvent records. Failures are mapped onto the package error taxonomy:
#
#   malformed URL                    -> InvalidRequestError
#   DNS / connect / socket timeout   -> RemoteUnavailableError
#   total resource deadline exceeded -> RemoteUnavailableError
#   non-2xx status                   -> RemoteRejectedError(status_code)
#   body not JSON / schema mismatch  -> DecodeFailedError
#
# The transport uses only `urllib.request`. Unit tests patch `_get()` (or
# `urllib.request.urlopen`) so that no real HTTP calls are made.
#
# Timeouts
# --------
# `request_timeout` is the per-operation socket timeout handed to urlopen.
# `resource_timeout` is a wall-clock deadline for the whole fetch, redirects
# and body read included; it is checked between body chunks.
# -----------------------------------------------------------------------------
from __future__ import annotations

import http.client
import json
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from pydantic import ValidationError

from sportevents.core.contracts.event import WIRE_CONTEXT, SportEvent, events_adapter
from sportevents.core.errors import (
    DecodeFailedError,
    InvalidRequestError,
    RemoteRejectedError,
    RemoteUnavailableError,
)
from sportevents.core.settings import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RESOURCE_TIMEOUT,
    Settings,
    get_logger,
)

from .base import EventSource

logger = get_logger(__name__)

_READ_CHUNK_BYTES = 64 * 1024


@dataclass(slots=True)
class HttpEventSource(EventSource):
    """Fetch the event collection from the events API over HTTP.

    Parameters
    ----------
    base_url:
        Scheme and host of the API, e.g. ``"http://192.168.0.10:8000"``.
    events_path:
        Path of the events endpoint.
    request_timeout:
        Socket timeout in seconds for connecting and for each read.
    resource_timeout:
        Total seconds one fetch may take before it is abandoned.
    """

    base_url: str
    events_path: str = "/events/"
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    resource_timeout: float = DEFAULT_RESOURCE_TIMEOUT

    # --------------------------------------------------------------------- #
    # Constructors
    # --------------------------------------------------------------------- #
    @classmethod
    def from_settings(cls, settings: Settings) -> HttpEventSource:
        """Construct a source from the API URL and timeouts in ``settings``."""
        return cls(
            base_url=settings.api_base_url,
            events_path=settings.events_path,
            request_timeout=settings.request_timeout_seconds,
            resource_timeout=settings.resource_timeout_seconds,
        )

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #
    @property
    def events_url(self) -> str:
        """Return the validated endpoint URL.

        Raises
        ------
        InvalidRequestError
            If the URL lacks an http(s) scheme or a host.
        """
        url = self.base_url.rstrip("/") + "/" + self.events_path.lstrip("/")
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise InvalidRequestError(f"Invalid server URL: {url!r}")
        return url

    def fetch_events(self) -> list[SportEvent]:
        """Fetch and decode the full event list (see :class:`EventSource`)."""
        url = self.events_url
        logger.info("GET %s", url)
        raw = self._get(url)
        events = self._decode(raw)
        logger.info("Decoded %d events from %s", len(events), url)
        return events

    # --------------------------------------------------------------------- #
    # Internal helpers (test seams)
    # --------------------------------------------------------------------- #
    def _get(self, url: str) -> bytes:
        """Perform the HTTP GET and return the raw body of a 2xx response.

        This is the main seam for unit tests: patch it at the class level to
        return canned bytes without network I/O.
        """
        request = urllib.request.Request(
            url=url,
            headers={"Accept": "application/json", "Cache-Control": "no-cache"},
            method="GET",
        )
        deadline = time.monotonic() + self.resource_timeout

        try:
            with urllib.request.urlopen(request, timeout=self.request_timeout) as resp:
                status = getattr(resp, "status", 200)
                logger.debug("HTTP %d from %s", status, url)
                if not 200 <= status < 300:
                    raise RemoteRejectedError(status)
                return self._read_body(resp, deadline)
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if exc.fp else ""
            logger.debug("HTTP %d body: %r", exc.code, detail[:200])
            raise RemoteRejectedError(exc.code) from exc
        except urllib.error.URLError as exc:
            raise RemoteUnavailableError(f"Network error: {exc.reason}") from exc
        except (TimeoutError, http.client.HTTPException, OSError) as exc:
            raise RemoteUnavailableError(f"Network error: {exc}") from exc
        except ValueError as exc:
            # urlopen rejects URLs it cannot route (e.g. stray characters in host).
            raise InvalidRequestError(f"Invalid server URL: {url!r}") from exc

    def _read_body(self, resp: Any, deadline: float) -> bytes:
        """Read the body in chunks, enforcing the total resource deadline."""
        chunks: list[bytes] = []
        while True:
            if time.monotonic() > deadline:
                raise RemoteUnavailableError(
                    f"Resource timeout after {self.resource_timeout:.0f}s"
                )
            chunk = resp.read(_READ_CHUNK_BYTES)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)

    @staticmethod
    def _decode(raw: bytes) -> list[SportEvent]:
        """Decode a JSON array of events using the API's date format."""
        try:
            data: Any = json.loads(raw)
        except ValueError as exc:
            raise DecodeFailedError(f"Response is not valid JSON: {exc}") from exc

        try:
            return events_adapter.validate_python(data, context=WIRE_CONTEXT)
        except ValidationError as exc:
            raise DecodeFailedError(
                f"Response does not match the event schema ({exc.error_count()} errors)"
            ) from exc


__all__ = ["HttpEventSource"]
