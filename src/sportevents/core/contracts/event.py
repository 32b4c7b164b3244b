"""SportEvent, City and Sport — the records served by the events API.

Two date encodings
------------------
The API emits datetimes as ``2025-06-01T10:00:00``: no offset, read in the
local time zone of the client. The disk cache re-encodes every datetime as
ISO-8601 UTC with a ``Z`` suffix at one-second granularity. The two formats
are therefore not byte-identical, and a wire string that carries an offset
is rejected.

Wire decoding is selected through the Pydantic validation context::

    events_adapter.validate_python(payload, context=WIRE_CONTEXT)

Without that context (cache reads, direct construction) Pydantic's regular
ISO-8601 parsing applies. Datetimes must carry a time zone either way, so
what the cache writes in UTC reads back as the same instant.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Final

from pydantic import (
    AwareDatetime,
    BaseModel,
    Field,
    TypeAdapter,
    ValidationInfo,
    field_serializer,
    field_validator,
)

WIRE_DATE_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%S"
CACHE_DATE_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%SZ"
WIRE_CONTEXT: Final[dict[str, str]] = {"date_format": "wire"}


def parse_wire_datetime(value: str) -> datetime:
    """Parse an API datetime string and attach the local time zone."""
    naive = datetime.strptime(value, WIRE_DATE_FORMAT)
    return naive.astimezone()


def format_cache_datetime(value: datetime) -> str:
    """Encode ``value`` as ISO-8601 UTC (``Z`` suffix, whole seconds)."""
    return value.astimezone(UTC).strftime(CACHE_DATE_FORMAT)


class City(BaseModel):
    """A city that hosts events."""

    id: int
    name: str


class Sport(BaseModel):
    """A sport discipline; `icon_name` doubles as the short tag."""

    id: int
    name: str
    icon_name: str


class SportEvent(BaseModel):
    """One sports event as returned by ``GET /events/``."""

    id: int
    name: str
    date: AwareDatetime = Field(description="Start time of the event")
    photo_main: str | None = None
    icon_names: str | None = None
    full_description: str | None = None
    short_description: str | None = None
    organizer: str | None = None
    website_url: str | None = None
    available_distances: str | None = None
    event_format: str | None = None
    age_categories: str | None = None
    address: str | None = None
    latitude: float
    longitude: float
    contact_phone: str | None = None
    contact_email: str | None = None
    registration_url: str | None = None
    registration_deadline: AwareDatetime | None = None
    max_participants: int
    current_participants: int
    price: str | None = None
    photo_gallery: str | None = Field(default=None, description="Comma-separated image URLs")
    video_url: str | None = None
    city_id: int
    city: City
    sports: list[Sport] = Field(default_factory=list)
    city_name: str
    sport_name: str
    is_upcoming: bool
    can_register: bool
    occupancy_percentage: float
    available_spots: int
    available_distances_array: list[str] = Field(default_factory=list)

    @field_validator("date", "registration_deadline", mode="before")
    @classmethod
    def _parse_wire_dates(cls, v: Any, info: ValidationInfo) -> Any:
        """Apply the API's offset-less format when decoding a wire payload."""
        context = info.context or {}
        if context.get("date_format") == "wire" and isinstance(v, str):
            return parse_wire_datetime(v)
        return v

    @field_serializer("date", "registration_deadline", when_used="json")
    def _encode_dates(self, v: datetime | None) -> str | None:
        return format_cache_datetime(v) if v is not None else None

    @property
    def photo_gallery_list(self) -> list[str]:
        """Return gallery URLs split on commas, trimmed, blanks dropped."""
        if not self.photo_gallery:
            return []
        return [p.strip() for p in self.photo_gallery.split(",") if p.strip()]

    @property
    def sport_tags(self) -> list[str]:
        """Return the icon name of every sport attached to the event."""
        return [s.icon_name for s in self.sports]


# Shared adapter for wire decoding of the whole response body.
events_adapter: TypeAdapter[list[SportEvent]] = TypeAdapter(list[SportEvent])


__all__ = [
    "CACHE_DATE_FORMAT",
    "City",
    "Sport",
    "SportEvent",
    "WIRE_CONTEXT",
    "WIRE_DATE_FORMAT",
    "events_adapter",
    "format_cache_datetime",
    "parse_wire_datetime",
]
