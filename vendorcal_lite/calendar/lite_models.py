"""Data models for ICS calendar processing - vendorcal_lite."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from ..core.timezone_utils import load_zone, normalize_timezone_name


class CalendarStatus(str, Enum):
    """Canonical event statuses derived from the STATUS property."""

    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    CANCELLED = "cancelled"


class CalendarTransparency(str, Enum):
    """Whether an event blocks availability (opaque) or not."""

    OPAQUE = "opaque"
    TRANSPARENT = "transparent"


def _as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Normalize an instant to UTC; naive datetimes are taken to be UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class CalendarEvent(BaseModel):
    """Immutable snapshot of a single VEVENT entry.

    Recurrence rules are carried as raw strings and never expanded.
    """

    uid: str = Field(..., description="Feed-supplied UID or deterministic fallback")
    start: datetime = Field(..., description="Inclusive start instant (UTC)")
    end: datetime = Field(..., description="Exclusive end instant (UTC)")
    is_all_day: bool = Field(default=False, description="All-day event flag")

    status: CalendarStatus = Field(default=CalendarStatus.CONFIRMED)
    transparency: CalendarTransparency = Field(default=CalendarTransparency.OPAQUE)

    summary: Optional[str] = Field(default=None, description="Short title")
    description: Optional[str] = Field(default=None, description="Long-form description")
    location: Optional[str] = Field(default=None, description="Venue or address")

    sequence: int = Field(default=0, description="Revision counter")
    recurrence_rule: Optional[str] = Field(default=None, description="Raw RRULE value")

    model_config = ConfigDict(frozen=True)

    @field_validator("start", "end")
    @classmethod
    def _normalize_instant(cls, value: datetime) -> datetime:
        return _as_utc(value)  # type: ignore[return-value]

    @property
    def duration(self) -> timedelta:
        """Length of the event (may be zero or negative for malformed feeds)."""
        return self.end - self.start

    @property
    def blocks_availability(self) -> bool:
        """Check if the event occupies its slot (opaque and not cancelled)."""
        return (
            self.transparency == CalendarTransparency.OPAQUE
            and self.status != CalendarStatus.CANCELLED
        )

    @field_serializer("start", "end")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime to ISO format."""
        return dt.isoformat()


class CalendarWindow(BaseModel):
    """Half-open time window used to restrict parsed events.

    Omitted bounds are unbounded on that side.
    """

    start: Optional[datetime] = Field(
        default=None, description="Events ending at or before this instant are omitted"
    )
    end: Optional[datetime] = Field(
        default=None, description="Events starting at or after this instant are omitted"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("start", "end")
    @classmethod
    def _normalize_bound(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    def admits(self, start: datetime, end: datetime) -> bool:
        """Check whether an event spanning ``[start, end)`` overlaps the window."""
        if self.start is not None and end <= self.start:
            return False
        if self.end is not None and start >= self.end:
            return False
        return True


class ParseOptions(BaseModel):
    """Optional knobs that influence how iCalendar feeds are parsed."""

    include_cancelled: bool = Field(
        default=False, description="Include events whose STATUS is CANCELLED"
    )
    window: Optional[CalendarWindow] = Field(
        default=None, description="Restrict output to events overlapping this window"
    )
    default_timezone: Optional[str] = Field(
        default=None, description="Timezone for DTSTART/DTEND values lacking TZID"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("default_timezone")
    @classmethod
    def _validate_timezone(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        if load_zone(value) is None:
            raise ValueError(f"Unknown timezone: {value!r}")
        return normalize_timezone_name(value)
