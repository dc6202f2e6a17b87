"""VEVENT property accumulation and event finalization - vendorcal_lite.

The orchestrator feeds tokenized property lines into a VEventAccumulator;
LiteEventFinalizer turns the accumulated block into a CalendarEvent or a
SkipReason explaining why the block was dropped.
"""

import logging
from datetime import timedelta
from enum import Enum
from typing import NamedTuple, Optional

from .lite_datetime_utils import LiteDateTimeResolver, TemporalEntry, format_iso_millis
from .lite_duration import DAY_MS, parse_duration_ms
from .lite_line_parser import PropertyLine
from .lite_models import CalendarEvent, CalendarStatus, CalendarTransparency, ParseOptions

logger = logging.getLogger(__name__)

UID_PREFIX = "wt"


class EventProperty(str, Enum):
    """VEVENT properties consumed by the finalizer."""

    DTSTART = "DTSTART"
    DTEND = "DTEND"
    DURATION = "DURATION"
    STATUS = "STATUS"
    TRANSP = "TRANSP"
    UID = "UID"
    SUMMARY = "SUMMARY"
    DESCRIPTION = "DESCRIPTION"
    LOCATION = "LOCATION"
    SEQUENCE = "SEQUENCE"
    RRULE = "RRULE"


_KNOWN_PROPERTIES = {p.value: p for p in EventProperty}


class SkipReason(str, Enum):
    """Why a VEVENT block produced no event."""

    MISSING_START = "missing_start"
    INVALID_START = "invalid_start"
    CANCELLED = "cancelled"
    OUTSIDE_WINDOW = "outside_window"
    UNTERMINATED = "unterminated"


class EventOutcome(NamedTuple):
    """Result of finalizing one VEVENT: exactly one of the fields is set."""

    event: Optional[CalendarEvent] = None
    skip_reason: Optional[SkipReason] = None
    uid: Optional[str] = None


class VEventAccumulator:
    """Collects every property line of one VEVENT block.

    Consumed properties are keyed by EventProperty; all other properties go
    to ``extra`` keyed by their upper-cased name. Every occurrence is kept.
    """

    def __init__(self) -> None:
        self.properties: dict[EventProperty, list[PropertyLine]] = {}
        self.extra: dict[str, list[PropertyLine]] = {}

    def add(self, line: PropertyLine) -> None:
        """Record a property line."""
        known = _KNOWN_PROPERTIES.get(line.name)
        if known is not None:
            self.properties.setdefault(known, []).append(line)
        else:
            self.extra.setdefault(line.name, []).append(line)

    def first(self, prop: EventProperty) -> Optional[PropertyLine]:
        """Return the first occurrence of ``prop``, if any."""
        lines = self.properties.get(prop)
        return lines[0] if lines else None

    def first_value(self, prop: EventProperty) -> Optional[str]:
        """Return the value of the first occurrence of ``prop``, if any."""
        line = self.first(prop)
        return line.value if line is not None else None


def map_status(raw: Optional[str]) -> CalendarStatus:
    """Map a STATUS value to CalendarStatus; unknown values are confirmed."""
    if raw:
        try:
            return CalendarStatus(raw.strip().lower())
        except ValueError:
            logger.debug("Unrecognized STATUS %r, treating as confirmed", raw)
    return CalendarStatus.CONFIRMED


def map_transparency(raw: Optional[str]) -> CalendarTransparency:
    """Map a TRANSP value to CalendarTransparency; unknown values are opaque."""
    if raw:
        try:
            return CalendarTransparency(raw.strip().lower())
        except ValueError:
            logger.debug("Unrecognized TRANSP %r, treating as opaque", raw)
    return CalendarTransparency.OPAQUE


def parse_sequence(raw: Optional[str]) -> int:
    """Parse SEQUENCE, defaulting to 0."""
    if raw is None:
        return 0
    try:
        return int(raw.strip())
    except ValueError:
        logger.debug("Unparsable SEQUENCE %r, using 0", raw)
        return 0


def generate_fallback_uid(start: TemporalEntry, end: TemporalEntry) -> str:
    """Build a deterministic UID from the event's start and end instants."""
    return ":".join(
        (UID_PREFIX, format_iso_millis(start.instant), format_iso_millis(end.instant))
    )


class LiteEventFinalizer:
    """Turns accumulated VEVENT properties into CalendarEvent objects."""

    def __init__(self, datetime_resolver: LiteDateTimeResolver) -> None:
        """Initialize event finalizer.

        Args:
            datetime_resolver: Resolver for DTSTART/DTEND values
        """
        self.datetime_resolver = datetime_resolver

    def _resolve_end(
        self, vevent: VEventAccumulator, start: TemporalEntry, default_timezone: Optional[str]
    ) -> TemporalEntry:
        end_line = vevent.first(EventProperty.DTEND)
        if end_line is not None:
            end = self.datetime_resolver.resolve(end_line, default_timezone)
            if end is not None:
                return end
            logger.debug("Unparsable DTEND %r, trying DURATION", end_line.value)

        duration_raw = vevent.first_value(EventProperty.DURATION)
        if duration_raw is not None:
            duration_ms = parse_duration_ms(duration_raw)
            if duration_ms is not None:
                try:
                    return TemporalEntry(
                        start.instant + timedelta(milliseconds=duration_ms),
                        start.is_all_day and duration_ms % DAY_MS == 0,
                    )
                except OverflowError:
                    pass
            logger.debug("Invalid DURATION %r, using default end", duration_raw)

        # All-day events default to one day; timed events to zero length
        if start.is_all_day:
            try:
                return TemporalEntry(start.instant + timedelta(days=1), True)
            except OverflowError:
                logger.debug("All-day event at %s has no following day", start.instant)
        return TemporalEntry(start.instant, start.is_all_day)

    def finalize(self, vevent: VEventAccumulator, options: ParseOptions) -> EventOutcome:
        """Finalize one VEVENT block.

        Args:
            vevent: Accumulated properties of the block
            options: Parse options (cancellation, window, default timezone)

        Returns:
            EventOutcome carrying either the event or the skip reason
        """
        uid_raw = vevent.first_value(EventProperty.UID)
        uid = uid_raw if uid_raw and uid_raw.strip() else None

        start_line = vevent.first(EventProperty.DTSTART)
        if start_line is None:
            return EventOutcome(skip_reason=SkipReason.MISSING_START, uid=uid)

        start = self.datetime_resolver.resolve(start_line, options.default_timezone)
        if start is None:
            return EventOutcome(skip_reason=SkipReason.INVALID_START, uid=uid)

        end = self._resolve_end(vevent, start, options.default_timezone)

        status = map_status(vevent.first_value(EventProperty.STATUS))
        if status == CalendarStatus.CANCELLED and not options.include_cancelled:
            return EventOutcome(skip_reason=SkipReason.CANCELLED, uid=uid)

        if uid is None:
            uid = generate_fallback_uid(start, end)

        event = CalendarEvent(
            uid=uid,
            start=start.instant,
            end=end.instant,
            is_all_day=start.is_all_day or end.is_all_day,
            status=status,
            transparency=map_transparency(vevent.first_value(EventProperty.TRANSP)),
            summary=vevent.first_value(EventProperty.SUMMARY),
            description=vevent.first_value(EventProperty.DESCRIPTION),
            location=vevent.first_value(EventProperty.LOCATION),
            sequence=parse_sequence(vevent.first_value(EventProperty.SEQUENCE)),
            recurrence_rule=vevent.first_value(EventProperty.RRULE),
        )

        if options.window is not None and not options.window.admits(event.start, event.end):
            return EventOutcome(skip_reason=SkipReason.OUTSIDE_WINDOW, uid=uid)

        return EventOutcome(event=event, uid=uid)
