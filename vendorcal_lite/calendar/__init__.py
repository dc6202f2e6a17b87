"""ICS feed parsing for vendorcal_lite."""

from .lite_models import (
    CalendarEvent,
    CalendarStatus,
    CalendarTransparency,
    CalendarWindow,
    ParseOptions,
)
from .lite_parser import ICSSourceTypeError, LiteICSParser, parse_icalendar

__all__ = [
    "CalendarEvent",
    "CalendarStatus",
    "CalendarTransparency",
    "CalendarWindow",
    "ICSSourceTypeError",
    "LiteICSParser",
    "ParseOptions",
    "parse_icalendar",
]
