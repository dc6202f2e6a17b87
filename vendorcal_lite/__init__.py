"""vendorcal_lite - iCalendar feed import for vendor availability.

Parses ICS exports from Google, Apple and Outlook calendars into immutable,
start-ordered events that availability reconciliation can consume.
"""

__version__ = "0.1.0"

from .calendar import (
    CalendarEvent,
    CalendarStatus,
    CalendarTransparency,
    CalendarWindow,
    ICSSourceTypeError,
    LiteICSParser,
    ParseOptions,
    parse_icalendar,
)

__all__ = [
    "CalendarEvent",
    "CalendarStatus",
    "CalendarTransparency",
    "CalendarWindow",
    "ICSSourceTypeError",
    "LiteICSParser",
    "ParseOptions",
    "__version__",
    "parse_icalendar",
]
