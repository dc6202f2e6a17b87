"""iCalendar feed parser for vendor availability imports - vendorcal_lite.

Supports the subset of RFC 5545 that Google, Apple and Outlook export feeds
use. Recurrence rules are surfaced as raw strings and never expanded.
"""

import logging
from collections import Counter
from collections.abc import Callable
from typing import Any, Optional, Union

from .lite_datetime_utils import LiteDateTimeResolver, TimezoneCache
from .lite_event_parser import EventOutcome, LiteEventFinalizer, SkipReason, VEventAccumulator
from .lite_line_parser import parse_property_line, split_lines, unfold_lines
from .lite_models import CalendarEvent, ParseOptions

logger = logging.getLogger(__name__)

ICSSource = Union[str, bytes, bytearray, memoryview]
SkipHook = Callable[[SkipReason, Optional[str]], None]

_BOM = "\ufeff"


class ICSSourceTypeError(TypeError):
    """Raised when the feed source is neither text nor bytes."""


def normalize_source(source: Any) -> str:
    """Decode a feed source into text.

    Raises:
        ICSSourceTypeError: If ``source`` is not str, bytes, bytearray or memoryview
    """
    if isinstance(source, str):
        text = source
    elif isinstance(source, (bytes, bytearray, memoryview)):
        text = bytes(source).decode("utf-8", errors="replace")
    else:
        raise ICSSourceTypeError(
            f"ICS source must be str or bytes, got {type(source).__name__}"
        )
    return text[1:] if text.startswith(_BOM) else text


class LiteICSParser:
    """Parses iCalendar feeds into immutable, start-ordered CalendarEvent tuples.

    One VEVENT block is finalized at a time; malformed blocks are dropped
    without aborting the import. A parser instance owns its timezone cache
    and can be reused across calls and threads.
    """

    def __init__(
        self,
        options: Optional[ParseOptions] = None,
        timezone_cache: Optional[TimezoneCache] = None,
        on_skip: Optional[SkipHook] = None,
    ) -> None:
        """Initialize ICS parser.

        Args:
            options: Parse options (defaults to ParseOptions())
            timezone_cache: Zone cache to share between parsers
            on_skip: Optional hook called with (reason, uid) for every dropped block
        """
        self.options = options if options is not None else ParseOptions()
        self.timezone_cache = timezone_cache if timezone_cache is not None else TimezoneCache()
        self.on_skip = on_skip
        self._finalizer = LiteEventFinalizer(LiteDateTimeResolver(self.timezone_cache))

        logger.debug("Lite ICS parser initialized with options %s", self.options)

    def _report_skip(self, outcome: EventOutcome, skipped: Counter) -> None:
        reason = outcome.skip_reason
        if reason is None:
            return
        skipped[reason] += 1
        logger.debug("Skipping VEVENT uid=%s: %s", outcome.uid, reason.value)
        if self.on_skip is not None:
            self.on_skip(reason, outcome.uid)

    def parse(self, source: ICSSource) -> tuple[CalendarEvent, ...]:
        """Parse an ICS feed.

        Args:
            source: Raw ICS text or UTF-8 bytes

        Returns:
            Events sorted ascending by start

        Raises:
            ICSSourceTypeError: If source is not text or bytes
        """
        text = normalize_source(source)

        events: list[CalendarEvent] = []
        skipped: Counter = Counter()
        current: Optional[VEventAccumulator] = None
        nested_depth = 0

        for raw_line in unfold_lines(split_lines(text)):
            line = raw_line.rstrip()
            if not line:
                continue

            parsed = parse_property_line(line)
            if parsed is None:
                continue

            if parsed.name == "BEGIN":
                component = parsed.value.strip().upper()
                if component == "VEVENT":
                    if current is not None:
                        self._report_skip(
                            EventOutcome(skip_reason=SkipReason.UNTERMINATED), skipped
                        )
                    current = VEventAccumulator()
                    nested_depth = 0
                elif current is not None:
                    # Sub-components such as VALARM carry their own properties
                    nested_depth += 1
                continue

            if parsed.name == "END":
                component = parsed.value.strip().upper()
                if component == "VEVENT":
                    if current is not None:
                        outcome = self._finalizer.finalize(current, self.options)
                        if outcome.event is not None:
                            events.append(outcome.event)
                        else:
                            self._report_skip(outcome, skipped)
                    current = None
                    nested_depth = 0
                elif current is not None and nested_depth > 0:
                    nested_depth -= 1
                continue

            if current is not None and nested_depth == 0:
                current.add(parsed)

        if current is not None:
            self._report_skip(EventOutcome(skip_reason=SkipReason.UNTERMINATED), skipped)

        events.sort(key=lambda e: e.start)

        logger.info(
            "Parsed %d events from ICS feed (skipped: %s)",
            len(events),
            {reason.value: count for reason, count in skipped.items()} or "none",
        )
        return tuple(events)


def parse_icalendar(
    source: ICSSource,
    options: Optional[ParseOptions] = None,
    **option_kwargs: Any,
) -> tuple[CalendarEvent, ...]:
    """Parse an iCalendar feed into immutable CalendarEvent objects.

    Args:
        source: Raw ICS payload obtained from a vendor (text or UTF-8 bytes)
        options: Parse options; alternatively pass ``include_cancelled``,
            ``window`` and ``default_timezone`` as keyword arguments

    Returns:
        Events ordered by start

    Raises:
        ICSSourceTypeError: If source is not text or bytes
        ValueError: If both ``options`` and keyword options are given
    """
    if options is not None and option_kwargs:
        raise ValueError("Pass either options or keyword options, not both")
    if options is None:
        options = ParseOptions(**option_kwargs)
    return LiteICSParser(options).parse(source)
