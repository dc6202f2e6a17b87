"""DateTime resolution utilities for ICS calendar processing - vendorcal_lite.

This module turns DTSTART/DTEND-like property entries into absolute UTC
instants, handling all-day dates, the UTC ``Z`` suffix, named timezones
(TZID or a caller-supplied default) and floating local time.
"""

import logging
import re
import threading
from datetime import datetime, timezone
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo

from ..core.timezone_utils import load_zone, normalize_timezone_name
from .lite_line_parser import PropertyLine

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"([0-9]{4})([0-9]{2})([0-9]{2})")
_DATETIME_RE = re.compile(
    r"([0-9]{4})([0-9]{2})([0-9]{2})T([0-9]{2})([0-9]{2})([0-9]{2})?"
)


class TemporalEntry(NamedTuple):
    """Resolved DTSTART/DTEND value."""

    instant: datetime
    is_all_day: bool


def ensure_timezone_aware(dt: datetime) -> datetime:
    """Ensure datetime is timezone-aware (UTC if originally naive)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def format_iso_millis(dt: datetime) -> str:
    """Format an instant as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    utc = ensure_timezone_aware(dt).astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


class TimezoneCache:
    """Append-only cache of ZoneInfo objects keyed by TZID.

    Unknown names are cached as misses so repeated lookups of a bad TZID
    stay cheap. Inserts are serialized; reads are lock-free.
    """

    def __init__(self) -> None:
        self._zones: dict[str, Optional[ZoneInfo]] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> Optional[ZoneInfo]:
        """Return the zone for ``name``, or None if it cannot be resolved."""
        try:
            return self._zones[name]
        except KeyError:
            pass

        zone = load_zone(name)
        with self._lock:
            return self._zones.setdefault(name, zone)

    def __contains__(self, name: object) -> bool:
        return name in self._zones

    def __len__(self) -> int:
        return len(self._zones)


def resolve_wall_clock(naive: datetime, zone: ZoneInfo) -> datetime:
    """Resolve wall-clock components in ``zone`` to a UTC instant by offset reversal.

    The components are first read as if they were UTC; that guess is
    rendered in ``zone`` and the rendered wall clock, read back as UTC,
    gives the zone's offset at the guessed instant. Subtracting the offset
    from the guess yields the instant. Within a DST transition window the
    result can be off by the transition delta.
    """
    guess = naive.replace(tzinfo=timezone.utc)
    zoned = guess.astimezone(zone).replace(tzinfo=timezone.utc)
    offset = zoned - guess
    return guess - offset


class LiteDateTimeResolver:
    """Resolver for iCalendar DTSTART/DTEND properties with timezone handling."""

    def __init__(self, timezone_cache: Optional[TimezoneCache] = None) -> None:
        """Initialize datetime resolver.

        Args:
            timezone_cache: Shared zone cache; a private one is created if omitted
        """
        self.timezone_cache = timezone_cache if timezone_cache is not None else TimezoneCache()

    def _zone_for(self, entry: PropertyLine, default_timezone: Optional[str]) -> Optional[ZoneInfo]:
        tzid = entry.param("TZID")
        if tzid:
            zone = self.timezone_cache.get(tzid)
            if zone is not None:
                return zone
            logger.warning(
                "Unknown TZID %r (normalized %r), falling back to default timezone",
                tzid,
                normalize_timezone_name(tzid),
            )
        if default_timezone:
            return self.timezone_cache.get(default_timezone)
        return None

    def resolve(
        self, entry: PropertyLine, default_timezone: Optional[str] = None
    ) -> Optional[TemporalEntry]:
        """Resolve a DTSTART/DTEND entry to an absolute instant.

        Args:
            entry: Tokenized property line
            default_timezone: Timezone used when the entry has no TZID

        Returns:
            TemporalEntry, or None if the value is malformed
        """
        value = entry.value.strip()

        if entry.has_param_value("VALUE", "DATE"):
            return self._resolve_date(value, entry, default_timezone)
        return self._resolve_date_time(value, entry, default_timezone)

    def _resolve_date(
        self, value: str, entry: PropertyLine, default_timezone: Optional[str]
    ) -> Optional[TemporalEntry]:
        match = _DATE_RE.fullmatch(value)
        if match is None:
            logger.debug("Malformed DATE value %r", value)
            return None
        try:
            midnight = datetime(*(int(g) for g in match.groups()))
        except ValueError:
            logger.debug("Out-of-range DATE value %r", value)
            return None

        zone = self._zone_for(entry, default_timezone)
        if zone is None:
            # All-day dates without a zone start at midnight UTC
            return TemporalEntry(midnight.replace(tzinfo=timezone.utc), True)
        instant = self._localize(midnight, zone, value)
        return TemporalEntry(instant, True) if instant is not None else None

    @staticmethod
    def _localize(naive: datetime, zone: ZoneInfo, value: str) -> Optional[datetime]:
        try:
            return resolve_wall_clock(naive, zone)
        except OverflowError:
            logger.debug("Value %r out of range in zone %s", value, zone.key)
            return None

    def _resolve_date_time(
        self, value: str, entry: PropertyLine, default_timezone: Optional[str]
    ) -> Optional[TemporalEntry]:
        is_utc = value.endswith("Z")
        match = _DATETIME_RE.fullmatch(value[:-1] if is_utc else value)
        if match is None:
            logger.debug("Malformed DATE-TIME value %r", value)
            return None

        year, month, day, hour, minute, second = match.groups()
        try:
            naive = datetime(
                int(year), int(month), int(day), int(hour), int(minute), int(second or 0)
            )
        except ValueError:
            logger.debug("Out-of-range DATE-TIME value %r", value)
            return None

        if is_utc:
            return TemporalEntry(naive.replace(tzinfo=timezone.utc), False)

        zone = self._zone_for(entry, default_timezone)
        if zone is not None:
            instant = self._localize(naive, zone, value)
            return TemporalEntry(instant, False) if instant is not None else None

        # Floating time: interpret in the host's local timezone
        try:
            local = naive.astimezone()
        except (OverflowError, OSError, ValueError):
            logger.debug("Cannot localize floating DATE-TIME %r", value)
            return None
        return TemporalEntry(local.astimezone(timezone.utc), False)
