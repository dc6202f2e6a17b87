"""Timezone name normalization and clock utilities for vendorcal_lite."""

from __future__ import annotations

import datetime
import logging
import os
from typing import ClassVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


class TimezoneNames:
    """Maps provider-specific timezone identifiers onto IANA names."""

    # Windows timezone names emitted by Outlook/Exchange exports
    WINDOWS_TZ_MAP: ClassVar[dict[str, str]] = {
        "Pacific Standard Time": "America/Los_Angeles",
        "Mountain Standard Time": "America/Denver",
        "Central Standard Time": "America/Chicago",
        "Eastern Standard Time": "America/New_York",
        "Alaskan Standard Time": "America/Anchorage",
        "Hawaiian Standard Time": "Pacific/Honolulu",
        "Arizona Standard Time": "America/Phoenix",
        "GMT Standard Time": "Europe/London",
        "Greenwich Standard Time": "Atlantic/Reykjavik",
        "Central European Standard Time": "Europe/Warsaw",
        "Romance Standard Time": "Europe/Paris",
        "W. Europe Standard Time": "Europe/Berlin",
        "E. Europe Standard Time": "Europe/Chisinau",
        "FLE Standard Time": "Europe/Kiev",
        "Russian Standard Time": "Europe/Moscow",
        "Turkey Standard Time": "Europe/Istanbul",
        "Arabian Standard Time": "Asia/Dubai",
        "West Asia Standard Time": "Asia/Tashkent",
        "Central Asia Standard Time": "Asia/Almaty",
        "India Standard Time": "Asia/Kolkata",
        "China Standard Time": "Asia/Shanghai",
        "Singapore Standard Time": "Asia/Singapore",
        "Tokyo Standard Time": "Asia/Tokyo",
        "Korea Standard Time": "Asia/Seoul",
        "AUS Eastern Standard Time": "Australia/Sydney",
        "New Zealand Standard Time": "Pacific/Auckland",
        "UTC": "UTC",
    }

    def to_iana(self, name: str) -> str:
        """Return the IANA identifier for ``name``.

        Windows names are translated; anything else is returned stripped of
        surrounding whitespace and quotes.
        """
        cleaned = name.strip().strip('"')
        return self.WINDOWS_TZ_MAP.get(cleaned, cleaned)


class TimeProvider:
    """Provides current time with test time override support."""

    def now_utc(self) -> datetime.datetime:
        """Return current UTC time with tzinfo.

        Can be overridden via the VENDORCAL_TEST_TIME environment variable
        (ISO 8601, e.g. "2024-01-15T08:00:00+05:00").
        """
        test_time = os.environ.get("VENDORCAL_TEST_TIME")
        if test_time:
            try:
                from dateutil import parser as date_parser

                dt = date_parser.isoparse(test_time)
                if dt.tzinfo is not None:
                    return dt.astimezone(datetime.timezone.utc)
                return dt.replace(tzinfo=datetime.timezone.utc)
            except ValueError as e:
                logger.warning("Failed to parse VENDORCAL_TEST_TIME=%r: %s", test_time, e)

        return datetime.datetime.now(datetime.timezone.utc)


_names = TimezoneNames()
_time_provider = TimeProvider()


def windows_tz_to_iana(windows_tz: str) -> str | None:
    """Convert a Windows timezone name to an IANA identifier, or None if unmapped."""
    return _names.WINDOWS_TZ_MAP.get(windows_tz.strip())


def normalize_timezone_name(name: str) -> str:
    """Normalize a TZID parameter value to an IANA timezone name."""
    return _names.to_iana(name)


def load_zone(name: str) -> ZoneInfo | None:
    """Load a ZoneInfo for ``name`` (after normalization), or None if unknown."""
    iana = normalize_timezone_name(name)
    if not iana:
        return None
    try:
        return ZoneInfo(iana)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.debug("Unknown timezone %r (normalized %r)", name, iana)
        return None


def now_utc() -> datetime.datetime:
    """Get current UTC time (convenience function)."""
    return _time_provider.now_utc()
