"""DURATION value parsing for ICS calendar processing - vendorcal_lite."""

import re
from typing import Optional

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS
WEEK_MS = 7 * DAY_MS

_DURATION_RE = re.compile(
    r"P(?:(?P<weeks>[0-9]+)W)?(?:(?P<days>[0-9]+)D)?"
    r"(?:(?P<time>T)(?:(?P<hours>[0-9]+)H)?(?:(?P<minutes>[0-9]+)M)?(?:(?P<seconds>[0-9]+)S)?)?"
)

_UNIT_MS = {
    "weeks": WEEK_MS,
    "days": DAY_MS,
    "hours": HOUR_MS,
    "minutes": MINUTE_MS,
    "seconds": SECOND_MS,
}


def parse_duration_ms(value: str) -> Optional[int]:
    """Convert an RFC 5545 duration (e.g. ``PT1H30M``) into milliseconds.

    Returns None when the value does not follow the
    ``P[nW][nD][T[nH][nM][nS]]`` grammar. A bare ``P`` or a ``T`` with no
    time component is invalid.
    """
    match = _DURATION_RE.fullmatch(value)
    if match is None:
        return None

    parts = {unit: match.group(unit) for unit in _UNIT_MS}
    if all(v is None for v in parts.values()):
        return None
    if match.group("time") and all(parts[u] is None for u in ("hours", "minutes", "seconds")):
        return None

    return sum(int(v) * _UNIT_MS[unit] for unit, v in parts.items() if v is not None)
