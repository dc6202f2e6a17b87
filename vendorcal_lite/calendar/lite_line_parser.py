"""Line unfolding and property tokenizing for ICS content - vendorcal_lite.

Implements the RFC 5545 content-line layer: folded continuation lines are
merged back into logical lines, and each logical line is split into its
property name, parameters and (unescaped) value.
"""

import logging
import re
from collections.abc import Iterable
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_ESCAPE_RE = re.compile(r"\\([\\nN,;])")
_ESCAPE_MAP = {"\\": "\\", "n": "\n", "N": "\n", ",": ",", ";": ";"}

FLAG_PARAM_VALUE = "TRUE"


class PropertyLine(NamedTuple):
    """A tokenized content line: ``NAME;PARAM=V1,V2:VALUE``."""

    name: str
    params: dict[str, list[str]]
    value: str

    def param(self, key: str) -> Optional[str]:
        """Return the first value of parameter ``key``, if present."""
        values = self.params.get(key.upper())
        return values[0] if values else None

    def has_param_value(self, key: str, expected: str) -> bool:
        """Check if any value of parameter ``key`` equals ``expected`` (case-insensitive)."""
        expected = expected.upper()
        return any(v.upper() == expected for v in self.params.get(key.upper(), ()))


def split_lines(text: str) -> list[str]:
    """Split raw ICS text on CRLF or LF line endings."""
    return _LINE_SPLIT_RE.split(text)


def unfold_lines(lines: Iterable[str]) -> list[str]:
    """Merge folded continuation lines into logical lines.

    A line starting with a space or horizontal tab continues the previous
    logical line; its first character is dropped and the rest appended.
    """
    unfolded: list[str] = []
    for line in lines:
        if line[:1] in (" ", "\t") and unfolded:
            unfolded[-1] += line[1:]
        else:
            unfolded.append(line)
    return unfolded


def unescape_text(value: str) -> str:
    """Unescape a TEXT value (RFC 5545 section 3.3.11)."""
    if "\\" not in value:
        return value
    return _ESCAPE_RE.sub(lambda m: _ESCAPE_MAP[m.group(1)], value)


def _split_unquoted(text: str, separator: str, maxsplit: int = -1) -> list[str]:
    """Split ``text`` on ``separator`` occurrences outside double quotes."""
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in text:
        if ch == '"':
            in_quotes = not in_quotes
        if ch == separator and not in_quotes and maxsplit != 0:
            parts.append("".join(current))
            current = []
            maxsplit -= 1
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def _parse_params(segments: list[str]) -> dict[str, list[str]]:
    params: dict[str, list[str]] = {}
    for segment in segments:
        raw_key, has_value, raw_value = segment.partition("=")
        key = raw_key.strip().upper()
        if not key:
            continue
        if not has_value or not raw_value:
            params[key] = [FLAG_PARAM_VALUE]
            continue
        params[key] = [
            entry.strip().strip('"') for entry in _split_unquoted(raw_value, ",")
        ]
    return params


def parse_property_line(line: str) -> Optional[PropertyLine]:
    """Tokenize a logical line into a PropertyLine.

    Returns None for malformed lines (no ``:`` separator, or an empty
    property name); the caller is expected to skip them.
    """
    head_and_value = _split_unquoted(line, ":", maxsplit=1)
    if len(head_and_value) < 2:
        logger.debug("Skipping content line without ':' separator: %r", line)
        return None

    head, raw_value = head_and_value
    segments = _split_unquoted(head, ";")
    name = segments[0].strip().upper()
    if not name:
        logger.debug("Skipping content line without property name: %r", line)
        return None

    return PropertyLine(name, _parse_params(segments[1:]), unescape_text(raw_value))
