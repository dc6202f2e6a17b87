"""Shared fixtures for vendorcal_lite tests."""

import logging
from collections.abc import Callable, Generator
from typing import Any

import pytest

from vendorcal_lite.calendar.lite_event_parser import VEventAccumulator
from vendorcal_lite.calendar.lite_line_parser import parse_property_line

VENDOR_FEED_LINES = [
    "BEGIN:VCALENDAR",
    "VERSION:2.0",
    "PRODID:-//WeddingTech//Calendar Import//EN",
    "BEGIN:VEVENT",
    "UID:event-1@example.com",
    "DTSTART;TZID=Asia/Tashkent:20240115T100000",
    "DTEND;TZID=Asia/Tashkent:20240115T110000",
    "SUMMARY:Initial consultation",
    "LOCATION:Tashkent HQ",
    "DESCRIPTION:Discuss requirements\\nCapture expectations",
    "SEQUENCE:2",
    "RRULE:FREQ=MONTHLY;COUNT=3",
    "END:VEVENT",
    "BEGIN:VEVENT",
    "UID:event-2@example.com",
    "DTSTART;VALUE=DATE:20240120",
    "SUMMARY:Full-day site visit",
    "DESCRIPTION:All-day block for venue walkthrough",
    "END:VEVENT",
    "BEGIN:VEVENT",
    "DTSTART;TZID=Asia/Almaty:20240122T090000",
    "DURATION:PT3H",
    "STATUS:TENTATIVE",
    "TRANSP:TRANSPARENT",
    "DESCRIPTION:Prep call with vendor\\, confirm agenda",
    "SUMMARY:Prep call (folded title that spans",
    "  lines for readability)",
    "RRULE:FREQ=WEEKLY;COUNT=4",
    "END:VEVENT",
    "BEGIN:VEVENT",
    "UID:event-3@example.com",
    "DTSTART:20240125T090000Z",
    "DURATION:PT2H",
    "STATUS:CANCELLED",
    "SUMMARY:Deprecated meeting",
    "END:VEVENT",
    "END:VCALENDAR",
    "",
]


def build_feed(*events: str) -> str:
    """Wrap VEVENT bodies (newline-separated property lines) in a VCALENDAR."""
    blocks = [f"BEGIN:VEVENT\n{body.strip()}\nEND:VEVENT" for body in events]
    return "BEGIN:VCALENDAR\nVERSION:2.0\n" + "\n".join(blocks) + "\nEND:VCALENDAR\n"


def make_accumulator(*lines: str) -> VEventAccumulator:
    """Build a VEventAccumulator from raw property lines."""
    vevent = VEventAccumulator()
    for line in lines:
        parsed = parse_property_line(line)
        assert parsed is not None, line
        vevent.add(parsed)
    return vevent


@pytest.fixture
def feed_builder() -> Callable[..., str]:
    """Return the build_feed helper."""
    return build_feed


@pytest.fixture
def accumulator_factory() -> Callable[..., VEventAccumulator]:
    """Return the make_accumulator helper."""
    return make_accumulator


@pytest.fixture
def vendor_feed_bytes() -> bytes:
    """Four-event vendor feed (timed, all-day, folded/duration, cancelled) as CRLF bytes."""
    return "\r\n".join(VENDOR_FEED_LINES).encode("utf-8")


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Clear VENDORCAL_* variables so config and logging tests are deterministic."""
    for name in (
        "VENDORCAL_DEBUG",
        "VENDORCAL_LOG_LEVEL",
        "VENDORCAL_INCLUDE_CANCELLED",
        "VENDORCAL_DEFAULT_TIMEZONE",
        "VENDORCAL_TEST_TIME",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def restore_logging_levels() -> Generator[None, Any, None]:
    """Restore logger levels changed by configure_lite_logging."""
    from vendorcal_lite.lite_logging import LITE_MODULES

    names = ["", *LITE_MODULES]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def pytest_configure(config: Any) -> None:
    """Register test markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: Cross-module and reference-decoder tests")
