"""Unit tests for vendorcal_lite.calendar.lite_line_parser."""

import logging

import pytest

from vendorcal_lite.calendar.lite_line_parser import (
    PropertyLine,
    parse_property_line,
    split_lines,
    unescape_text,
    unfold_lines,
)

pytestmark = pytest.mark.unit


class TestSplitAndUnfold:
    """Tests for line splitting and RFC 5545 unfolding."""

    def test_split_lines_handles_crlf_and_lf(self):
        assert split_lines("A:1\r\nB:2\nC:3") == ["A:1", "B:2", "C:3"]

    def test_unfold_joins_space_continuation(self):
        lines = [
            "SUMMARY:Prep call (folded title that spans",
            "  lines for readability)",
        ]
        assert unfold_lines(lines) == [
            "SUMMARY:Prep call (folded title that spans lines for readability)"
        ]

    def test_unfold_joins_tab_continuation(self):
        assert unfold_lines(["DESCRIPTION:abc", "\tdef"]) == ["DESCRIPTION:abcdef"]

    def test_unfold_joins_multiple_continuations(self):
        assert unfold_lines(["X:a", " b", " c", "Y:d"]) == ["X:abc", "Y:d"]

    def test_leading_continuation_is_kept(self):
        """A continuation with nothing before it is left untouched."""
        assert unfold_lines([" orphan", "UID:1"]) == [" orphan", "UID:1"]

    def test_unfold_preserves_order_and_content(self):
        lines = ["BEGIN:VEVENT", "UID:1", "", "END:VEVENT"]
        assert unfold_lines(lines) == lines


class TestUnescapeText:
    """Tests for TEXT value unescaping."""

    def test_unescapes_all_sequences(self):
        raw = r"Line1\nLine2\, more\; and \\ slash\Nend"
        assert unescape_text(raw) == "Line1\nLine2, more; and \\ slash\nend"

    def test_escaped_backslash_is_not_reinterpreted(self):
        """``\\\\n`` is an escaped backslash followed by a literal n."""
        assert unescape_text(r"C:\\new") == "C:\\new"

    def test_unknown_escape_is_left_alone(self):
        assert unescape_text(r"a\tb") == r"a\tb"

    def test_plain_value_unchanged(self):
        assert unescape_text("Plain value") == "Plain value"


class TestParsePropertyLine:
    """Tests for property tokenizing."""

    def test_simple_property(self):
        assert parse_property_line("UID:event-1@example.com") == PropertyLine(
            "UID", {}, "event-1@example.com"
        )

    def test_parameters_are_parsed(self):
        parsed = parse_property_line("DTSTART;TZID=Asia/Tashkent:20240115T100000")

        assert parsed is not None
        assert parsed.name == "DTSTART"
        assert parsed.params == {"TZID": ["Asia/Tashkent"]}
        assert parsed.value == "20240115T100000"
        assert parsed.param("tzid") == "Asia/Tashkent"

    def test_names_are_upper_cased(self):
        parsed = parse_property_line("dtstart;value=date:20240120")

        assert parsed is not None
        assert parsed.name == "DTSTART"
        assert parsed.params == {"VALUE": ["date"]}
        assert parsed.has_param_value("VALUE", "DATE")

    def test_flag_parameter_becomes_true(self):
        parsed = parse_property_line("X-FLAGGED;RSVP:yes")

        assert parsed is not None
        assert parsed.params == {"RSVP": ["TRUE"]}

    def test_empty_parameter_value_is_flag(self):
        parsed = parse_property_line("X-PROP;EMPTY=:v")

        assert parsed is not None
        assert parsed.params == {"EMPTY": ["TRUE"]}

    def test_multi_valued_parameter(self):
        parsed = parse_property_line("ATTENDEE;MEMBER=a@x.com, b@x.com:mailto:c@x.com")

        assert parsed is not None
        assert parsed.params["MEMBER"] == ["a@x.com", "b@x.com"]
        assert parsed.value == "mailto:c@x.com"

    def test_colon_inside_quoted_parameter(self):
        parsed = parse_property_line('ATTENDEE;CN="Doe: John";ROLE=CHAIR:mailto:j@example.com')

        assert parsed is not None
        assert parsed.params == {"CN": ["Doe: John"], "ROLE": ["CHAIR"]}
        assert parsed.value == "mailto:j@example.com"

    def test_quoted_tzid_is_unquoted(self):
        parsed = parse_property_line('DTSTART;TZID="Europe/Berlin":20240301T090000')

        assert parsed is not None
        assert parsed.param("TZID") == "Europe/Berlin"

    def test_value_is_unescaped(self):
        parsed = parse_property_line("DESCRIPTION:Discuss requirements\\nCapture expectations")

        assert parsed is not None
        assert parsed.value == "Discuss requirements\nCapture expectations"

    def test_empty_value_is_allowed(self):
        assert parse_property_line("LOCATION:") == PropertyLine("LOCATION", {}, "")

    @pytest.mark.parametrize("line", ["NO COLON HERE", ":orphan-value", ";X=1:value"])
    def test_malformed_lines_return_none(self, line):
        assert parse_property_line(line) is None

    def test_has_param_value_missing_param(self):
        parsed = parse_property_line("DTSTART:20240115T100000")

        assert parsed is not None
        assert parsed.param("TZID") is None
        assert not parsed.has_param_value("VALUE", "DATE")


def test_malformed_line_is_logged_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="vendorcal_lite.calendar.lite_line_parser")

    assert parse_property_line("NO COLON HERE") is None
    assert "NO COLON HERE" in caplog.text
