"""
Tests for date and time extraction.

"Now" is Monday 19 October 2026, 10:00 in Amsterdam.
"""

import pytest
from datetime import date, datetime, time, timezone

from conftest import AMSTERDAM, FIXED_NOW

from taskpilot.services.slots.dates import (
    extract_date,
    extract_time,
    next_weekday,
    parse_date_value,
    parse_datetime_value,
    parse_time_of_day,
    resolve_date_time,
)


class TestTimeOfDay:

    @pytest.mark.parametrize("value,expected", [
        ("14:30", time(14, 30)),
        ("14.30", time(14, 30)),
        ("9", time(9, 0)),
        ("9h", time(9, 0)),
        ("3pm", time(15, 0)),
        ("12am", time(0, 0)),
        ("25:00", None),
        ("soon", None),
    ])
    def test_parse_time_of_day(self, value, expected):
        assert parse_time_of_day(value) == expected

    @pytest.mark.parametrize("text,expected", [
        ("call Anna at 14:30", time(14, 30)),
        ("dentist 3 pm on friday", time(15, 0)),
        ("remind me at 9 to stretch", time(9, 0)),
        ("a 30-minute meeting", None),
        ("lunch for 4 people", None),
        ("on 12/03", None),
    ])
    def test_extract_time(self, text, expected):
        assert extract_time(text) == expected


class TestDates:

    def test_relative_words(self):
        assert extract_date("today", now=FIXED_NOW) == date(2026, 10, 19)
        assert extract_date("tomorrow", now=FIXED_NOW) == date(2026, 10, 20)
        assert extract_date("the day after tomorrow", now=FIXED_NOW) == date(2026, 10, 21)

    def test_weekday_is_strictly_after_today(self):
        assert extract_date("on Friday", now=FIXED_NOW) == date(2026, 10, 23)
        # Today is Monday: "monday" means next week
        assert extract_date("monday", now=FIXED_NOW) == date(2026, 10, 26)
        assert next_weekday(0, date(2026, 10, 19)) == date(2026, 10, 26)

    def test_numeric_date_with_year(self):
        assert extract_date("on 12/03/2027", now=FIXED_NOW) == date(2027, 3, 12)

    def test_two_digit_year_is_current_century(self):
        assert extract_date("12-03-27", now=FIXED_NOW) == date(2027, 3, 12)

    def test_past_date_without_year_rolls_forward(self):
        assert extract_date("on 01/02", now=FIXED_NOW) == date(2027, 2, 1)
        assert extract_date("on 24/12", now=FIXED_NOW) == date(2026, 12, 24)

    def test_invalid_date(self):
        assert extract_date("on 31/02/2027", now=FIXED_NOW) is None

    def test_parse_date_value_iso(self):
        assert parse_date_value("2026-11-05") == date(2026, 11, 5)


class TestDateTimeValues:

    def test_iso_with_offset(self):
        parsed = parse_datetime_value("2026-10-20T07:00:00Z", zone=AMSTERDAM)

        assert parsed == datetime(2026, 10, 20, 9, 0, tzinfo=AMSTERDAM)

    def test_naive_iso_is_local(self):
        parsed = parse_datetime_value("2026-10-20T09:00", zone=AMSTERDAM)

        assert parsed.utcoffset().total_seconds() == 2 * 3600
        assert parsed.hour == 9

    def test_epoch_milliseconds(self):
        parsed = parse_datetime_value(1792404000000, zone=AMSTERDAM)

        assert parsed.astimezone(timezone.utc) == datetime(2026, 10, 20, 10, 0, tzinfo=timezone.utc)

    def test_date_only_is_not_a_timestamp(self):
        assert parse_datetime_value("2026-10-20", zone=AMSTERDAM) is None


class TestResolveDateTime:

    def test_structured_datetime_wins(self):
        resolved = resolve_date_time(
            {"dateTime": "2026-10-22T16:00"}, "tomorrow at 9", now=FIXED_NOW, zone=AMSTERDAM
        )

        assert resolved == datetime(2026, 10, 22, 16, 0, tzinfo=AMSTERDAM)

    def test_date_and_time_fields(self):
        resolved = resolve_date_time(
            {"date": "tomorrow", "time": "14:30"}, "", now=FIXED_NOW, zone=AMSTERDAM
        )

        assert resolved == datetime(2026, 10, 20, 14, 30, tzinfo=AMSTERDAM)

    def test_date_without_time_defaults_to_nine(self):
        resolved = resolve_date_time({}, "on Friday", now=FIXED_NOW, zone=AMSTERDAM)

        assert resolved == datetime(2026, 10, 23, 9, 0, tzinfo=AMSTERDAM)

    def test_time_without_date_is_next_occurrence(self):
        later_today = resolve_date_time({}, "at 14:30", now=FIXED_NOW, zone=AMSTERDAM)
        already_passed = resolve_date_time({}, "at 08:15", now=FIXED_NOW, zone=AMSTERDAM)

        assert later_today == datetime(2026, 10, 19, 14, 30, tzinfo=AMSTERDAM)
        assert already_passed == datetime(2026, 10, 20, 8, 15, tzinfo=AMSTERDAM)

    def test_weekday_and_time_from_text(self):
        resolved = resolve_date_time(
            {}, "book a 30-minute team meeting Friday at 14:30", now=FIXED_NOW, zone=AMSTERDAM
        )

        assert resolved == datetime(2026, 10, 23, 14, 30, tzinfo=AMSTERDAM)

    def test_nothing_found(self):
        assert resolve_date_time({}, "call Anna", now=FIXED_NOW, zone=AMSTERDAM) is None
