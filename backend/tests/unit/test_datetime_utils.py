"""
Unit tests for datetime utilities.

Tests clinic timezone handling and the clock-time / interval helpers used by
the scheduler.
"""

import pytest
from datetime import datetime, timezone, timedelta
from zoneinfo import ZoneInfo

import utils.datetime_utils as datetime_utils
from utils.datetime_utils import (
    CLINIC_TZ, InvalidTimeFormatError, clinic_now, ensure_clinic_tz, format_clock_time,
    format_datetime, intervals_overlap, local_day_bounds, minute_of_day, parse_clock_end_time,
    parse_clock_time, parse_date_string, parse_datetime_to_clinic, same_local_day, weekday_of,
)


class TestClockTime:
    """Test HH:MM parsing and formatting."""

    @pytest.mark.parametrize("value,expected", [
        ("00:00", 0),
        ("09:00", 540),
        ("09:30", 570),
        ("12:00", 720),
        ("23:59", 1439),
    ])
    def test_parse_valid(self, value, expected):
        assert parse_clock_time(value) == expected

    @pytest.mark.parametrize("value", [
        "24:00", "1:1", "9:00", "", "ab:cd", "12:60", "12:5", " 09:00", "09:00:00",
        "09:30\n",  # trailing newline
        "1\u0663:00",  # Arabic-Indic digit
        "\uff10\uff19:00",  # fullwidth digits
    ])
    def test_parse_invalid(self, value):
        with pytest.raises(InvalidTimeFormatError):
            parse_clock_time(value)

    def test_invalid_format_is_value_error(self):
        """Callers that only catch ValueError still see malformed times."""
        with pytest.raises(ValueError):
            parse_clock_time("7pm")

    def test_end_time_accepts_midnight(self):
        assert parse_clock_end_time("24:00") == 1440
        assert parse_clock_end_time("17:00") == 1020
        with pytest.raises(InvalidTimeFormatError):
            parse_clock_end_time("24:30")

    def test_format(self):
        assert format_clock_time(0) == "00:00"
        assert format_clock_time(545) == "09:05"
        assert format_clock_time(1439) == "23:59"
        assert format_clock_time(1440) == "24:00"


class TestWeekdayAndMinute:
    """Weekday numbering is 0=Sunday; both values come from the clinic wall clock."""

    def test_thursday(self):
        assert weekday_of(datetime(2030, 1, 3, 10, 0, tzinfo=timezone.utc)) == 4

    def test_sunday_is_zero(self):
        assert weekday_of(datetime(2030, 1, 6, 10, 0, tzinfo=timezone.utc)) == 0

    def test_saturday_is_six(self):
        assert weekday_of(datetime(2030, 1, 5, 23, 59, tzinfo=timezone.utc)) == 6

    def test_minute_of_day(self):
        assert minute_of_day(datetime(2030, 1, 3, 10, 15, tzinfo=timezone.utc)) == 615
        assert minute_of_day(datetime(2030, 1, 3, 0, 0, tzinfo=timezone.utc)) == 0

    def test_uses_clinic_timezone(self, monkeypatch):
        """02:00 UTC Friday is still Thursday 21:00 in New York."""
        monkeypatch.setattr(datetime_utils, "CLINIC_TZ", ZoneInfo("America/New_York"))
        instant = datetime(2030, 1, 4, 2, 0, tzinfo=timezone.utc)

        assert weekday_of(instant) == 4
        assert minute_of_day(instant) == 21 * 60

    def test_same_local_day(self):
        a = datetime(2030, 1, 3, 9, 0, tzinfo=timezone.utc)
        assert same_local_day(a, a + timedelta(hours=14))
        assert not same_local_day(a, datetime(2030, 1, 4, 0, 0, tzinfo=timezone.utc))

    def test_same_local_day_in_clinic_timezone(self, monkeypatch):
        monkeypatch.setattr(datetime_utils, "CLINIC_TZ", ZoneInfo("America/New_York"))
        # 22:00 and 23:30 New York time on Jan 3, but different UTC dates
        a = datetime(2030, 1, 4, 3, 0, tzinfo=timezone.utc)
        b = datetime(2030, 1, 4, 4, 30, tzinfo=timezone.utc)
        assert same_local_day(a, b)

    def test_local_day_bounds(self):
        start, end = local_day_bounds(datetime(2030, 1, 3, 15, 30, tzinfo=timezone.utc))
        assert start == datetime(2030, 1, 3, 0, 0, tzinfo=timezone.utc)
        assert end == datetime(2030, 1, 4, 0, 0, tzinfo=timezone.utc)


class TestIntervalsOverlap:
    """Half-open interval overlap."""

    def test_overlapping(self):
        assert intervals_overlap(600, 660, 630, 690)
        assert intervals_overlap(600, 720, 630, 660)  # containment

    def test_touching_intervals_do_not_overlap(self):
        assert not intervals_overlap(600, 660, 660, 720)
        assert not intervals_overlap(660, 720, 600, 660)

    def test_disjoint(self):
        assert not intervals_overlap(540, 600, 700, 800)

    def test_datetimes(self):
        base = datetime(2030, 1, 3, 10, 0, tzinfo=timezone.utc)
        assert intervals_overlap(base, base + timedelta(minutes=30),
                                 base + timedelta(minutes=15), base + timedelta(minutes=45))
        assert not intervals_overlap(base, base + timedelta(minutes=30),
                                     base + timedelta(minutes=30), base + timedelta(minutes=60))


class TestEnsureClinicTz:
    """Test ensure_clinic_tz function."""

    def test_naive_datetime_is_clinic_local(self):
        result = ensure_clinic_tz(datetime(2030, 1, 3, 10, 0))
        assert result.tzinfo == CLINIC_TZ
        assert result.hour == 10

    def test_aware_datetime_is_converted(self, monkeypatch):
        monkeypatch.setattr(datetime_utils, "CLINIC_TZ", ZoneInfo("America/Chicago"))
        result = ensure_clinic_tz(datetime(2030, 1, 3, 16, 0, tzinfo=timezone.utc))
        # UTC 16:00 is 10:00 in Chicago (UTC-6 in January)
        assert result.hour == 10

    def test_none(self):
        assert ensure_clinic_tz(None) is None

    def test_clinic_now_is_aware(self):
        assert clinic_now().tzinfo is not None


class TestParsing:
    """Test ISO datetime and list-filter date parsing."""

    def test_parse_datetime_with_z(self):
        result = parse_datetime_to_clinic("2030-01-03T10:00:00Z")
        assert result == datetime(2030, 1, 3, 10, 0, tzinfo=timezone.utc)

    def test_parse_datetime_with_offset(self):
        result = parse_datetime_to_clinic("2030-01-03T10:00:00+02:00")
        assert result == datetime(2030, 1, 3, 8, 0, tzinfo=timezone.utc)

    def test_parse_naive_datetime_is_clinic_local(self):
        result = parse_datetime_to_clinic("2030-01-03T10:00:00")
        assert result.tzinfo == CLINIC_TZ
        assert result.hour == 10

    def test_parse_datetime_passthrough(self):
        dt = datetime(2030, 1, 3, 10, 0, tzinfo=timezone.utc)
        assert parse_datetime_to_clinic(dt) == dt

    @pytest.mark.parametrize("value", ["", "not a date", "2030-13-45T10:00:00"])
    def test_parse_datetime_invalid(self, value):
        with pytest.raises(ValueError):
            parse_datetime_to_clinic(value)

    def test_parse_date_string_is_local_midnight(self):
        result = parse_date_string("2030-01-03")
        assert result == datetime(2030, 1, 3, 0, 0, tzinfo=CLINIC_TZ)

    def test_parse_date_string_accepts_datetime(self):
        result = parse_date_string("2030-01-03T12:00:00Z")
        assert result == datetime(2030, 1, 3, 12, 0, tzinfo=timezone.utc)

    def test_parse_date_string_invalid(self):
        with pytest.raises(ValueError):
            parse_date_string("2030-02-30")

    def test_format_datetime(self):
        assert format_datetime(datetime(2030, 1, 3, 10, 0, tzinfo=timezone.utc)) == "Thu 2030-01-03 10:00"
