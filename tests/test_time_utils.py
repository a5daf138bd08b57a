"""Tests for time utilities."""

from datetime import datetime

import pytest

from sleepybell.db.models import WallTime
from sleepybell.utils.time_utils import (
    current_period,
    day_period,
    format_duration,
    format_seconds_label,
    format_wall_time,
    is_morning,
    normalize_hour,
    raw_hour24,
    to_hour24,
)


def test_to_hour24():
    """Test 12-hour to 24-hour conversion."""
    assert to_hour24(WallTime(1, 0, 0, "AM")) == 1
    assert to_hour24(WallTime(11, 59, 59, "AM")) == 11
    assert to_hour24(WallTime(12, 0, 0, "PM")) == 12
    assert to_hour24(WallTime(1, 0, 0, "PM")) == 13
    assert to_hour24(WallTime(11, 0, 0, "PM")) == 23


def test_midnight_raw_and_normalized():
    """12 AM is 24 in raw form and 0 as a clock hour."""
    midnight = WallTime(12, 0, 0, "AM")

    assert raw_hour24(midnight) == 24
    assert normalize_hour(raw_hour24(midnight)) == 0
    assert to_hour24(midnight) == 0


def test_is_morning_boundaries():
    """6:00:00 AM is morning, 6:00:00 PM is night."""
    assert is_morning(WallTime(6, 0, 0, "AM"))
    assert not is_morning(WallTime(5, 59, 59, "AM"))
    assert is_morning(WallTime(5, 59, 59, "PM"))
    assert not is_morning(WallTime(6, 0, 0, "PM"))
    assert not is_morning(WallTime(12, 30, 0, "AM"))
    assert is_morning(WallTime(12, 30, 0, "PM"))


def test_is_morning_matches_hour_window():
    """is_morning agrees with 6 <= hour < 18 for every hour of the day."""
    for period in ("AM", "PM"):
        for hour12 in range(1, 13):
            time = WallTime(hour12, 0, 0, period)
            assert is_morning(time) == (6 <= to_hour24(time) < 18)


def test_day_period():
    """Test Morning/Night labels."""
    assert day_period(WallTime(7, 0, 0, "AM")) == "Morning"
    assert day_period(WallTime(9, 0, 0, "PM")) == "Night"


def test_current_period():
    """Test the period of a live clock reading."""
    assert current_period(datetime(2025, 1, 1, 6, 0)) == "Morning"
    assert current_period(datetime(2025, 1, 1, 17, 59)) == "Morning"
    assert current_period(datetime(2025, 1, 1, 18, 0)) == "Night"
    assert current_period(datetime(2025, 1, 1, 2, 0)) == "Night"


@pytest.mark.parametrize(
    "time, expected",
    [
        (WallTime(9, 5, 3, "AM"), "09:05:03 AM"),
        (WallTime(10, 5, 3, "AM"), "10:05:03 AM"),
        (WallTime(10, 15, 3, "PM"), "10:15:03 PM"),
        (WallTime(10, 5, 30, "PM"), "10:05:30 PM"),
        (WallTime(9, 5, 30, "AM"), "09:05:30 AM"),
        (WallTime(9, 15, 3, "PM"), "09:15:03 PM"),
        (WallTime(12, 45, 59, "PM"), "12:45:59 PM"),
    ],
)
def test_format_wall_time(time, expected):
    """Every field is zero-padded to two digits on its own."""
    assert format_wall_time(time) == expected


def test_wall_time_validation():
    """Out of range fields are rejected."""
    with pytest.raises(ValueError):
        WallTime(0, 0, 0, "AM")
    with pytest.raises(ValueError):
        WallTime(13, 0, 0, "AM")
    with pytest.raises(ValueError):
        WallTime(8, 60, 0, "AM")
    with pytest.raises(ValueError):
        WallTime(8, 0, 60, "PM")
    with pytest.raises(ValueError):
        WallTime(8, 0, 0, "XM")  # type: ignore[arg-type]


def test_format_seconds_label():
    """Test chart axis labels."""
    assert format_seconds_label(0) == "12:00 AM"
    assert format_seconds_label(7200) == "02:00 AM"
    assert format_seconds_label(27000) == "07:30 AM"
    assert format_seconds_label(43200) == "12:00 PM"
    assert format_seconds_label(50400) == "02:00 PM"


def test_format_duration():
    """Test gap formatting."""
    assert format_duration(1) == "1 second"
    assert format_duration(45) == "45 seconds"
    assert format_duration(60) == "1 minute"
    assert format_duration(90) == "1 min 30 sec"
    assert format_duration(600) == "10 minutes"
