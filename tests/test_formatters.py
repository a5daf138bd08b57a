"""Tests for message formatting and statistics."""

import asyncio
from datetime import date, datetime

from fakes import MemoryStore
from sleepybell.bot.formatters import (
    format_alarm_list,
    format_alarm_message,
    format_heatmap,
    format_pending_list,
)
from sleepybell.bot.stats import format_stats_message, get_sleep_stats
from sleepybell.db.models import SleepHeatMapCell, SleepRecords, WallTime
from sleepybell.engine.alarm_set import AlarmSet
from sleepybell.engine.session import AlarmSession
from sleepybell.utils.time_utils import current_period


def test_format_alarm_list():
    """Alarms show role, gap and sound."""
    alarms = AlarmSet([WallTime(7, 0, 0, "AM"), WallTime(7, 2, 30, "AM")])
    message = format_alarm_list(alarms, {"07:00:00 AM": "rooster.wav"})

    assert "Your Alarms (2)" in message
    assert "07:00:00 AM</b> (Primary #1)" in message
    assert "07:02:30 AM</b> (Secondary #2)" in message
    assert "+2 min 30 sec after previous" in message
    assert "rooster.wav" in message


def test_format_alarm_list_period_header():
    """The current day period is shown under the title."""
    alarms = AlarmSet([WallTime(7, 0, 0, "AM")])

    assert "It is night now" in format_alarm_list(alarms, {}, current_period(datetime(2025, 1, 1, 23, 0)))
    assert "It is morning now" in format_alarm_list(alarms, {}, current_period(datetime(2025, 1, 1, 9, 0)))
    assert "It is" not in format_alarm_list(alarms, {})


def test_format_alarm_list_empty():
    """Empty set shows a hint."""
    assert "no alarms" in format_alarm_list(AlarmSet(), {})


def test_format_alarm_message():
    """Primary and secondary alarms read differently."""
    alarms = AlarmSet([WallTime(7, 0, 0, "AM"), WallTime(7, 5, 0, "AM")])

    assert "Time to wake up" in format_alarm_message(alarms[0], "classic.wav")
    assert "still awake" in format_alarm_message(alarms[1], "classic.wav")


def test_format_pending_list():
    """Pending notifications show sound and fire count."""
    message = format_pending_list(
        ["07:00:00 AM"], {"07:00:00 AM": "alert.wav"}, {"07:00:00 AM": 1}
    )

    assert "alert.wav" in message
    assert "Triggered: 1 time" in message
    assert format_pending_list([], {}, {}) == "No notifications are scheduled."


def test_format_heatmap():
    """Cells are grouped per day, sorted by hour."""
    cells = [
        SleepHeatMapCell(date(2025, 1, 1), 8, 1),
        SleepHeatMapCell(date(2025, 1, 1), 7, 2),
    ]

    assert format_heatmap(cells) == "<code>2025-01-01</code> 07h×2, 08h×1"
    assert format_heatmap([]) == "No wake-up history yet."


def test_sleep_stats():
    """Statistics summarize the wake/sleep history."""
    store = MemoryStore()
    store.records = SleepRecords(
        wake_dates=["2025-01-01", "2025-01-02"],
        wake_times=["07:00:00 AM", "08:00:00 AM"],
        sleep_dates=["2025-01-01", "bad"],
        sleep_times=["06:50:00 AM", "06:50:00 AM"],
        fire_counts={"06:50:00 AM": 2, "07:00:00 AM": 2},
    )
    session = AlarmSession(store)
    asyncio.run(session.load(date(2025, 1, 2)))

    stats = get_sleep_stats(session)

    assert stats['got_up'] == 2
    assert stats['back_to_sleep'] == 1
    assert stats['dropped'] == 1
    assert stats['days_tracked'] == 2
    assert stats['avg_wake_time'] == "07:30 AM"
    assert stats['busiest'] == {'day': '2025-01-01', 'hour': '06:00 AM', 'count': 1}
    assert stats['total_fires'] == 4

    message = format_stats_message(stats)
    assert "Got up: 2" in message
    assert "1 unreadable records skipped" in message


def test_sleep_stats_empty():
    """No history gives zeros."""
    session = AlarmSession(MemoryStore())
    stats = get_sleep_stats(session)

    assert stats['total_events'] == 0
    assert stats['success_rate'] == 0.0
    assert stats['avg_wake_time'] is None
    assert stats['busiest'] is None
    assert "Success rate: 0.0%" in format_stats_message(stats)


def test_wake_response_feeds_stats():
    """Answers recorded through the session show up in the stats."""
    session = AlarmSession(MemoryStore())
    asyncio.run(session.record_wake_response(datetime(2025, 1, 1, 7, 0, 0), got_up=True))

    assert get_sleep_stats(session)['got_up'] == 1
