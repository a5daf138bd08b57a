"""Tests for the alarm session and the clock engine."""

import asyncio
from datetime import date, datetime

import pytest

from fakes import MemoryStore, RecordingNotifier
from sleepybell.db.models import AlertLogSnapshot, SleepRecords, WallTime
from sleepybell.engine.alarm_set import EmptyAlarmSet, SpacingViolation
from sleepybell.engine.clock_engine import heartbeat, is_stalled, seconds_to_check, startup_recovery
from sleepybell.engine.session import AlarmSession


def make_session(store=None, notifier=None):
    store = store or MemoryStore()
    notifier = notifier or RecordingNotifier()
    session = AlarmSession(store, notifier)
    asyncio.run(session.load(date(2025, 1, 1)))
    return session, store, notifier


def test_add_alarm_persists_and_schedules():
    """Adding an alarm saves the set and schedules its notification."""
    session, store, notifier = make_session()

    entry = asyncio.run(session.add_alarm(WallTime(8, 0, 0, "AM"), "rooster"))

    assert entry.role == "Primary"
    assert store.alarm_times == [WallTime(8, 0, 0, "AM")]
    assert store.sound_map == {"08:00:00 AM": "rooster.wav"}
    assert notifier.pending() == ["08:00:00 AM"]
    assert session.sound_for(entry) == "rooster.wav"


def test_add_alarm_default_sound():
    """Without a sound the default is used."""
    session, store, _ = make_session()

    asyncio.run(session.add_alarm(WallTime(8, 0, 0, "AM")))
    assert store.sound_map == {"08:00:00 AM": "classic.wav"}


def test_add_alarm_rejected_leaves_state():
    """A spacing violation neither saves nor schedules anything."""
    session, store, notifier = make_session()
    asyncio.run(session.add_alarm(WallTime(8, 0, 0, "AM")))
    saves = store.saves

    with pytest.raises(SpacingViolation):
        asyncio.run(session.add_alarm(WallTime(8, 0, 30, "AM")))

    assert len(session.alarm_set) == 1
    assert store.saves == saves
    assert notifier.pending() == ["08:00:00 AM"]


def test_add_alarm_unknown_sound():
    """Unknown sounds are rejected before the set changes."""
    session, _, _ = make_session()

    with pytest.raises(ValueError):
        asyncio.run(session.add_alarm(WallTime(8, 0, 0, "AM"), "trumpet"))
    assert len(session.alarm_set) == 0


def test_remove_last_and_clear():
    """Removing alarms cancels their notifications."""
    session, store, notifier = make_session()
    asyncio.run(session.add_alarm(WallTime(8, 0, 0, "AM")))
    asyncio.run(session.add_alarm(WallTime(8, 5, 0, "AM")))
    asyncio.run(session.add_alarm(WallTime(8, 10, 0, "AM")))

    removed = asyncio.run(session.remove_last())
    assert removed.id == 3
    assert notifier.pending() == ["08:00:00 AM", "08:05:00 AM"]
    assert len(store.alarm_times) == 2

    assert asyncio.run(session.clear()) == 2
    assert notifier.pending() == []
    assert store.alarm_times == []
    assert store.sound_map == {}

    with pytest.raises(EmptyAlarmSet):
        asyncio.run(session.remove_last())


def test_cancel_notification_keeps_alarm():
    """Cancelling a notification does not touch the alarm set."""
    session, _, notifier = make_session()
    asyncio.run(session.add_alarm(WallTime(8, 0, 0, "AM")))

    assert asyncio.run(session.cancel_notification("08:00:00 AM"))
    assert not asyncio.run(session.cancel_notification("08:00:00 AM"))
    assert notifier.pending() == []
    assert len(session.alarm_set) == 1


def test_load_restores_latest_snapshot():
    """A new session sees what the previous one saved."""
    session, store, _ = make_session()
    asyncio.run(session.add_alarm(WallTime(8, 0, 0, "AM"), "alert"))
    asyncio.run(session.add_alarm(WallTime(8, 2, 0, "AM")))

    restored, _, _ = make_session(store=store)

    assert restored.alarm_set == session.alarm_set
    assert restored.sound_map == session.sound_map


def test_load_resets_stale_log():
    """A log from a previous day is cleared on load."""
    store = MemoryStore()
    store.alert_log = AlertLogSnapshot(keys=["8:0:0"], last_reset_day="2024-12-31")

    session, store, _ = make_session(store=store)

    assert len(session.log) == 0
    assert store.alert_log.last_reset_day == "2025-01-01"


def test_tick_end_to_end():
    """The alarm fires exactly on the matching tick and only once."""
    session, store, notifier = make_session()
    asyncio.run(session.add_alarm(WallTime(8, 0, 0, "AM"), "morning"))

    assert asyncio.run(heartbeat(session, datetime(2025, 1, 1, 7, 59, 59))) == []

    fired = asyncio.run(heartbeat(session, datetime(2025, 1, 1, 8, 0, 0)))
    assert [e.id for e in fired] == [1]
    assert notifier.delivered == [(1, "morning.wav")]
    assert store.alert_log.keys == ["8:0:0"]
    assert session.fire_count("08:00:00 AM") == 1

    # Same second again: already logged
    assert asyncio.run(heartbeat(session, datetime(2025, 1, 1, 8, 0, 0))) == []

    # Next day it fires again
    fired = asyncio.run(heartbeat(session, datetime(2025, 1, 2, 8, 0, 0)))
    assert [e.id for e in fired] == [1]
    assert session.fire_count("08:00:00 AM") == 2


def test_heartbeat_catches_skipped_seconds():
    """A late tick still fires an alarm from a skipped second."""
    session, _, notifier = make_session()
    asyncio.run(session.add_alarm(WallTime(8, 0, 0, "AM")))

    fired = asyncio.run(
        heartbeat(session, datetime(2025, 1, 1, 8, 0, 2), last_tick=datetime(2025, 1, 1, 7, 59, 59))
    )
    assert [e.id for e in fired] == [1]


def test_heartbeat_after_long_stall():
    """Alarms due during a multi-minute stall fire on the next tick."""
    session, _, notifier = make_session()
    asyncio.run(session.add_alarm(WallTime(8, 2, 0, "AM")))
    asyncio.run(session.add_alarm(WallTime(8, 12, 0, "AM")))

    fired = asyncio.run(
        heartbeat(session, datetime(2025, 1, 1, 8, 10, 0), last_tick=datetime(2025, 1, 1, 8, 0, 0))
    )
    assert [e.id for e in fired] == [1]
    assert [d[0] for d in notifier.delivered] == [1]

    # Regular ticks resume and the alarm is not delivered twice
    assert asyncio.run(
        heartbeat(session, datetime(2025, 1, 1, 8, 10, 1), last_tick=datetime(2025, 1, 1, 8, 10, 0))
    ) == []
    assert [d[0] for d in notifier.delivered] == [1]


def test_is_stalled():
    now = datetime(2025, 1, 1, 8, 10, 0)

    assert not is_stalled(now, None)
    assert not is_stalled(now, datetime(2025, 1, 1, 8, 8, 0))
    assert is_stalled(now, datetime(2025, 1, 1, 8, 7, 59))


def test_seconds_to_check():
    """Every second after the previous tick is covered."""
    now = datetime(2025, 1, 1, 8, 0, 2, 500)

    assert seconds_to_check(now, None) == [datetime(2025, 1, 1, 8, 0, 2)]
    assert seconds_to_check(now, datetime(2025, 1, 1, 8, 0, 0)) == [
        datetime(2025, 1, 1, 8, 0, 1),
        datetime(2025, 1, 1, 8, 0, 2),
    ]
    assert len(seconds_to_check(now, datetime(2025, 1, 1, 6, 0, 0))) == 120


def test_heartbeat_delivery_failure():
    """A failed delivery is logged and the alarm is not re-fired."""
    session, _, notifier = make_session(notifier=RecordingNotifier(fail=True))
    asyncio.run(session.add_alarm(WallTime(8, 0, 0, "AM")))

    fired = asyncio.run(heartbeat(session, datetime(2025, 1, 1, 8, 0, 0)))
    assert len(fired) == 1
    assert notifier.delivered == []
    assert asyncio.run(heartbeat(session, datetime(2025, 1, 1, 8, 0, 0))) == []


def test_startup_recovery():
    """Alarms that passed while down are delivered once at startup."""
    session, _, notifier = make_session()
    asyncio.run(session.add_alarm(WallTime(8, 30, 0, "AM")))
    asyncio.run(session.add_alarm(WallTime(8, 35, 0, "AM")))

    assert asyncio.run(startup_recovery(session, datetime(2025, 1, 1, 8, 0, 0))) == 0
    assert asyncio.run(startup_recovery(session, datetime(2025, 1, 1, 8, 32, 0))) == 1
    assert asyncio.run(startup_recovery(session, datetime(2025, 1, 1, 9, 0, 0))) == 1
    assert asyncio.run(startup_recovery(session, datetime(2025, 1, 1, 9, 0, 0))) == 0
    assert [d[0] for d in notifier.delivered] == [1, 2]


def test_record_wake_response():
    """Yes goes to the wake lists, no to the sleep lists."""
    session, store, _ = make_session()

    asyncio.run(session.record_wake_response(datetime(2025, 1, 1, 7, 15, 0), got_up=False))
    asyncio.run(session.record_wake_response(datetime(2025, 1, 1, 7, 45, 0), got_up=True))

    assert store.records.wake_dates == ["2025-01-01"]
    assert store.records.wake_times == ["07:45:00 AM"]
    assert store.records.sleep_times == ["07:15:00 AM"]

    events = session.events()
    assert [e.kind for e in events] == ["got_up", "went_back_to_sleep"]

    cells = session.heatmap()
    assert len(cells) == 1
    assert cells[0].hour == 7 and cells[0].count == 2


def test_delete_everything():
    """Reset forgets alarms, sounds and history."""
    store = MemoryStore()
    store.records = SleepRecords(wake_dates=["2025-01-01"], wake_times=["07:00:00 AM"])
    session, store, notifier = make_session(store=store)
    asyncio.run(session.add_alarm(WallTime(8, 0, 0, "AM")))

    asyncio.run(session.delete_everything())

    assert len(session.alarm_set) == 0
    assert session.events() == []
    assert notifier.pending() == []
    assert store.alarm_times == []
