"""Trigger detection - which alarm fires now, and which were missed today."""

import logging
from datetime import date, time
from typing import Iterable, Set

from sleepybell.db.models import AlarmEntry, AlertLogSnapshot, ScheduledKey
from sleepybell.engine.alarm_set import AlarmSet
from sleepybell.utils.time_utils import to_hour24

logger = logging.getLogger(__name__)


def scheduled_key(entry: AlarmEntry) -> ScheduledKey:
    """Normalized trigger time of an alarm (12 AM -> hour 0)."""
    return ScheduledKey(to_hour24(entry.time), entry.time.minute, entry.time.second)


def clock_key(now: time) -> ScheduledKey:
    """Key for a wall clock reading. Accepts a ``time`` or ``datetime``."""
    return ScheduledKey(now.hour, now.minute, now.second)


class TriggeredAlertLog:
    """Alarms that have already fired today.

    Must be reset with ``reset_if_new_day`` before the first check of a
    session and again whenever the local date changes.
    """

    def __init__(
        self, keys: Iterable[ScheduledKey] = (), last_reset_day: date | None = None
    ):
        self.keys: Set[ScheduledKey] = set(keys)
        self.last_reset_day = last_reset_day

    def __contains__(self, key: ScheduledKey) -> bool:
        return key in self.keys

    def __len__(self) -> int:
        return len(self.keys)

    def record(self, key: ScheduledKey) -> None:
        self.keys.add(key)

    def reset_if_new_day(self, today: date) -> bool:
        """Clear the log if it was last reset on another day.

        Returns:
            True if the log was cleared
        """
        if self.last_reset_day == today:
            return False

        logger.info(
            f"New day {today.isoformat()}: clearing {len(self.keys)} triggered alarms"
        )
        self.keys.clear()
        self.last_reset_day = today
        return True

    def to_snapshot(self) -> AlertLogSnapshot:
        return AlertLogSnapshot(
            keys=sorted(str(k) for k in self.keys),
            last_reset_day=self.last_reset_day.isoformat() if self.last_reset_day else None,
        )

    @classmethod
    def from_snapshot(cls, snapshot: AlertLogSnapshot) -> "TriggeredAlertLog":
        keys = []
        for raw in snapshot.keys:
            try:
                keys.append(ScheduledKey.parse(raw))
            except ValueError:
                logger.warning(f"Skipping malformed triggered key {raw!r}")

        last_reset_day = None
        if snapshot.last_reset_day:
            try:
                last_reset_day = date.fromisoformat(snapshot.last_reset_day)
            except ValueError:
                logger.warning(f"Ignoring malformed reset day {snapshot.last_reset_day!r}")

        return cls(keys, last_reset_day)


def check_now(
    alarm_set: AlarmSet, now: time, log: TriggeredAlertLog
) -> AlarmEntry | None:
    """Find the alarm scheduled for exactly this second.

    Meant to run once per second. The first matching alarm that has not
    fired today is recorded in ``log`` and returned; later matches wait
    for the next call.

    Returns:
        The alarm to fire, or None
    """
    current = clock_key(now)

    for entry in alarm_set:
        key = scheduled_key(entry)
        if key == current and key not in log:
            log.record(key)
            return entry

    return None


def check_missed(
    alarm_set: AlarmSet, now: time, log: TriggeredAlertLog
) -> AlarmEntry | None:
    """Find an alarm whose time already passed today without firing.

    Meant to run at startup to catch up on alarms missed while the app was
    not running. An alarm scheduled for the current second counts as
    passed. Call repeatedly to drain every missed alarm.

    Returns:
        The first missed alarm, recorded in ``log``, or None
    """
    current = clock_key(now)

    for entry in alarm_set:
        key = scheduled_key(entry)
        if key in log:
            continue
        if key <= current:
            log.record(key)
            return entry

    return None
