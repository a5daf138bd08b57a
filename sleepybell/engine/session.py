"""Alarm session - owns the alarm set, trigger log and wake history."""

import asyncio
import logging
from datetime import date, datetime
from typing import List, Protocol

from sleepybell.db.models import (
    AlarmEntry,
    AlertLogSnapshot,
    SleepEvent,
    SleepHeatMapCell,
    SleepRecords,
    WallTime,
)
from sleepybell.engine.alarm_set import AlarmSet
from sleepybell.engine.sleep_events import aggregate_to_heatmap, events_from_records
from sleepybell.engine.trigger import TriggeredAlertLog, check_missed, check_now, scheduled_key
from sleepybell.utils.constants import DATE_FORMAT, SOUND_EXTENSION, SOUND_NAMES, TIME_FORMAT
from sleepybell.utils.time_utils import format_wall_time

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    """Latest-snapshot persistence. ``Repository`` is the SQLite implementation."""

    async def load_alarm_times(self) -> List[WallTime]: ...

    async def save_alarm_times(self, times: List[WallTime]) -> None: ...

    async def load_sound_map(self) -> dict[str, str]: ...

    async def save_sound_map(self, sound_map: dict[str, str]) -> None: ...

    async def load_sleep_records(self) -> SleepRecords: ...

    async def save_sleep_records(self, records: SleepRecords) -> None: ...

    async def load_alert_log(self) -> AlertLogSnapshot: ...

    async def save_alert_log(self, snapshot: AlertLogSnapshot) -> None: ...

    async def delete_all(self) -> None: ...


class Notifier(Protocol):
    """Delivers alarms to the user and tracks which are scheduled."""

    async def schedule(self, entry: AlarmEntry, sound_file: str) -> str: ...

    async def cancel(self, identifier: str) -> bool: ...

    def pending(self) -> List[str]: ...

    async def deliver(self, entry: AlarmEntry, sound_file: str) -> None: ...


def notification_id(entry: AlarmEntry) -> str:
    """Identifier of an alarm's notification: its display time."""
    return format_wall_time(entry.time)


def sound_file_for(sound: str) -> str:
    if sound not in SOUND_NAMES:
        raise ValueError(f"Unknown sound {sound!r}; choose from {', '.join(SOUND_NAMES)}")
    return sound + SOUND_EXTENSION


class AlarmSession:
    """In-memory alarm state backed by an injected store.

    All mutation goes through this object and is serialized by one lock,
    so the heartbeat and chat handlers can share it on one event loop.
    """

    def __init__(
        self,
        store: SnapshotStore,
        notifier: Notifier | None = None,
        default_sound: str = "classic",
    ):
        self.store = store
        self.notifier = notifier
        self.default_sound = default_sound

        self.alarm_set = AlarmSet()
        self.log = TriggeredAlertLog()
        self.sound_map: dict[str, str] = {}
        self.records = SleepRecords()
        self._lock = asyncio.Lock()

    async def load(self, today: date) -> None:
        """Load the latest snapshots and reset the trigger log if stale."""
        async with self._lock:
            self.alarm_set = AlarmSet(await self.store.load_alarm_times())
            self.sound_map = await self.store.load_sound_map()
            self.records = await self.store.load_sleep_records()
            self.log = TriggeredAlertLog.from_snapshot(await self.store.load_alert_log())

            if self.log.reset_if_new_day(today):
                await self.store.save_alert_log(self.log.to_snapshot())

        logger.info(
            f"Loaded {len(self.alarm_set)} alarms, "
            f"{len(self.records.wake_dates)} wake and {len(self.records.sleep_dates)} sleep records"
        )

    # Alarm editing

    async def add_alarm(self, time: WallTime, sound: str | None = None) -> AlarmEntry:
        """Add an alarm and schedule its notification.

        Raises:
            ValueError: unknown sound
            SpacingViolation: too close to or too far from the previous alarm
        """
        sound_file = sound_file_for(sound or self.default_sound)

        async with self._lock:
            entry = self.alarm_set.add_entry(time)
            await self.store.save_alarm_times(self.alarm_set.times)

            identifier = notification_id(entry)
            if self.notifier:
                identifier = await self.notifier.schedule(entry, sound_file)
            self.sound_map[identifier] = sound_file
            await self.store.save_sound_map(self.sound_map)

        return entry

    async def remove_last(self) -> AlarmEntry:
        """Remove the newest alarm and cancel its notification.

        Raises:
            EmptyAlarmSet: no alarms to remove
        """
        async with self._lock:
            entry = self.alarm_set.remove_last()
            await self.store.save_alarm_times(self.alarm_set.times)
            await self._cancel(notification_id(entry))
            await self.store.save_sound_map(self.sound_map)
        return entry

    async def clear(self) -> int:
        """Remove every alarm. Returns how many were removed."""
        async with self._lock:
            entries = self.alarm_set.entries
            self.alarm_set.clear()
            await self.store.save_alarm_times([])
            for entry in entries:
                await self._cancel(notification_id(entry))
            await self.store.save_sound_map(self.sound_map)
        return len(entries)

    async def cancel_notification(self, identifier: str) -> bool:
        """Cancel one pending notification, leaving the alarm set alone."""
        async with self._lock:
            cancelled = await self._cancel(identifier)
            await self.store.save_sound_map(self.sound_map)
        return cancelled

    async def _cancel(self, identifier: str) -> bool:
        self.sound_map.pop(identifier, None)
        if self.notifier:
            return await self.notifier.cancel(identifier)
        return True

    def pending(self) -> List[str]:
        if self.notifier:
            return self.notifier.pending()
        return [notification_id(e) for e in self.alarm_set]

    def sound_for(self, entry: AlarmEntry) -> str:
        return self.sound_map.get(
            notification_id(entry), self.default_sound + SOUND_EXTENSION
        )

    # Triggering

    async def reset_day(self, today: date) -> bool:
        """Clear the trigger log when the local date changed."""
        async with self._lock:
            reset = self.log.reset_if_new_day(today)
            if reset:
                await self.store.save_alert_log(self.log.to_snapshot())
        return reset

    async def tick(self, now: datetime) -> AlarmEntry | None:
        """Check for an alarm due this second. Returns the fired alarm, if any."""
        await self.reset_day(now.date())

        async with self._lock:
            entry = check_now(self.alarm_set, now.time(), self.log)
            if entry is not None:
                await self._record_fired(entry)
        return entry

    async def recover_missed(self, now: datetime) -> List[AlarmEntry]:
        """Collect every alarm that should already have fired today."""
        await self.reset_day(now.date())

        missed = []
        async with self._lock:
            while True:
                entry = check_missed(self.alarm_set, now.time(), self.log)
                if entry is None:
                    break
                await self._record_fired(entry)
                missed.append(entry)
        return missed

    async def _record_fired(self, entry: AlarmEntry) -> None:
        identifier = notification_id(entry)
        self.records.fire_counts[identifier] = self.records.fire_counts.get(identifier, 0) + 1
        await self.store.save_alert_log(self.log.to_snapshot())
        await self.store.save_sleep_records(self.records)
        logger.info(f"Alarm #{entry.id} fired ({scheduled_key(entry)})")

    def fire_count(self, identifier: str) -> int:
        return self.records.fire_counts.get(identifier, 0)

    # Wake/sleep history

    async def record_wake_response(self, at: datetime, got_up: bool) -> None:
        """Store the user's answer to "did you get up?"."""
        date_str = at.strftime(DATE_FORMAT)
        time_str = at.strftime(TIME_FORMAT)

        async with self._lock:
            if got_up:
                self.records.wake_dates.append(date_str)
                self.records.wake_times.append(time_str)
            else:
                self.records.sleep_dates.append(date_str)
                self.records.sleep_times.append(time_str)
            await self.store.save_sleep_records(self.records)

    def events(self) -> List[SleepEvent]:
        return events_from_records(self.records)

    def heatmap(self) -> List[SleepHeatMapCell]:
        return aggregate_to_heatmap(self.events())

    async def delete_everything(self) -> None:
        """Forget alarms, sounds, history and the trigger log."""
        async with self._lock:
            for entry in self.alarm_set.entries:
                await self._cancel(notification_id(entry))
            await self.store.delete_all()
            self.alarm_set = AlarmSet()
            self.sound_map = {}
            self.records = SleepRecords()
            self.log = TriggeredAlertLog(last_reset_day=self.log.last_reset_day)
        logger.info("Session data deleted")
