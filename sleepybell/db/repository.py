"""Database repository - latest-snapshot storage for alarms, sounds and history."""

import json
import logging
from pathlib import Path
from typing import Any, List

import aiosqlite

from sleepybell.db.models import AlertLogSnapshot, SleepRecords, WallTime
from sleepybell.utils.constants import SETTING_LAST_RESET_DAY, SETTING_TRIGGERED_KEYS

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class Repository:
    """Database access layer.

    Every save appends a snapshot row and every load reads the newest one,
    so there is no history API.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open database connection and create any missing tables."""
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row

        # schema.sql only uses CREATE ... IF NOT EXISTS
        await self._db.executescript(SCHEMA_PATH.read_text())
        await self._db.commit()
        logger.info(f"Connected to database at {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Database connection closed")

    @property
    def db(self) -> aiosqlite.Connection:
        """Get the database connection."""
        if self._db is None:
            raise RuntimeError("Database not connected")
        return self._db

    # Alarm operations

    async def load_alarm_times(self) -> List[WallTime]:
        """Get the alarm times from the latest snapshot, in entry order."""
        row = await self._latest("alarm_snapshots")
        if row is None:
            return []

        times = []
        for second, minute, hour, period in zip(
            _decode(row["sec_list"], []),
            _decode(row["min_list"], []),
            _decode(row["hour_list"], []),
            _decode(row["day_list"], []),
        ):
            try:
                times.append(WallTime(hour, minute, second, period))
            except ValueError as e:
                logger.warning(f"Skipping stored alarm: {e}")
        return times

    async def save_alarm_times(self, times: List[WallTime]) -> None:
        """Save a new alarm snapshot."""
        await self.db.execute(
            """
            INSERT INTO alarm_snapshots (id_list, sec_list, min_list, hour_list, day_list)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                json.dumps(list(range(1, len(times) + 1))),
                json.dumps([t.second for t in times]),
                json.dumps([t.minute for t in times]),
                json.dumps([t.hour12 for t in times]),
                json.dumps([t.period for t in times]),
            ),
        )
        await self.db.commit()

    # Sound operations

    async def load_sound_map(self) -> dict[str, str]:
        """Get the notification id -> sound file map."""
        row = await self._latest("sound_snapshots")
        if row is None:
            return {}
        return _decode(row["sound_map"], {})

    async def save_sound_map(self, sound_map: dict[str, str]) -> None:
        await self.db.execute(
            "INSERT INTO sound_snapshots (sound_map) VALUES (?)",
            (json.dumps(sound_map),),
        )
        await self.db.commit()

    # Wake/sleep history operations

    async def load_sleep_records(self) -> SleepRecords:
        """Get the latest wake/sleep history snapshot."""
        row = await self._latest("stats_snapshots")
        if row is None:
            return SleepRecords()
        return SleepRecords(
            wake_dates=_decode(row["wake_dates"], []),
            wake_times=_decode(row["wake_times"], []),
            sleep_dates=_decode(row["sleep_dates"], []),
            sleep_times=_decode(row["sleep_times"], []),
            fire_counts=_decode(row["fire_counts"], {}),
        )

    async def save_sleep_records(self, records: SleepRecords) -> None:
        await self.db.execute(
            """
            INSERT INTO stats_snapshots (wake_dates, wake_times, sleep_dates, sleep_times, fire_counts)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                json.dumps(records.wake_dates),
                json.dumps(records.wake_times),
                json.dumps(records.sleep_dates),
                json.dumps(records.sleep_times),
                json.dumps(records.fire_counts),
            ),
        )
        await self.db.commit()

    # Triggered alert log operations

    async def load_alert_log(self) -> AlertLogSnapshot:
        keys = await self.get_setting(SETTING_TRIGGERED_KEYS)
        last_reset_day = await self.get_setting(SETTING_LAST_RESET_DAY)
        return AlertLogSnapshot(
            keys=_decode(keys, []) if keys else [],
            last_reset_day=last_reset_day,
        )

    async def save_alert_log(self, snapshot: AlertLogSnapshot) -> None:
        await self.set_setting(SETTING_TRIGGERED_KEYS, json.dumps(snapshot.keys))
        if snapshot.last_reset_day is not None:
            await self.set_setting(SETTING_LAST_RESET_DAY, snapshot.last_reset_day)

    # Settings operations

    async def get_setting(self, key: str) -> str | None:
        async with self.db.execute(
            "SELECT value FROM settings WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return row["value"]
            return None

    async def set_setting(self, key: str, value: str) -> None:
        await self.db.execute(
            """
            INSERT INTO settings (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (key, value),
        )
        await self.db.commit()

    async def delete_all(self) -> None:
        """Remove every snapshot and setting."""
        for table in ("alarm_snapshots", "sound_snapshots", "stats_snapshots", "settings"):
            await self.db.execute(f"DELETE FROM {table}")
        await self.db.commit()
        logger.info("All stored data deleted")

    # Helper methods

    async def _latest(self, table: str) -> aiosqlite.Row | None:
        async with self.db.execute(
            f"SELECT * FROM {table} ORDER BY id DESC LIMIT 1"
        ) as cursor:
            return await cursor.fetchone()


def _decode(payload: str | None, default: Any) -> Any:
    """Decode a JSON column, falling back to ``default`` on bad data."""
    if payload is None:
        return default
    try:
        return json.loads(payload)
    except json.JSONDecodeError:
        logger.error(f"Corrupt snapshot column: {payload[:40]!r}")
        return default
