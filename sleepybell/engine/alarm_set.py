"""Ordered alarm set with spacing validation between successive alarms."""

import logging
from typing import Iterable, Iterator, List

from sleepybell.db.models import AlarmEntry, AlarmRole, WallTime
from sleepybell.utils.constants import (
    MAX_ALARM_GAP_SECONDS,
    MIN_ALARM_GAP_SECONDS,
    PRIMARY,
    SECONDARY,
)
from sleepybell.utils.time_utils import day_period, format_wall_time, raw_hour24, to_hour24

logger = logging.getLogger(__name__)


class AlarmSetError(ValueError):
    """Base class for rejected alarm set edits."""


class SpacingViolation(AlarmSetError):
    """A secondary alarm is not 1 to 10 minutes after the previous alarm."""

    def __init__(self, time: WallTime, diff: int):
        self.time = time
        self.diff = diff
        super().__init__(
            f"{format_wall_time(time)} is {diff}s after the previous alarm; "
            f"secondary alarms must be {MIN_ALARM_GAP_SECONDS}-{MAX_ALARM_GAP_SECONDS}s apart"
        )


class EmptyAlarmSet(AlarmSetError, IndexError):
    """Removal from an alarm set that has no entries."""


def gap_seconds(previous: WallTime, current: WallTime) -> int:
    """Signed seconds from ``previous`` to ``current``.

    Hours use the raw 24-hour value where 12 AM is 24. A previous alarm at
    12 AM counts as hour 0 so that 12:59 AM -> 1:05 AM is 6 minutes. When
    both alarms fall in the 12 AM hour they are compared as-is.

    Examples:
        08:00:00 AM -> 08:01:00 AM = 60
        11:59:30 PM -> 12:00:30 AM = 60
    """
    previous_hour = raw_hour24(previous)
    current_hour = raw_hour24(current)
    if previous_hour == 24 and current_hour != 24:
        previous_hour = 0

    return (
        (current_hour - previous_hour) * 3600
        + (current.minute - previous.minute) * 60
        + (current.second - previous.second)
    )


def role_for_position(index: int) -> AlarmRole:
    """The first alarm is Primary, every later one Secondary."""
    return PRIMARY if index == 0 else SECONDARY  # type: ignore[return-value]


class AlarmSet:
    """Append-only list of alarm times, in the order they were entered.

    Entry ids are sequential from 1 and roles are recomputed from position,
    so neither is stored. Only append, remove-last and clear are supported.
    """

    def __init__(self, times: Iterable[WallTime] = ()):
        self._times: List[WallTime] = list(times)

    def __len__(self) -> int:
        return len(self._times)

    def __iter__(self) -> Iterator[AlarmEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> AlarmEntry:
        return self.entries[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AlarmSet):
            return NotImplemented
        return self._times == other._times

    def __repr__(self) -> str:
        return f"AlarmSet({self.formatted_times!r})"

    @property
    def times(self) -> List[WallTime]:
        return list(self._times)

    @property
    def entries(self) -> List[AlarmEntry]:
        return [
            AlarmEntry(id=i + 1, time=t, role=role_for_position(i))
            for i, t in enumerate(self._times)
        ]

    @property
    def last(self) -> AlarmEntry | None:
        if not self._times:
            return None
        return self.entries[-1]

    # Mutation

    def add_entry(self, time: WallTime) -> AlarmEntry:
        """Append an alarm, validating its gap to the previous one.

        The first alarm is always accepted.

        Raises:
            SpacingViolation: the gap is under 60 or over 600 seconds.
                The set is left unchanged.
        """
        if self._times:
            diff = gap_seconds(self._times[-1], time)
            if diff < MIN_ALARM_GAP_SECONDS or diff > MAX_ALARM_GAP_SECONDS:
                logger.info(f"Rejected alarm {format_wall_time(time)}: gap {diff}s")
                raise SpacingViolation(time, diff)

        self._times.append(time)
        entry = self.entries[-1]
        logger.info(f"Added {entry.role} alarm #{entry.id} at {format_wall_time(time)}")
        return entry

    def remove_last(self) -> AlarmEntry:
        """Drop the most recently added alarm.

        Raises:
            EmptyAlarmSet: there is nothing to remove.
        """
        if not self._times:
            raise EmptyAlarmSet("alarm set is empty")
        entry = self.entries[-1]
        self._times.pop()
        return entry

    def clear(self) -> None:
        self._times.clear()

    # Derived views, recomputed on every access

    @property
    def labels(self) -> List[AlarmRole]:
        return [role_for_position(i) for i in range(len(self._times))]

    @property
    def raw_hours(self) -> List[int]:
        """24-hour values with 12 AM kept as 24."""
        return [raw_hour24(t) for t in self._times]

    @property
    def hours24(self) -> List[int]:
        return [to_hour24(t) for t in self._times]

    @property
    def day_periods(self) -> List[str]:
        return [day_period(t) for t in self._times]

    @property
    def diffs(self) -> List[int]:
        """Gap to the previous alarm in seconds; 0 for the first alarm."""
        return [
            0 if i == 0 else gap_seconds(self._times[i - 1], t)
            for i, t in enumerate(self._times)
        ]

    @property
    def formatted_times(self) -> List[str]:
        return [format_wall_time(t) for t in self._times]

    @property
    def formatted_labels(self) -> List[str]:
        return [
            f"{format_wall_time(e.time)} ({e.role} #{e.id})" for e in self.entries
        ]
