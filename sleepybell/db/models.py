"""Data models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal, NamedTuple


Period = Literal["AM", "PM"]
AlarmRole = Literal["Primary", "Secondary"]
SleepEventKind = Literal["got_up", "went_back_to_sleep"]

GOT_UP: SleepEventKind = "got_up"
WENT_BACK_TO_SLEEP: SleepEventKind = "went_back_to_sleep"


@dataclass(frozen=True)
class WallTime:
    """A 12-hour wall clock time of day."""

    hour12: int
    minute: int
    second: int
    period: Period

    def __post_init__(self) -> None:
        if not 1 <= self.hour12 <= 12:
            raise ValueError(f"hour must be between 1 and 12, got {self.hour12}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be between 0 and 59, got {self.minute}")
        if not 0 <= self.second <= 59:
            raise ValueError(f"second must be between 0 and 59, got {self.second}")
        if self.period not in ("AM", "PM"):
            raise ValueError(f"period must be AM or PM, got {self.period!r}")


@dataclass(frozen=True)
class AlarmEntry:
    """One alarm in an alarm set. Role follows from position."""

    id: int
    time: WallTime
    role: AlarmRole


class ScheduledKey(NamedTuple):
    """Normalized trigger time (0-23 hour) used to detect same-day firings."""

    hour: int
    minute: int
    second: int

    def __str__(self) -> str:
        # Unpadded, matches logs written by earlier releases ("9:5:3")
        return f"{self.hour}:{self.minute}:{self.second}"

    @classmethod
    def parse(cls, value: str) -> "ScheduledKey":
        """Parse an ``H:M:S`` log string."""
        hour, minute, second = (int(part) for part in value.split(":"))
        return cls(hour, minute, second)


class DayHourBin(NamedTuple):
    """Heat-map bucket: a calendar day and an hour of that day."""

    day: date
    hour: int


@dataclass(frozen=True)
class SleepEvent:
    """A recorded wake confirmation or a return to sleep."""

    timestamp: datetime
    kind: SleepEventKind

    @property
    def seconds_from_midnight(self) -> int:
        return (
            self.timestamp.hour * 3600
            + self.timestamp.minute * 60
            + self.timestamp.second
        )

    @property
    def bin(self) -> DayHourBin:
        return DayHourBin(self.timestamp.date(), self.timestamp.hour)


@dataclass(frozen=True)
class SleepHeatMapCell:
    """Aggregated event count for one (day, hour) bucket."""

    day: date
    hour: int
    count: int


@dataclass
class SleepRecords:
    """Wake/sleep history as stored: parallel date and time string lists."""

    wake_dates: list[str] = field(default_factory=list)
    wake_times: list[str] = field(default_factory=list)
    sleep_dates: list[str] = field(default_factory=list)
    sleep_times: list[str] = field(default_factory=list)
    fire_counts: dict[str, int] = field(default_factory=dict)


@dataclass
class AlertLogSnapshot:
    """Persisted form of the triggered-alert log."""

    keys: list[str] = field(default_factory=list)
    last_reset_day: str | None = None
