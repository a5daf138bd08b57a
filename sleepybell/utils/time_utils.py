"""Wall-clock time conversion and formatting utilities."""

from datetime import datetime
from zoneinfo import ZoneInfo

from sleepybell.db.models import WallTime
from sleepybell.utils.constants import MORNING, MORNING_END_HOUR, MORNING_START_HOUR, NIGHT


def raw_hour24(time: WallTime) -> int:
    """Convert a 12-hour time to a 24-hour hour, keeping 12 AM as 24.

    This is the value stored alongside alarm entries. Midnight maps to 24
    so that it sorts after the evening; use ``to_hour24`` for a real clock
    hour.
    """
    if time.period == "AM":
        return 24 if time.hour12 == 12 else time.hour12
    return 12 if time.hour12 == 12 else time.hour12 + 12


def normalize_hour(hour24: int) -> int:
    """Map the 24 sentinel (12 AM) back to 0."""
    return 0 if hour24 == 24 else hour24


def to_hour24(time: WallTime) -> int:
    """Convert a 12-hour time to a 0-23 clock hour."""
    return normalize_hour(raw_hour24(time))


def is_morning(time: WallTime) -> bool:
    """Check whether a time falls in the morning window (06:00 to 17:59:59)."""
    return MORNING_START_HOUR <= to_hour24(time) < MORNING_END_HOUR


def day_period(time: WallTime) -> str:
    """Return "Morning" or "Night" for a time."""
    return MORNING if is_morning(time) else NIGHT


def current_period(now: datetime) -> str:
    """Return "Morning" or "Night" for a wall clock reading."""
    if now.hour >= MORNING_END_HOUR or now.hour < MORNING_START_HOUR:
        return NIGHT
    return MORNING


def format_wall_time(time: WallTime) -> str:
    """Format as ``HH:MM:SS AM``, each field zero-padded to two digits."""
    return "%02d:%02d:%02d %s" % (time.hour12, time.minute, time.second, time.period)


def format_seconds_label(seconds: int) -> str:
    """Format seconds after midnight as a 12-hour axis label.

    Examples:
        0 -> "12:00 AM"
        27000 -> "07:30 AM"
        50400 -> "02:00 PM"
    """
    hour24 = seconds // 3600
    minute = (seconds % 3600) // 60
    hour12 = 12 if hour24 % 12 == 0 else hour24 % 12
    period = "PM" if hour24 >= 12 else "AM"
    return "%02d:%02d %s" % (hour12, minute, period)


def format_duration(seconds: int) -> str:
    """Format a gap between alarms.

    Examples:
        45 -> "45 seconds"
        60 -> "1 minute"
        90 -> "1 min 30 sec"
        600 -> "10 minutes"
    """
    if seconds < 60:
        return f"{seconds} second{'s' if seconds != 1 else ''}"
    minutes, rest = divmod(seconds, 60)
    if rest == 0:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    return f"{minutes} min {rest} sec"


def resolve_timezone(name: str) -> ZoneInfo | None:
    """Load an IANA zone, or None to use the local device clock."""
    if not name:
        return None
    return ZoneInfo(name)


def local_now(tz: ZoneInfo | None = None) -> datetime:
    """Current wall clock time, naive, in the given zone or the device's."""
    if tz is None:
        return datetime.now()
    return datetime.now(tz).replace(tzinfo=None)
