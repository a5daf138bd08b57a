"""Parse alarm times typed in chat."""

from sleepybell.db.models import WallTime
from sleepybell.parser.patterns import SOUND_PATTERN, TIME_12H_PATTERN, TIME_24H_PATTERN
from sleepybell.utils.constants import SOUND_NAMES


def from_24h(hour: int, minute: int, second: int) -> WallTime:
    """Build a 12-hour time from a 0-23 hour."""
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be between 0 and 23, got {hour}")
    period = "AM" if hour < 12 else "PM"
    hour12 = hour % 12 or 12
    return WallTime(hour12, minute, second, period)


def parse_wall_time(text: str) -> WallTime:
    """Parse a 12-hour or 24-hour time.

    Examples:
        "8:05 am" -> 08:05:00 AM
        "12:00:30 AM" -> 12:00:30 AM
        "20:05" -> 08:05:00 PM
        "0:15" -> 12:15:00 AM

    Raises:
        ValueError: the text is not a time
    """
    text = text.strip()

    match = TIME_12H_PATTERN.match(text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        second = int(match.group(3) or 0)
        period = "AM" if match.group(4).lower().startswith("a") else "PM"
        return WallTime(hour, minute, second, period)

    match = TIME_24H_PATTERN.match(text)
    if match:
        return from_24h(int(match.group(1)), int(match.group(2)), int(match.group(3) or 0))

    raise ValueError(f"Could not understand time {text!r}. Try 7:30 AM or 07:30:00")


def parse_alarm_request(text: str) -> tuple[WallTime, str | None]:
    """Split "/add" arguments into a time and an optional sound name.

    Raises:
        ValueError: bad time or unknown sound
    """
    text = text.strip()
    sound = None

    match = SOUND_PATTERN.search(text)
    if match and match.group(1).lower() not in ("am", "pm"):
        sound = match.group(1).lower()
        if sound not in SOUND_NAMES:
            raise ValueError(f"Unknown sound {sound!r}. Choose from: {', '.join(SOUND_NAMES)}")
        text = text[: match.start()]

    return parse_wall_time(text), sound
