"""Message text formatters."""

from collections import defaultdict
from typing import Dict, Iterable, List

from sleepybell.db.models import AlarmEntry, SleepHeatMapCell
from sleepybell.engine.alarm_set import AlarmSet
from sleepybell.engine.sleep_events import sorted_heatmap
from sleepybell.utils.constants import MORNING, PRIMARY, SOUND_NAMES
from sleepybell.utils.time_utils import day_period, format_duration, format_wall_time


def format_alarm(entry: AlarmEntry, gap: int = 0, sound_file: str | None = None) -> str:
    """Format one alarm line."""
    emoji = "☀️" if day_period(entry.time) == MORNING else "🌙"
    line = f"{emoji} <b>{format_wall_time(entry.time)}</b> ({entry.role} #{entry.id})"

    if entry.role != PRIMARY:
        line += f"\n   +{format_duration(gap)} after previous"
    if sound_file:
        line += f"\n   🔊 {sound_file}"
    return line


def format_alarm_list(
    alarm_set: AlarmSet, sound_map: Dict[str, str], period: str | None = None
) -> str:
    """Format the whole alarm set, headed by the current day period if given."""
    if not len(alarm_set):
        return "You have no alarms. Add one with /add 7:00 AM"

    header = f"<b>Your Alarms ({len(alarm_set)})</b>"
    if period:
        emoji = "☀️" if period == MORNING else "🌙"
        header += f"\n{emoji} It is {period.lower()} now"
    lines = [header + "\n"]
    for entry, gap in zip(alarm_set.entries, alarm_set.diffs):
        lines.append(format_alarm(entry, gap, sound_map.get(format_wall_time(entry.time))))

    return "\n\n".join(lines)


def format_alarm_message(entry: AlarmEntry, sound_file: str) -> str:
    """Format the message sent when an alarm fires."""
    if entry.role == PRIMARY:
        header = "⏰ <b>Time to wake up!</b>"
    else:
        header = "🔔 <b>Are you still awake?</b>"

    return (
        f"{header}\n\n"
        f"{format_wall_time(entry.time)} ({entry.role} #{entry.id}) 🔊 {sound_file}\n\n"
        "Did you get up?"
    )


def format_pending_list(pending: List[str], sound_map: Dict[str, str], fire_counts: Dict[str, int]) -> str:
    """Format scheduled notifications with their sounds and fire counts."""
    if not pending:
        return "No notifications are scheduled."

    lines = [f"<b>Scheduled Notifications ({len(pending)})</b>\n"]
    for identifier in pending:
        count = fire_counts.get(identifier, 0)
        lines.append(
            f"🔔 <b>{identifier}</b>\n"
            f"   Sound: {sound_map.get(identifier, 'Unknown')}\n"
            f"   Triggered: {count} time{'s' if count != 1 else ''}"
        )
    return "\n\n".join(lines)


def format_heatmap(cells: Iterable[SleepHeatMapCell]) -> str:
    """Render heat-map cells as one line per day."""
    by_day = defaultdict(list)
    for cell in sorted_heatmap(cells):
        by_day[cell.day].append(cell)

    if not by_day:
        return "No wake-up history yet."

    lines = []
    for day, day_cells in by_day.items():
        hours = ", ".join(f"{c.hour:02d}h×{c.count}" for c in day_cells)
        lines.append(f"<code>{day.isoformat()}</code> {hours}")
    return "\n".join(lines)


def format_welcome_message() -> str:
    """Format the welcome message for /start."""
    return """
<b>Welcome to SleepyBell!</b> 🔔

Set a primary alarm, then secondary alarms 1 to 10 minutes apart. Each time one rings, tell me whether you actually got up and I'll chart your mornings.

<b>Quick Start:</b>
• /add 7:00 AM - Primary alarm
• /add 7:05 AM rooster - Secondary alarm with a sound
• /list - See your alarms
• /help - Full command list
""".strip()


def format_help_message() -> str:
    """Format the help message."""
    return f"""
<b>SleepyBell Commands 🔔</b>

<b>Alarms:</b>
/add &lt;time&gt; [sound] - Add an alarm (e.g. <code>/add 6:45:30 AM classic</code>)
/undo - Remove the last alarm
/clear - Remove all alarms
/list - Show alarms, gaps and sounds

<b>Notifications:</b>
/pending - Scheduled notifications and how often they fired
/cancel &lt;HH:MM:SS AM&gt; - Cancel one notification

<b>History:</b>
/stats - Wake-up statistics
/history - Wake/sleep log
/reset - Delete everything

<b>Rules:</b>
• The first alarm is Primary, later ones Secondary
• Each secondary alarm must be 1 to 10 minutes after the previous one
• Sounds: {", ".join(SOUND_NAMES)}
""".strip()
