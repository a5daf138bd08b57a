"""Statistics and analytics."""

from sleepybell.db.models import GOT_UP, WENT_BACK_TO_SLEEP
from sleepybell.engine.session import AlarmSession
from sleepybell.engine.sleep_events import aggregate_to_heatmap, build_events_report, busiest_cell
from sleepybell.utils.time_utils import format_seconds_label


def get_sleep_stats(session: AlarmSession) -> dict:
    """Get wake-up statistics from the recorded history.

    Returns:
        Dict with various statistics
    """
    records = session.records
    events, dropped = build_events_report(
        records.wake_dates, records.wake_times, records.sleep_dates, records.sleep_times
    )

    stats = {}
    got_up = [e for e in events if e.kind == GOT_UP]
    slept = [e for e in events if e.kind == WENT_BACK_TO_SLEEP]

    stats['total_events'] = len(events)
    stats['got_up'] = len(got_up)
    stats['back_to_sleep'] = len(slept)
    stats['dropped'] = dropped
    stats['days_tracked'] = len({e.timestamp.date() for e in events})

    # Share of alarm answers that were "yes"
    if events:
        stats['success_rate'] = (len(got_up) / len(events)) * 100
    else:
        stats['success_rate'] = 0.0

    if got_up:
        average = sum(e.seconds_from_midnight for e in got_up) // len(got_up)
        stats['avg_wake_time'] = format_seconds_label(average)
    else:
        stats['avg_wake_time'] = None

    cells = aggregate_to_heatmap(events)
    stats['heatmap'] = cells
    busiest = busiest_cell(cells)
    if busiest:
        stats['busiest'] = {
            'day': busiest.day.isoformat(),
            'hour': format_seconds_label(busiest.hour * 3600),
            'count': busiest.count,
        }
    else:
        stats['busiest'] = None

    stats['total_fires'] = sum(records.fire_counts.values())
    stats['alarms'] = len(session.alarm_set)

    return stats


def format_stats_message(stats: dict) -> str:
    """Format statistics into a readable message."""
    lines = ["<b>📊 Your SleepyBell Statistics</b>\n"]

    lines.append("<b>⏰ Alarms</b>")
    lines.append(f"Alarms set: {stats['alarms']}")
    lines.append(f"Times fired: {stats['total_fires']}\n")

    lines.append("<b>🛏 Mornings</b>")
    lines.append(f"Days tracked: {stats['days_tracked']}")
    lines.append(f"☀️ Got up: {stats['got_up']}")
    lines.append(f"😴 Went back to sleep: {stats['back_to_sleep']}")
    lines.append(f"Success rate: {stats['success_rate']:.1f}%")
    if stats['avg_wake_time']:
        lines.append(f"Average wake time: {stats['avg_wake_time']}")
    lines.append("")

    if stats['busiest']:
        lines.append("<b>🔥 Busiest Hour</b>")
        lines.append(
            f"{stats['busiest']['day']} at {stats['busiest']['hour']} "
            f"({stats['busiest']['count']} events)"
        )

    if stats['dropped']:
        lines.append(f"\n⚠️ {stats['dropped']} unreadable records skipped")

    return "\n".join(lines)
