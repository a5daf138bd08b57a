"""Wake/sleep history parsing and hourly heat-map aggregation."""

import logging
from collections import Counter
from datetime import datetime
from typing import Iterable, List, Sequence, Tuple

from sleepybell.db.models import (
    GOT_UP,
    WENT_BACK_TO_SLEEP,
    SleepEvent,
    SleepEventKind,
    SleepHeatMapCell,
    SleepRecords,
)
from sleepybell.utils.constants import DATE_FORMAT, TIME_FORMAT

logger = logging.getLogger(__name__)


def parse_event(date_str: str, time_str: str, kind: SleepEventKind) -> SleepEvent | None:
    """Combine a ``yyyy-MM-dd`` date and an ``hh:mm:ss AM`` time into an event.

    Returns:
        The event, or None if either string does not parse
    """
    try:
        timestamp = datetime.strptime(f"{date_str} {time_str}", f"{DATE_FORMAT} {TIME_FORMAT}")
    except (TypeError, ValueError):
        logger.debug(f"Dropping unparseable record {date_str!r} {time_str!r}")
        return None
    return SleepEvent(timestamp=timestamp, kind=kind)


def _parse_pairs(
    dates: Sequence[str], times: Sequence[str], kind: SleepEventKind
) -> Tuple[List[SleepEvent], int]:
    events = []
    dropped = 0
    for date_str, time_str in zip(dates, times):
        event = parse_event(date_str, time_str, kind)
        if event is None:
            dropped += 1
        else:
            events.append(event)
    return events, dropped


def build_events_report(
    wake_dates: Sequence[str],
    wake_times: Sequence[str],
    sleep_dates: Sequence[str],
    sleep_times: Sequence[str],
) -> Tuple[List[SleepEvent], int]:
    """Like ``build_events`` but also returns how many records were dropped.

    Pairs past the end of the shorter list are not counted as dropped.
    """
    got_up, dropped_wake = _parse_pairs(wake_dates, wake_times, GOT_UP)
    slept, dropped_sleep = _parse_pairs(sleep_dates, sleep_times, WENT_BACK_TO_SLEEP)
    return got_up + slept, dropped_wake + dropped_sleep


def build_events(
    wake_dates: Sequence[str],
    wake_times: Sequence[str],
    sleep_dates: Sequence[str],
    sleep_times: Sequence[str],
) -> List[SleepEvent]:
    """Turn stored date/time string lists into typed events.

    Each date list is zipped with its time list by position. All got-up
    events come first, then all went-back-to-sleep events, each in stored
    order. Unparseable pairs are skipped.
    """
    events, _ = build_events_report(wake_dates, wake_times, sleep_dates, sleep_times)
    return events


def events_from_records(records: SleepRecords) -> List[SleepEvent]:
    return build_events(
        records.wake_dates, records.wake_times, records.sleep_dates, records.sleep_times
    )


def aggregate_to_heatmap(events: Iterable[SleepEvent]) -> List[SleepHeatMapCell]:
    """Count events per (day, hour) bucket.

    Only non-empty buckets are returned, in no particular order.
    """
    counts = Counter(event.bin for event in events)
    return [
        SleepHeatMapCell(day=key.day, hour=key.hour, count=count)
        for key, count in counts.items()
    ]


def sorted_heatmap(cells: Iterable[SleepHeatMapCell]) -> List[SleepHeatMapCell]:
    """Order cells by day, then hour, for display."""
    return sorted(cells, key=lambda c: (c.day, c.hour))


def busiest_cell(cells: Iterable[SleepHeatMapCell]) -> SleepHeatMapCell | None:
    """The bucket with the most events; earliest wins ties."""
    ordered = sorted_heatmap(cells)
    if not ordered:
        return None
    return max(ordered, key=lambda c: c.count)
