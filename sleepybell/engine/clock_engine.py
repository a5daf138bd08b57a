"""Clock engine - the once-per-second heartbeat that fires alarms."""

import logging
from datetime import datetime, timedelta
from typing import List

from telegram.error import TelegramError

from sleepybell.db.models import AlarmEntry
from sleepybell.engine.session import AlarmSession

logger = logging.getLogger(__name__)

# Longest stall the heartbeat replays second by second; longer ones use the missed-alarm scan
MAX_CATCH_UP_SECONDS = 120


def seconds_to_check(now: datetime, last_tick: datetime | None) -> List[datetime]:
    """Whole seconds since the previous tick, ending with ``now``.

    A late or skipped tick still sees every second it missed, up to
    ``MAX_CATCH_UP_SECONDS``.
    """
    now = now.replace(microsecond=0)
    if last_tick is None:
        return [now]

    last_tick = last_tick.replace(microsecond=0)
    gap = int((now - last_tick).total_seconds())
    if gap <= 0:
        return [now]

    gap = min(gap, MAX_CATCH_UP_SECONDS)
    return [now - timedelta(seconds=offset) for offset in range(gap - 1, -1, -1)]


def is_stalled(now: datetime, last_tick: datetime | None) -> bool:
    """True when more seconds were skipped than the replay covers."""
    if last_tick is None:
        return False
    return (now - last_tick).total_seconds() > MAX_CATCH_UP_SECONDS


async def deliver(session: AlarmSession, entry: AlarmEntry) -> None:
    if not session.notifier:
        return
    try:
        await session.notifier.deliver(entry, session.sound_for(entry))
    except TelegramError as e:
        logger.error(f"Failed to deliver alarm #{entry.id}: {e}")


async def heartbeat(
    session: AlarmSession, now: datetime, last_tick: datetime | None = None
) -> List[AlarmEntry]:
    """Fire alarms scheduled since the previous tick.

    Runs every second. After a stall longer than ``MAX_CATCH_UP_SECONDS``
    the missed-alarm scan runs instead of the second-by-second replay. A
    failed delivery is logged and not retried; the alarm stays recorded as
    fired for today.

    Returns:
        The alarms that fired
    """
    fired = []

    try:
        if is_stalled(now, last_tick):
            logger.warning(f"Heartbeat stalled since {last_tick}, scanning for missed alarms")
            fired = await session.recover_missed(now)
            for entry in fired:
                await deliver(session, entry)
            return fired

        for moment in seconds_to_check(now, last_tick):
            entry = await session.tick(moment)
            if entry is None:
                continue
            fired.append(entry)
            await deliver(session, entry)

    except Exception as e:
        logger.error(f"Heartbeat error: {e}")

    return fired


async def startup_recovery(session: AlarmSession, now: datetime) -> int:
    """Recovery on startup: fire alarms missed while the bot was down.

    Returns:
        Number of missed alarms delivered
    """
    try:
        missed = await session.recover_missed(now)
    except Exception as e:
        logger.error(f"Startup recovery error: {e}")
        return 0

    if not missed:
        return 0

    logger.info(f"Startup recovery: {len(missed)} alarms were missed today")

    for entry in missed:
        await deliver(session, entry)

    logger.info("Startup recovery complete")
    return len(missed)


async def daily_reset(session: AlarmSession, now: datetime) -> None:
    """Clear the trigger log at the start of a new local day."""
    try:
        await session.reset_day(now.date())
    except Exception as e:
        logger.error(f"Daily reset error: {e}")
