"""Main entry point for the SleepyBell bot."""

import logging
import sys
from datetime import datetime, time

from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
)

from sleepybell.bot.callbacks import callback_router
from sleepybell.bot.handlers import (
    add_command,
    cancel_command,
    clear_command,
    help_command,
    history_command,
    list_command,
    now_for,
    pending_command,
    reset_command,
    start_command,
    stats_command,
    undo_command,
)
from sleepybell.bot.notifier import TelegramNotifier
from sleepybell.config import Config
from sleepybell.db.repository import Repository
from sleepybell.engine.clock_engine import daily_reset, heartbeat, startup_recovery
from sleepybell.engine.session import AlarmSession
from sleepybell.utils.constants import SETTING_OWNER_CHAT_ID
from sleepybell.utils.error_handler import error_handler
from sleepybell.utils.time_utils import local_now, resolve_timezone

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, Config.LOG_LEVEL),
    stream=sys.stdout,
)
# Keep the per-second polling and job logs quiet
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("apscheduler").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


async def tick_job(context: "ContextTypes.DEFAULT_TYPE") -> None:
    """Job callback for the once-per-second heartbeat."""
    session: AlarmSession = context.bot_data["session"]
    now = now_for(context)
    await heartbeat(session, now, context.bot_data.get("last_tick"))
    context.bot_data["last_tick"] = now


async def reset_job(context: "ContextTypes.DEFAULT_TYPE") -> None:
    """Job callback for the midnight trigger-log reset."""
    session: AlarmSession = context.bot_data["session"]
    await daily_reset(session, now_for(context))


async def post_init(application: Application) -> None:
    """Initialize bot resources after application is created."""
    tz = resolve_timezone(Config.TIMEZONE)
    application.bot_data["tz"] = tz

    repo = Repository(Config.DATABASE_PATH)
    await repo.connect()
    application.bot_data["repo"] = repo

    owner = Config.OWNER_CHAT_ID or int(await repo.get_setting(SETTING_OWNER_CHAT_ID) or 0)
    notifier = TelegramNotifier(application.bot, owner or None)
    application.bot_data["notifier"] = notifier

    session = AlarmSession(repo, notifier, default_sound=Config.DEFAULT_SOUND)
    now = local_now(tz)
    await session.load(now.date())
    notifier.restore(session.sound_map)
    application.bot_data["session"] = session

    # Catch up on alarms missed while we were down
    await startup_recovery(session, now)
    application.bot_data["last_tick"] = now

    job_queue = application.job_queue
    if job_queue:
        job_queue.run_repeating(
            tick_job,
            interval=Config.TICK_INTERVAL,
            first=1,
            name="heartbeat",
        )
        job_queue.run_daily(
            reset_job,
            time=time(0, 0, 0, tzinfo=tz or datetime.now().astimezone().tzinfo),
            name="daily_reset",
        )
        logger.info(f"Heartbeat job scheduled (interval: {Config.TICK_INTERVAL}s)")

    logger.info("SleepyBell initialized successfully")


async def post_shutdown(application: Application) -> None:
    """Cleanup resources on shutdown."""
    repo: Repository = application.bot_data.get("repo")
    if repo:
        await repo.close()

    logger.info("SleepyBell shut down")


def main() -> None:
    """Start the bot."""
    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    application = (
        Application.builder()
        .token(Config.TELEGRAM_BOT_TOKEN)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    # Commands
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("add", add_command))
    application.add_handler(CommandHandler("undo", undo_command))
    application.add_handler(CommandHandler("clear", clear_command))
    application.add_handler(CommandHandler("list", list_command))
    application.add_handler(CommandHandler("pending", pending_command))
    application.add_handler(CommandHandler("cancel", cancel_command))
    application.add_handler(CommandHandler("stats", stats_command))
    application.add_handler(CommandHandler("history", history_command))
    application.add_handler(CommandHandler("reset", reset_command))

    # Callback queries (buttons)
    application.add_handler(CallbackQueryHandler(callback_router))

    application.add_error_handler(error_handler)

    logger.info("Starting SleepyBell bot...")
    application.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == "__main__":
    main()
