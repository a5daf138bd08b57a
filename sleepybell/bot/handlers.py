"""Command handlers."""

import logging
from datetime import datetime

from telegram import Update
from telegram.ext import ContextTypes

from sleepybell.bot.formatters import (
    format_alarm,
    format_alarm_list,
    format_heatmap,
    format_help_message,
    format_pending_list,
    format_welcome_message,
)
from sleepybell.bot.keyboards import confirm_cancel_keyboard
from sleepybell.bot.notifier import TelegramNotifier
from sleepybell.bot.stats import format_stats_message, get_sleep_stats
from sleepybell.db.repository import Repository
from sleepybell.engine.alarm_set import EmptyAlarmSet, SpacingViolation
from sleepybell.engine.session import AlarmSession
from sleepybell.parser.alarm_text import parse_alarm_request
from sleepybell.utils.constants import SETTING_OWNER_CHAT_ID
from sleepybell.utils.time_utils import current_period, format_duration, local_now

logger = logging.getLogger(__name__)


def now_for(context: ContextTypes.DEFAULT_TYPE) -> datetime:
    """Current wall clock time in the configured zone."""
    return local_now(context.bot_data.get("tz"))


async def is_owner(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    """Only the registered chat may control the alarm clock."""
    if not update.effective_chat:
        return False

    notifier: TelegramNotifier = context.bot_data["notifier"]
    if notifier.chat_id == update.effective_chat.id:
        return True

    if update.effective_message:
        if notifier.chat_id:
            await update.effective_message.reply_text("This alarm clock belongs to another chat.")
        else:
            await update.effective_message.reply_text("Please /start the bot first.")
    return False


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command - register this chat as the alarm owner."""
    if not update.effective_chat or not update.message:
        return

    notifier: TelegramNotifier = context.bot_data["notifier"]
    chat_id = update.effective_chat.id

    if not notifier.chat_id:
        repo: Repository = context.bot_data["repo"]
        await repo.set_setting(SETTING_OWNER_CHAT_ID, str(chat_id))
        notifier.chat_id = chat_id
        logger.info(f"Registered owner chat {chat_id}")
    elif notifier.chat_id != chat_id:
        await update.message.reply_text("This alarm clock belongs to another chat.")
        return

    await update.message.reply_html(format_welcome_message())


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    if not update.message:
        return

    await update.message.reply_html(format_help_message())


async def add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /add <time> [sound] command."""
    if not update.message or not await is_owner(update, context):
        return

    if not context.args:
        await update.message.reply_html(
            "Usage: <code>/add 7:00 AM [sound]</code>"
        )
        return

    try:
        time, sound = parse_alarm_request(" ".join(context.args))
    except ValueError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    session: AlarmSession = context.bot_data["session"]

    try:
        entry = await session.add_alarm(time, sound)
    except SpacingViolation as e:
        direction = "early" if e.diff < 60 else "late"
        await update.message.reply_html(
            "❌ <b>Alarm not set properly</b>\n\n"
            f"That is {format_duration(abs(e.diff))} "
            f"{'after' if e.diff >= 0 else 'before'} your last alarm, which is too {direction}.\n"
            "Secondary alarms must be 1 to 10 minutes after the previous one."
        )
        return
    except ValueError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    gap = session.alarm_set.diffs[-1]
    await update.message.reply_html(
        "✓ Alarm added\n\n" + format_alarm(entry, gap, session.sound_for(entry))
    )


async def undo_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /undo command - remove the last alarm."""
    if not update.message or not await is_owner(update, context):
        return

    session: AlarmSession = context.bot_data["session"]

    try:
        entry = await session.remove_last()
    except EmptyAlarmSet:
        await update.message.reply_text("You have no alarms.")
        return

    await update.message.reply_html(f"🗑 Removed: <b>{entry.role} #{entry.id}</b>")


async def clear_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /clear command - remove all alarms."""
    if not update.message or not await is_owner(update, context):
        return

    session: AlarmSession = context.bot_data["session"]
    removed = await session.clear()

    await update.message.reply_text(f"🗑 Removed {removed} alarm{'s' if removed != 1 else ''}.")


async def list_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /list command - show the alarm set."""
    if not update.message or not await is_owner(update, context):
        return

    session: AlarmSession = context.bot_data["session"]
    period = current_period(now_for(context))
    await update.message.reply_html(format_alarm_list(session.alarm_set, session.sound_map, period))


async def pending_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /pending command - scheduled notifications."""
    if not update.message or not await is_owner(update, context):
        return

    session: AlarmSession = context.bot_data["session"]
    await update.message.reply_html(
        format_pending_list(session.pending(), session.sound_map, session.records.fire_counts)
    )


async def cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /cancel <HH:MM:SS AM> command."""
    if not update.message or not await is_owner(update, context):
        return

    if not context.args:
        await update.message.reply_html("Usage: <code>/cancel 07:05:00 AM</code>")
        return

    identifier = " ".join(context.args).upper()
    session: AlarmSession = context.bot_data["session"]

    if await session.cancel_notification(identifier):
        await update.message.reply_html(f"🔕 Cancelled notification <b>{identifier}</b>")
    else:
        await update.message.reply_text("Notification not found. See /pending")


async def stats_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /stats command."""
    if not update.message or not await is_owner(update, context):
        return

    session: AlarmSession = context.bot_data["session"]
    stats = get_sleep_stats(session)
    await update.message.reply_html(format_stats_message(stats))


async def history_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /history command - events per day and hour."""
    if not update.message or not await is_owner(update, context):
        return

    session: AlarmSession = context.bot_data["session"]
    await update.message.reply_html(
        "<b>🗓 Wake/Sleep History</b>\n\n" + format_heatmap(session.heatmap())
    )


async def reset_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reset command - asks for confirmation first."""
    if not update.message or not await is_owner(update, context):
        return

    await update.message.reply_html(
        "⚠️ Delete all alarms, sounds and history?",
        reply_markup=confirm_cancel_keyboard("reset"),
    )
