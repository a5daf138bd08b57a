"""Callback query handlers for inline buttons."""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from sleepybell.bot.handlers import now_for
from sleepybell.bot.notifier import TelegramNotifier
from sleepybell.engine.session import AlarmSession
from sleepybell.utils.constants import SETTING_OWNER_CHAT_ID, TIME_FORMAT

logger = logging.getLogger(__name__)


async def handle_wake_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE, alarm_id: int, got_up: bool
) -> None:
    """Handle the "did you get up?" answer on a fired alarm."""
    query = update.callback_query
    if not query:
        return

    notifier: TelegramNotifier = context.bot_data["notifier"]
    if not update.effective_chat or update.effective_chat.id != notifier.chat_id:
        await query.answer("This alarm belongs to another chat.")
        return

    session: AlarmSession = context.bot_data["session"]
    now = now_for(context)
    await session.record_wake_response(now, got_up)

    if got_up:
        text = f"☀️ <b>Good morning!</b> Got up at {now.strftime(TIME_FORMAT)}"
        answer = "Recorded: got up"
    else:
        text = f"😴 Back to sleep at {now.strftime(TIME_FORMAT)}. The next alarm will check on you."
        answer = "Recorded: went back to sleep"

    if query.message:
        await query.message.edit_text(text, parse_mode="HTML")
    await query.answer(answer)

    logger.info(f"Alarm #{alarm_id} answered: {'got up' if got_up else 'back to sleep'}")


async def handle_reset_confirmation(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Delete everything after the user confirmed /reset."""
    query = update.callback_query
    if not query:
        return

    notifier: TelegramNotifier = context.bot_data["notifier"]
    if not update.effective_chat or update.effective_chat.id != notifier.chat_id:
        await query.answer("Not allowed.")
        return

    session: AlarmSession = context.bot_data["session"]
    await session.delete_everything()
    # delete_all also dropped the stored owner; keep this chat registered
    await context.bot_data["repo"].set_setting(SETTING_OWNER_CHAT_ID, str(notifier.chat_id))

    if query.message:
        await query.message.edit_text("🗑 All alarms and history deleted.")
    await query.answer("Deleted")


async def callback_router(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Route callback queries to appropriate handlers."""
    if not update.callback_query:
        return

    query = update.callback_query
    data = query.data

    if not data:
        return

    parts = data.split(":")

    if parts[0] == "woke" and len(parts) == 3:
        await handle_wake_callback(update, context, int(parts[1]), parts[2] == "yes")

    elif parts[0] == "confirm" and len(parts) == 2 and parts[1] == "reset":
        await handle_reset_confirmation(update, context)

    elif parts[0] == "cancel":
        if query.message:
            await query.message.delete()
        await query.answer("Cancelled")

    else:
        await query.answer("Unknown action")
