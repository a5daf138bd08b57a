"""Telegram delivery of fired alarms."""

import logging
from typing import Dict, List

from telegram import Bot

from sleepybell.bot.formatters import format_alarm_message
from sleepybell.bot.keyboards import wake_check_keyboard
from sleepybell.db.models import AlarmEntry
from sleepybell.engine.session import notification_id

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Sends alarms to the owner chat and tracks scheduled notifications.

    Scheduling only registers the identifier; the heartbeat decides when an
    alarm fires and calls ``deliver``.
    """

    def __init__(self, bot: Bot, chat_id: int | None = None):
        self.bot = bot
        self.chat_id = chat_id
        self._pending: Dict[str, str] = {}

    def restore(self, sound_map: Dict[str, str]) -> None:
        """Rebuild the pending list from a stored sound map."""
        self._pending = dict(sound_map)

    async def schedule(self, entry: AlarmEntry, sound_file: str) -> str:
        identifier = notification_id(entry)
        self._pending[identifier] = sound_file
        logger.info(f"Notification scheduled: {identifier} ({sound_file})")
        return identifier

    async def cancel(self, identifier: str) -> bool:
        removed = self._pending.pop(identifier, None) is not None
        if removed:
            logger.info(f"Notification cancelled: {identifier}")
        return removed

    def pending(self) -> List[str]:
        return sorted(self._pending)

    async def deliver(self, entry: AlarmEntry, sound_file: str) -> None:
        """Send the alarm with a "did you get up?" keyboard.

        Raises:
            TelegramError: the message could not be sent
        """
        if not self.chat_id:
            logger.warning(f"Alarm #{entry.id} fired but no chat is registered; send /start")
            return

        await self.bot.send_message(
            chat_id=self.chat_id,
            text=format_alarm_message(entry, sound_file),
            parse_mode="HTML",
            reply_markup=wake_check_keyboard(entry.id),
        )
