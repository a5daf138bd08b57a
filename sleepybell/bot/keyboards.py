"""Inline keyboard builders."""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup


def wake_check_keyboard(alarm_id: int) -> InlineKeyboardMarkup:
    """Keyboard for fired alarms: did the user get up?"""
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("☀️ Yes, I'm up", callback_data=f"woke:{alarm_id}:yes"),
                InlineKeyboardButton("😴 No", callback_data=f"woke:{alarm_id}:no"),
            ]
        ]
    )


def confirm_cancel_keyboard(action: str) -> InlineKeyboardMarkup:
    """Keyboard for confirmations: Confirm, Cancel."""
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("✓ Confirm", callback_data=f"confirm:{action}"),
                InlineKeyboardButton("✗ Cancel", callback_data=f"cancel:{action}"),
            ]
        ]
    )
