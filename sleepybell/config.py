"""Configuration management from environment variables."""

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from sleepybell.utils.constants import SOUND_NAMES

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
    OWNER_CHAT_ID: int = int(os.getenv("OWNER_CHAT_ID", "0"))

    # Database
    DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", "./data/sleepybell.db"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Clock
    TICK_INTERVAL: float = float(os.getenv("TICK_INTERVAL", "1"))
    TIMEZONE: str = os.getenv("TIMEZONE", "")  # empty = device clock
    DEFAULT_SOUND: str = os.getenv("DEFAULT_SOUND", "classic")

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not cls.TELEGRAM_BOT_TOKEN:
            raise ValueError("TELEGRAM_BOT_TOKEN environment variable is required")

        if cls.DEFAULT_SOUND not in SOUND_NAMES:
            raise ValueError(
                f"DEFAULT_SOUND must be one of {', '.join(SOUND_NAMES)}, got {cls.DEFAULT_SOUND!r}"
            )

        if cls.TIMEZONE:
            try:
                ZoneInfo(cls.TIMEZONE)
            except (ZoneInfoNotFoundError, ValueError):
                raise ValueError(f"Unknown TIMEZONE {cls.TIMEZONE!r}")

        if cls.TICK_INTERVAL <= 0 or cls.TICK_INTERVAL > 1:
            raise ValueError("TICK_INTERVAL must be greater than 0 and at most 1 second")

        # Ensure database directory exists
        cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
