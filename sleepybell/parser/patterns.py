"""Regex patterns for alarm time parsing."""

import re

# 12-hour times: "8:05 am", "08:05:30 PM", "8am", "8.05pm"
TIME_12H_PATTERN = re.compile(
    r'^(\d{1,2})(?:[:.](\d{2}))?(?:[:.](\d{2}))?\s*(am|pm|a\.m\.|p\.m\.)$',
    re.IGNORECASE,
)

# 24-hour times: "20:05", "07:30:15"
TIME_24H_PATTERN = re.compile(r'^(\d{1,2})[:.](\d{2})(?:[:.](\d{2}))?$')

# Sound names follow the time: "/add 7:00 am rooster"
SOUND_PATTERN = re.compile(r'\s+([a-z]+)$', re.IGNORECASE)
