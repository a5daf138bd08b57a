"""Constants and default values."""

# Secondary alarms must follow the previous one by 1 to 10 minutes
MIN_ALARM_GAP_SECONDS = 60
MAX_ALARM_GAP_SECONDS = 600

# Morning window in 24-hour clock hours, [start, end)
MORNING_START_HOUR = 6
MORNING_END_HOUR = 18

PRIMARY = "Primary"
SECONDARY = "Secondary"

MORNING = "Morning"
NIGHT = "Night"

# Alarm sounds shipped with the app (stored as "<name>.wav")
SOUND_NAMES = ["lottery", "alert", "classic", "morning", "rooster"]
SOUND_EXTENSION = ".wav"

# Record formats for wake/sleep history
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%I:%M:%S %p"

# Settings keys
SETTING_TRIGGERED_KEYS = "triggered_keys"
SETTING_LAST_RESET_DAY = "last_reset_day"
SETTING_OWNER_CHAT_ID = "owner_chat_id"
