"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

API_PREFIX = "/api/v1"

USERNAME_PATTERN = r"^[A-Za-z0-9_]{3,20}$"
MIN_PASSWORD_LENGTH = 4

DEFAULT_TOP_USERS = 5

REMINDER_WINDOW_START_HOURS = 23
REMINDER_WINDOW_END_HOURS = 25

PUSH_TOKEN_LOG_PREFIX = 10
