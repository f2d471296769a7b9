"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_BUSINESS_DAY_START_HOUR = 8
DEFAULT_BUSINESS_DAY_END_HOUR = 24
MAX_BUSINESS_DAY_END_HOUR = 48

MINUTES_PER_DAY = 24 * 60

SPLIT_THRESHOLD_MINUTES = 6 * 60
MEAL_BREAK_MINUTES = 30
SLOT_STEP_MINUTES = 15

DEFAULT_USER_TYPE = "Barista"
ELEVATED_USER_TYPES = frozenset({"manager", "supervisor", "team-lead", "hr"})

DEFAULT_DB_TIMEOUT_SECONDS = 10
