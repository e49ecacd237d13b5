"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

FULL_DAY_HOURS = 8.0
HALF_DAY_HOURS = 4.0
MAX_CUSTOM_HOURS = 24.0

DEFAULT_COUNT_WEEKENDS = True
DEFAULT_LOG_LEVEL = "INFO"
