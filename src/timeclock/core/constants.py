"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MAX_BACKDATE_DAYS = 7
SCHEDULE_TOLERANCE_MINUTES = 15
DEFAULT_DAY_BOUNDARY_TIMEZONE = "UTC"
