"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import Period

ATTENDANCE_CUTOFF_DAYS = 7

# Weekdays counted back from the end of the range for each period.
PERIOD_WEEKDAYS_BACK = {
    Period.DAILY: 0,
    Period.WEEKLY: 6,
    Period.MONTHLY: 30,
    Period.YEARLY: 365,
}

DEFAULT_HISTORY_DAYS = 30
INSIGHTS_WINDOW_DAYS = 30
LOW_ATTENDANCE_THRESHOLD = 75
MIN_ABSENCE_STREAK = 2

ANALYTICS_WINDOW_DAYS = 90
WEEKLY_TREND_BUCKETS = 12
MONTHLY_TREND_BUCKETS = 4
MONTHLY_TREND_DAYS = 30
PEAK_ABSENCE_DAYS_LIMIT = 5

OVERVIEW_HISTORY_DAYS = 14
MIN_PASSWORD_LENGTH = 6
