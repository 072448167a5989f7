"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SCHOOL_TIMEZONE = "Asia/Karachi"

# Scanning opens this many minutes before a session's start time.
START_BUFFER_MINUTES = 5
# A scan later than start + LATE_GRACE is classified as late.
LATE_GRACE_MINUTES = 10
# An absence can be excused until end + EXCUSE_GRACE.
EXCUSE_GRACE_MINUTES = 10

DEFAULT_REPORT_DAYS = 30
