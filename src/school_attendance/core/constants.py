"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LATE_AFTER = "08:00"
DEFAULT_CLOSE_AFTER = "16:00"
DEFAULT_TIMEZONE = "Africa/Accra"

EARTH_RADIUS_METERS = 6_371_000

DEFAULT_FACE_MATCH_THRESHOLD = 0.82
DEFAULT_RECORD_TIMEOUT_SECONDS = 10.0
DEFAULT_SUMMARY_SCHOOL_DAYS = 5

SECURITY_LOGGER = "school_attendance.security"
