import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance_test"),
    "connection_timeout": 2,
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

DEFAULT_LATE_AFTER = "08:00"
DEFAULT_CLOSE_AFTER = "16:00"
DEFAULT_TIMEZONE = "Africa/Accra"

QR_TOKEN_MAX_AGE_SECONDS = 0
ALLOW_MANUAL_ATTENDANCE = True
FACE_MATCH_THRESHOLD = 0.82
RECORD_TIMEOUT_SECONDS = 5.0

AUTO_INIT_DB = False
