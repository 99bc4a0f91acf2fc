import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
    "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "5")),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DEFAULT_LATE_AFTER = os.getenv("DEFAULT_LATE_AFTER", "08:00")
DEFAULT_CLOSE_AFTER = os.getenv("DEFAULT_CLOSE_AFTER", "16:00")
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "Africa/Accra")

QR_TOKEN_MAX_AGE_SECONDS = int(os.getenv("QR_TOKEN_MAX_AGE_SECONDS", "0"))

ALLOW_MANUAL_ATTENDANCE = bool(int(os.getenv("ALLOW_MANUAL_ATTENDANCE", "0")))
FACE_MATCH_THRESHOLD = float(os.getenv("FACE_MATCH_THRESHOLD", "0.82"))
RECORD_TIMEOUT_SECONDS = float(os.getenv("RECORD_TIMEOUT_SECONDS", "8"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
