import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
    "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Used until an administrator saves attendance settings.
DEFAULT_LATE_AFTER = os.getenv("DEFAULT_LATE_AFTER", "08:00")
DEFAULT_CLOSE_AFTER = os.getenv("DEFAULT_CLOSE_AFTER", "16:00")
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "Africa/Accra")

# 0 disables the QR replay window (printed ID cards never expire).
QR_TOKEN_MAX_AGE_SECONDS = int(os.getenv("QR_TOKEN_MAX_AGE_SECONDS", "0"))

ALLOW_MANUAL_ATTENDANCE = bool(int(os.getenv("ALLOW_MANUAL_ATTENDANCE", "1")))
FACE_MATCH_THRESHOLD = float(os.getenv("FACE_MATCH_THRESHOLD", "0.82"))
RECORD_TIMEOUT_SECONDS = float(os.getenv("RECORD_TIMEOUT_SECONDS", "10"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
