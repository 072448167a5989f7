"""Settings shared by every environment. Environment modules import * from here."""

import os


def env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": env_int("DB_PORT", 3306),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
}

# School's civil timezone; all session dates/times are local to it.
SCHOOL_TIMEZONE = os.getenv("SCHOOL_TIMEZONE", "Asia/Karachi")

# Attendance policy (minutes)
START_BUFFER_MINUTES = env_int("START_BUFFER_MINUTES", 5)
LATE_GRACE_MINUTES = env_int("LATE_GRACE_MINUTES", 10)
EXCUSE_GRACE_MINUTES = env_int("EXCUSE_GRACE_MINUTES", 10)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# If enabled, the app applies database/schema.sql on startup (CREATE IF NOT EXISTS).
AUTO_INIT_DB = env_bool("AUTO_INIT_DB", False)
