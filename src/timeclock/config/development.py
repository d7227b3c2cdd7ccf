import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Calendar day of a clock event is taken in this timezone
DAY_BOUNDARY_TIMEZONE = os.getenv("DAY_BOUNDARY_TIMEZONE", "UTC")
MAX_BACKDATE_DAYS = int(os.getenv("MAX_BACKDATE_DAYS", "7"))
SCHEDULE_TOLERANCE_MINUTES = int(os.getenv("SCHEDULE_TOLERANCE_MINUTES", "15"))
