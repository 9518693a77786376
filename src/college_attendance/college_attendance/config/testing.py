import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "college_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

REPORT_CACHE_TTL_SECONDS = 180
# 0 disables the background sweeper
CACHE_SWEEP_INTERVAL_SECONDS = 0

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
