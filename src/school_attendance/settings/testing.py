import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance_test"),
}

STORE_BACKEND = "memory"

QUERY_BATCH_LIMIT = 30
POLL_INTERVAL_SECONDS = 0.05
STORE_TIMEOUT_SECONDS = 2.0
STORE_RETRIES = 0
LEGACY_ID_LOOKUP = True

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
