import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

ROOM_LOCK_TIMEOUT_SECONDS = 2.0

TOKEN_LEAD_MINUTES = 15
PRESENT_WINDOW_MINUTES = 15
LATE_WINDOW_MINUTES = 30

EVENT_QUEUE_SIZE = 100
