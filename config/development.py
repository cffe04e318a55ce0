import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, apply database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

ROOM_LOCK_TIMEOUT_SECONDS = float(os.getenv("ROOM_LOCK_TIMEOUT_SECONDS", "10"))

# Attendance timing rules (minutes)
TOKEN_LEAD_MINUTES = int(os.getenv("TOKEN_LEAD_MINUTES", "15"))
PRESENT_WINDOW_MINUTES = int(os.getenv("PRESENT_WINDOW_MINUTES", "15"))
LATE_WINDOW_MINUTES = int(os.getenv("LATE_WINDOW_MINUTES", "30"))

EVENT_QUEUE_SIZE = int(os.getenv("EVENT_QUEUE_SIZE", "1000"))
