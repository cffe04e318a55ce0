"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_COURSE_MINUTES = 15
MAX_COURSE_MINUTES = 480

# Attendance token window opens this long before the course starts.
DEFAULT_TOKEN_LEAD_MINUTES = 15
# Scans before start + PRESENT are Present, before start + LATE are Late.
DEFAULT_PRESENT_WINDOW_MINUTES = 15
DEFAULT_LATE_WINDOW_MINUTES = 30

TOKEN_NONCE_BYTES = 32

DEFAULT_ROOM_LOCK_TIMEOUT_SECONDS = 10
DEFAULT_EVENT_QUEUE_SIZE = 1000
