from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles as stored by the identity service."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    TEACHER = "professeur"
    STUDENT = "etudiant"


class PresenceStatus(str, Enum):
    """Attendance status stored on a presence row."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class Weekday(str, Enum):
    """Closed set of day names accepted in a recurrence pattern."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, value) -> "Weekday":
        # date.weekday(): Monday == 0
        return _ORDERED[value.weekday()]


_ORDERED = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
)
