from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PresenceStatus


@dataclass(frozen=True)
class Presence:
    """One student's attendance for one course.

    ``scanned_at`` is None until the student scans; after that the row is final.
    """

    presence_id: int
    student_id: int
    course_id: int
    status: PresenceStatus
    scanned_at: Optional[datetime] = None

    @property
    def is_scanned(self) -> bool:
        return self.scanned_at is not None


@dataclass(frozen=True)
class TokenValidation:
    """Result of validating an attendance token (what the scanner shows)."""

    course_id: int
    course_name: str
    room_name: str
    start_time: datetime
    end_time: datetime
    is_valid: bool


@dataclass(frozen=True)
class PresenceStats:
    total_students: int
    present: int
    late: int
    absent: int

    @property
    def attendance_rate(self) -> float:
        if self.total_students <= 0:
            return 0.0
        return (self.present + self.late) / self.total_students * 100
