from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import PresenceStatus
from .model import Presence


class PresenceRepository(Protocol):
    def get_for_student_and_course(self, student_id: int, course_id: int) -> Optional[Presence]:
        raise NotImplementedError

    def record_scan(
        self,
        *,
        student_id: int,
        course_id: int,
        status: PresenceStatus,
        scanned_at: datetime,
    ) -> Optional[Presence]:
        """Store a scan unless one is already recorded.

        Must be atomic per (student_id, course_id): creates the row, or fills
        an unscanned one, and returns it. Returns None when the row was
        already scanned, including by a concurrent caller.
        """

        raise NotImplementedError

    def create_absent(self, *, course_id: int, student_ids: Sequence[int]) -> int:
        """Insert unscanned ABSENT rows for students that have none; returns rows created."""

        raise NotImplementedError

    def list_by_course(self, course_id: int) -> Sequence[Presence]:
        raise NotImplementedError

    def list_by_student(self, student_id: int) -> Sequence[Presence]:
        raise NotImplementedError

    def count_by_status(self, course_id: int) -> Mapping[PresenceStatus, int]:
        raise NotImplementedError
