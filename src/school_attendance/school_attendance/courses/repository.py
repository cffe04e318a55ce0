from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Course, CourseDraft


class CourseRepository(Protocol):
    def get_by_id(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def create(self, draft: CourseDraft) -> Course:
        raise NotImplementedError

    def update(self, course: Course) -> bool:
        raise NotImplementedError

    def delete(self, course_id: int) -> bool:
        raise NotImplementedError

    def delete_occurrences(self, parent_id: int) -> int:
        """Delete every row whose recurrence_id is ``parent_id``; returns the count."""

        raise NotImplementedError

    def delete_series(self, parent_id: int) -> int:
        """Delete the parent and all of its occurrences; returns the count."""

        raise NotImplementedError

    def list_occurrences(self, parent_id: int) -> Sequence[Course]:
        raise NotImplementedError

    def find_overlapping(self, *, room_ids: Sequence[int], start: datetime, end: datetime) -> Sequence[Course]:
        """Courses in any of ``room_ids`` whose interval overlaps ``[start, end)``."""

        raise NotImplementedError

    def list_range(self, *, start: datetime, end: datetime) -> Sequence[Course]:
        """Courses starting within ``[start, end]``."""

        raise NotImplementedError

    def list_by_room(self, room_id: int) -> Sequence[Course]:
        raise NotImplementedError

    def list_by_teacher(self, teacher_id: int) -> Sequence[Course]:
        raise NotImplementedError
