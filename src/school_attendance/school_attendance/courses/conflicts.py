"""Room booking conflict detection.

Overlap rule (half-open intervals):
    existing.start < candidate.end AND candidate.start < existing.end
Touching endpoints are not a conflict.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List

from ..rooms.hierarchy import ContentionGroup, RoomHierarchyResolver
from .model import ConflictInfo
from .repository import CourseRepository


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end


class ConflictDetector:
    def __init__(self, courses: CourseRepository, resolver: RoomHierarchyResolver):
        self._courses = courses
        self._resolver = resolver

    def check(
        self,
        *,
        room_id: int,
        start: datetime,
        end: datetime,
        exclude_ids: Iterable[int] = (),
    ) -> List[ConflictInfo]:
        """Bookings overlapping ``[start, end)`` anywhere in the room's contention group.

        The result is unordered.
        """
        group = self._resolver.resolve(room_id)
        return self.check_group(group, start=start, end=end, exclude_ids=exclude_ids)

    def check_group(
        self,
        group: ContentionGroup,
        *,
        start: datetime,
        end: datetime,
        exclude_ids: Iterable[int] = (),
    ) -> List[ConflictInfo]:
        excluded = {int(i) for i in exclude_ids}
        conflicts: List[ConflictInfo] = []
        for existing in self._courses.find_overlapping(room_ids=group.room_ids, start=start, end=end):
            if existing.course_id in excluded:
                continue
            if not overlaps(existing.start_time, existing.end_time, start, end):
                continue
            conflicts.append(
                ConflictInfo(
                    date=existing.start_time.date(),
                    start_time=existing.start_time,
                    end_time=existing.end_time,
                    room_name=group.name_of(existing.room_id),
                    course_name=existing.name,
                    course_id=existing.course_id,
                    room_id=existing.room_id,
                )
            )
        return conflicts
