from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Set

from ..common.validators import require_duration, require_non_empty, require_positive_id
from ..core.enums import Role
from ..core.exceptions import (
    ChildEditForbiddenError,
    ConflictDetectedError,
    InvalidRoleError,
    NotFoundError,
    RecurrenceWindowInvalidError,
    ValidationError,
)
from ..events.model import DomainEvent
from ..events.queue import EventQueue
from ..rooms.hierarchy import ContentionGroup, RoomHierarchyResolver
from ..subjects.repository import SubjectRepository
from ..users.repository import UserRepository
from .conflicts import ConflictDetector
from .locks import RoomLocks
from .model import ConflictInfo, Course, CourseDraft, CoursePatch
from .recurrence import RecurrenceExpander
from .repository import CourseRepository

logger = logging.getLogger(__name__)


class CourseService:
    """Create, update and delete courses and recurring series.

    Rules:
    - every write checks the room's contention group under its room locks;
    - a recurring parent is edited by replacing the whole series (new ids);
    - occurrences of a series are never edited directly;
    - deleting a parent deletes the series.
    """

    def __init__(
        self,
        courses: CourseRepository,
        subjects: SubjectRepository,
        users: UserRepository,
        resolver: RoomHierarchyResolver,
        detector: ConflictDetector,
        expander: RecurrenceExpander,
        locks: RoomLocks,
        *,
        events: EventQueue | None = None,
    ):
        self._courses = courses
        self._subjects = subjects
        self._users = users
        self._resolver = resolver
        self._detector = detector
        self._expander = expander
        self._locks = locks
        self._events = events

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, course_id: int) -> Course:
        course = self._courses.get_by_id(int(course_id))
        if not course:
            raise NotFoundError("course", course_id)
        return course

    def list_in_range(self, *, start: datetime, end: datetime) -> Sequence[Course]:
        if end < start:
            raise ValidationError("range end is before range start")
        return self._courses.list_range(start=start, end=end)

    def list_by_room(self, room_id: int) -> Sequence[Course]:
        return self._courses.list_by_room(int(room_id))

    def list_by_teacher(self, teacher_id: int) -> Sequence[Course]:
        return self._courses.list_by_teacher(int(teacher_id))

    def list_series(self, parent_id: int) -> Sequence[Course]:
        parent = self.get(parent_id)
        if not parent.is_series_parent:
            raise ValidationError(f"course {parent_id} is not a recurring parent")
        return self._courses.list_occurrences(parent.course_id)

    def check_conflicts(
        self,
        *,
        room_id: int,
        start: datetime,
        end: datetime,
        exclude_ids: Iterable[int] = (),
    ) -> List[ConflictInfo]:
        if end <= start:
            raise ValidationError("end must be after start")
        return self._detector.check(room_id=room_id, start=start, end=end, exclude_ids=exclude_ids)

    def check_conflicts_for_update(self, course_id: int, patch: CoursePatch) -> List[ConflictInfo]:
        """Conflicts the patched course would have, ignoring its own series."""
        existing = self.get(course_id)
        merged = patch.apply_to(existing)
        return self._detector.check(
            room_id=merged.room_id,
            start=merged.start_time,
            end=merged.end_time,
            exclude_ids=self._ids_to_ignore(existing),
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, draft: CourseDraft) -> Course:
        draft = self._validated(draft, check_refs=("subject", "teacher", "room"))
        group = self._resolver.resolve(draft.room_id)

        with self._locks.hold(group.room_ids):
            course = self._create_locked(draft, group)

        logger.info(
            "course created",
            extra={"course_id": course.course_id, "room_id": course.room_id, "recurring": course.is_recurring},
        )
        self._publish("course.created", course_id=course.course_id, recurring=course.is_recurring)
        return course

    def update(self, course_id: int, patch: CoursePatch) -> Course:
        existing = self.get(course_id)
        if existing.is_occurrence:
            raise ChildEditForbiddenError(
                f"course {existing.course_id} belongs to series {existing.recurrence_id}; edit the parent instead"
            )

        changed_refs = tuple(
            name
            for name, value in (("subject", patch.subject_id), ("teacher", patch.teacher_id), ("room", patch.room_id))
            if value is not None
        )
        merged = self._validated(patch.apply_to(existing), check_refs=changed_refs)

        new_group = self._resolver.resolve(merged.room_id)
        lock_ids = set(new_group.room_ids)
        if merged.room_id != existing.room_id:
            lock_ids.update(self._resolver.resolve(existing.room_id).room_ids)

        with self._locks.hold(lock_ids):
            if existing.is_series_parent:
                updated = self._replace_series_locked(existing, merged, new_group)
            else:
                updated = self._update_in_place_locked(existing, merged, new_group)

        logger.info("course updated", extra={"course_id": existing.course_id, "new_course_id": updated.course_id})
        self._publish("course.updated", course_id=existing.course_id, new_course_id=updated.course_id)
        return updated

    def delete(self, course_id: int) -> int:
        """Delete a course; a recurring parent takes its whole series with it.

        Returns the number of rows removed.
        """
        existing = self.get(course_id)
        if existing.is_series_parent:
            removed = self._courses.delete_series(existing.course_id)
        else:
            removed = 1 if self._courses.delete(existing.course_id) else 0

        logger.info("course deleted", extra={"course_id": existing.course_id, "rows": removed})
        self._publish("course.deleted", course_id=existing.course_id, rows=removed)
        return removed

    # ------------------------------------------------------------------
    # Internals (callers hold the room locks)
    # ------------------------------------------------------------------

    def _create_locked(self, draft: CourseDraft, group: ContentionGroup) -> Course:
        conflicts = self._detector.check_group(group, start=draft.start_time, end=draft.end_time)
        if conflicts:
            raise ConflictDetectedError(conflicts)

        course = self._courses.create(draft)
        if course.is_recurring:
            self._expand_or_undo(course, group, undo=lambda: self._courses.delete_series(course.course_id))
        return course

    def _replace_series_locked(self, existing: Course, merged: CourseDraft, group: ContentionGroup) -> Course:
        conflicts = self._detector.check_group(
            group, start=merged.start_time, end=merged.end_time, exclude_ids=self._ids_to_ignore(existing)
        )
        if conflicts:
            raise ConflictDetectedError(conflicts)

        removed = self._courses.delete_series(existing.course_id)
        course = self._create_locked(merged, group)
        logger.info(
            "series replaced",
            extra={"old_parent_id": existing.course_id, "new_course_id": course.course_id, "rows_removed": removed},
        )
        self._publish("series.replaced", old_parent_id=existing.course_id, new_course_id=course.course_id)
        return course

    def _update_in_place_locked(self, existing: Course, merged: CourseDraft, group: ContentionGroup) -> Course:
        conflicts = self._detector.check_group(
            group, start=merged.start_time, end=merged.end_time, exclude_ids={existing.course_id}
        )
        if conflicts:
            raise ConflictDetectedError(conflicts)

        updated = Course.from_draft(merged, existing.course_id)
        self._courses.update(updated)
        if updated.is_recurring:
            # A standalone course turned recurring becomes the parent of a new series.
            def undo() -> None:
                self._courses.delete_occurrences(updated.course_id)
                self._courses.update(existing)

            self._expand_or_undo(updated, group, undo=undo)
        return updated

    def _expand_or_undo(self, parent: Course, group: ContentionGroup, *, undo) -> int:
        try:
            return self._expander.expand(
                parent, parent.recurrence_pattern or (), parent.recurrence_end_date, group=group
            )
        except Exception:
            logger.warning(
                "series expansion failed, undoing parent write", extra={"course_id": parent.course_id}, exc_info=True
            )
            undo()
            raise

    def _ids_to_ignore(self, course: Course) -> Set[int]:
        parent_id = course.series_parent_id
        if parent_id is None:
            return {course.course_id}
        ids = {parent_id, course.course_id}
        ids.update(c.course_id for c in self._courses.list_occurrences(parent_id))
        return ids

    def _validated(self, draft: CourseDraft, *, check_refs: Sequence[str]) -> CourseDraft:
        require_non_empty(draft.name, "name")
        require_duration(draft.duration)
        if "subject" in check_refs:
            self._require_subject(draft.subject_id)
        if "teacher" in check_refs:
            self._require_teacher(draft.teacher_id)
        if "room" in check_refs:
            require_positive_id(draft.room_id, "room_id")
            # raises NotFound for a missing room
            self._resolver.resolve(draft.room_id)
        if draft.is_recurring:
            self._require_recurrence(draft)
        elif draft.recurrence_pattern is not None or draft.recurrence_end_date is not None:
            draft = replace(draft, recurrence_pattern=None, recurrence_end_date=None)
        return draft

    def _require_subject(self, subject_id: int) -> None:
        require_positive_id(subject_id, "subject_id")
        if not self._subjects.exists(int(subject_id)):
            raise NotFoundError("subject", subject_id)

    def _require_teacher(self, teacher_id: int) -> None:
        require_positive_id(teacher_id, "teacher_id")
        teacher = self._users.get_by_id(int(teacher_id))
        if not teacher:
            raise NotFoundError("teacher", teacher_id)
        if teacher.role != Role.TEACHER:
            raise InvalidRoleError(f"user {teacher_id} is not a teacher")

    @staticmethod
    def _require_recurrence(draft: CourseDraft) -> None:
        end_day = draft.recurrence_end_date
        if end_day is None:
            raise RecurrenceWindowInvalidError("recurring course needs a recurrence end date")
        if isinstance(end_day, datetime):
            end_day = end_day.date()
        if end_day <= draft.start_time.date():
            raise RecurrenceWindowInvalidError("recurrence end date must be after the course start")
        if not draft.recurrence_pattern:
            raise ValidationError("recurring course needs at least one weekday")

    def _publish(self, name: str, **payload) -> None:
        if self._events is not None:
            self._events.publish(DomainEvent(name=name, payload=payload))
