from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import PresenceStatus, Role
from ..core.exceptions import AlreadyScannedError, InvalidRoleError, NotFoundError, WindowClosedError
from ..courses.repository import CourseRepository
from ..events.model import DomainEvent
from ..events.queue import EventQueue
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .model import Presence, PresenceStats
from .repository import PresenceRepository
from .tokens import AttendanceTokenService

logger = logging.getLogger(__name__)


class AttendanceService:
    """Scan handling and presence bookkeeping.

    A presence row goes from "no record" (or an unscanned ABSENT row created
    by ``seed_absences``) to a scanned PRESENT / LATE / ABSENT row exactly
    once. The status depends only on scan time relative to course start.
    """

    def __init__(
        self,
        presences: PresenceRepository,
        courses: CourseRepository,
        users: UserRepository,
        tokens: AttendanceTokenService,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        events: EventQueue | None = None,
    ):
        self._presences = presences
        self._courses = courses
        self._users = users
        self._tokens = tokens
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._events = events

    def scan(self, token: str, student_id: int, *, now: Optional[datetime] = None) -> Presence:
        now = now or now_local()

        info = self._tokens.validate(token, now=now)
        if not info.is_valid:
            logger.warning("scan rejected, course not running", extra={"course_id": info.course_id})
            raise WindowClosedError("attendance is only open while the course is running")

        student = self._users.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("student", student_id)
        if student.role != Role.STUDENT:
            raise InvalidRoleError("only students can record attendance")

        existing = self._presences.get_for_student_and_course(student.user_id, info.course_id)
        if existing and existing.is_scanned:
            raise AlreadyScannedError("attendance already recorded for this course")

        strategy = self._factory.for_scan(now=now, course_start=info.start_time)
        decision = strategy.decide_scan(now=now, course_start=info.start_time)

        presence = self._presences.record_scan(
            student_id=student.user_id,
            course_id=info.course_id,
            status=decision.status,
            scanned_at=now,
        )
        if presence is None:
            # lost a race with a concurrent scan of the same student
            raise AlreadyScannedError("attendance already recorded for this course")

        logger.info(
            "presence recorded",
            extra={
                "course_id": info.course_id,
                "student_id": student.user_id,
                "status": decision.status,
                "note": decision.note,
            },
        )
        if self._events is not None:
            self._events.publish(
                DomainEvent(
                    name="presence.scanned",
                    payload={
                        "course_id": info.course_id,
                        "student_id": student.user_id,
                        "status": decision.status.value,
                    },
                )
            )
        return presence

    def seed_absences(self, course_id: int) -> int:
        """Give every student without a row an unscanned ABSENT row for the course."""
        course = self._courses.get_by_id(int(course_id))
        if not course:
            raise NotFoundError("course", course_id)
        student_ids = self._users.list_ids_by_role(Role.STUDENT)
        created = self._presences.create_absent(course_id=course.course_id, student_ids=student_ids)
        logger.info("absences seeded", extra={"course_id": course.course_id, "created": created})
        return created

    def stats(self, course_id: int) -> PresenceStats:
        course = self._courses.get_by_id(int(course_id))
        if not course:
            raise NotFoundError("course", course_id)
        counts = self._presences.count_by_status(course.course_id)
        return PresenceStats(
            total_students=len(self._users.list_ids_by_role(Role.STUDENT)),
            present=int(counts.get(PresenceStatus.PRESENT, 0)),
            late=int(counts.get(PresenceStatus.LATE, 0)),
            absent=int(counts.get(PresenceStatus.ABSENT, 0)),
        )

    def list_by_course(self, course_id: int) -> Sequence[Presence]:
        return self._presences.list_by_course(int(course_id))

    def list_by_student(self, student_id: int) -> Sequence[Presence]:
        return self._presences.list_by_student(int(student_id))
