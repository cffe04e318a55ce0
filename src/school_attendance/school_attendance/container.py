from __future__ import annotations

from dataclasses import dataclass

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_presence_repository import MySQLPresenceRepository
from .attendance.service import AttendanceService
from .attendance.tokens import AttendanceTokenService
from .core.constants import (
    DEFAULT_EVENT_QUEUE_SIZE,
    DEFAULT_LATE_WINDOW_MINUTES,
    DEFAULT_PRESENT_WINDOW_MINUTES,
    DEFAULT_ROOM_LOCK_TIMEOUT_SECONDS,
    DEFAULT_TOKEN_LEAD_MINUTES,
)
from .courses.conflicts import ConflictDetector
from .courses.locks import MySQLRoomLocks
from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.recurrence import RecurrenceExpander
from .courses.service import CourseService
from .database.connection import DBConfig, DatabaseConnection
from .events.queue import EventQueue
from .rooms.hierarchy import RoomHierarchyResolver
from .rooms.mysql_room_repository import MySQLRoomRepository
from .subjects.mysql_subject_repository import MySQLSubjectRepository
from .users.mysql_user_repository import MySQLUserRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    events: EventQueue

    users_repo: MySQLUserRepository
    subjects_repo: MySQLSubjectRepository
    rooms_repo: MySQLRoomRepository
    courses_repo: MySQLCourseRepository
    presences_repo: MySQLPresenceRepository

    room_resolver: RoomHierarchyResolver
    conflict_detector: ConflictDetector
    course_service: CourseService
    token_service: AttendanceTokenService
    attendance_service: AttendanceService


def build_container(
    *,
    db_config: dict,
    lock_timeout: float = DEFAULT_ROOM_LOCK_TIMEOUT_SECONDS,
    token_lead_minutes: int = DEFAULT_TOKEN_LEAD_MINUTES,
    present_minutes: int = DEFAULT_PRESENT_WINDOW_MINUTES,
    late_minutes: int = DEFAULT_LATE_WINDOW_MINUTES,
    event_queue_size: int = DEFAULT_EVENT_QUEUE_SIZE,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    events = EventQueue(maxsize=event_queue_size)

    users_repo = MySQLUserRepository(conn)
    subjects_repo = MySQLSubjectRepository(conn)
    rooms_repo = MySQLRoomRepository(conn)
    courses_repo = MySQLCourseRepository(conn)
    presences_repo = MySQLPresenceRepository(conn)

    room_resolver = RoomHierarchyResolver(rooms_repo)
    conflict_detector = ConflictDetector(courses_repo, room_resolver)
    course_service = CourseService(
        courses_repo,
        subjects_repo,
        users_repo,
        room_resolver,
        conflict_detector,
        RecurrenceExpander(courses_repo, room_resolver, conflict_detector),
        MySQLRoomLocks(conn, timeout=lock_timeout),
        events=events,
    )
    token_service = AttendanceTokenService(
        courses_repo, rooms_repo, lead_minutes=token_lead_minutes, events=events
    )
    attendance_service = AttendanceService(
        presences_repo,
        courses_repo,
        users_repo,
        token_service,
        strategy_factory=AttendanceStrategyFactory(present_minutes=present_minutes, late_minutes=late_minutes),
        events=events,
    )

    return Container(
        conn=conn,
        events=events,
        users_repo=users_repo,
        subjects_repo=subjects_repo,
        rooms_repo=rooms_repo,
        courses_repo=courses_repo,
        presences_repo=presences_repo,
        room_resolver=room_resolver,
        conflict_detector=conflict_detector,
        course_service=course_service,
        token_service=token_service,
        attendance_service=attendance_service,
    )
