from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

import pytest

from src.school_attendance.school_attendance.attendance.model import Presence
from src.school_attendance.school_attendance.attendance.service import AttendanceService
from src.school_attendance.school_attendance.attendance.tokens import AttendanceTokenService
from src.school_attendance.school_attendance.core.enums import PresenceStatus, Role
from src.school_attendance.school_attendance.courses.conflicts import ConflictDetector
from src.school_attendance.school_attendance.courses.locks import InProcessRoomLocks
from src.school_attendance.school_attendance.courses.model import Course, CourseDraft
from src.school_attendance.school_attendance.courses.recurrence import RecurrenceExpander
from src.school_attendance.school_attendance.courses.service import CourseService
from src.school_attendance.school_attendance.rooms.hierarchy import RoomHierarchyResolver
from src.school_attendance.school_attendance.rooms.model import Room
from src.school_attendance.school_attendance.subjects.model import Subject
from src.school_attendance.school_attendance.users.model import User

TEACHER_ID = 1
ADMIN_ID = 2
STUDENT_IDS = (100, 101, 102)
SUBJECT_ID = 1

ROOM_A101 = 1
ROOM_AMPHI = 10
ROOM_AMPHI_1 = 11
ROOM_AMPHI_2 = 12


@dataclass
class InMemoryRooms:
    rooms: dict[int, Room]

    def get_by_id(self, room_id: int) -> Optional[Room]:
        return self.rooms.get(room_id)

    def list_children(self, parent_id: int):
        return [r for r in self.rooms.values() if r.parent_id == parent_id]


@dataclass
class InMemoryUsers:
    users: dict[int, User]

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def list_ids_by_role(self, role: Role):
        return [u.user_id for u in self.users.values() if u.role == role]


@dataclass
class InMemorySubjects:
    subjects: dict[int, Subject]

    def get_by_id(self, subject_id: int) -> Optional[Subject]:
        return self.subjects.get(subject_id)

    def exists(self, subject_id: int) -> bool:
        return subject_id in self.subjects


class InMemoryCourses:
    def __init__(self):
        self.rows: dict[int, Course] = {}
        self._id = 0

    def get_by_id(self, course_id: int) -> Optional[Course]:
        return self.rows.get(course_id)

    def create(self, draft: CourseDraft) -> Course:
        self._id += 1
        course = Course.from_draft(draft, self._id)
        self.rows[course.course_id] = course
        return course

    def update(self, course: Course) -> bool:
        if course.course_id not in self.rows:
            return False
        self.rows[course.course_id] = course
        return True

    def delete(self, course_id: int) -> bool:
        return self.rows.pop(course_id, None) is not None

    def delete_occurrences(self, parent_id: int) -> int:
        ids = [c.course_id for c in self.rows.values() if c.recurrence_id == parent_id]
        for course_id in ids:
            del self.rows[course_id]
        return len(ids)

    def delete_series(self, parent_id: int) -> int:
        removed = self.delete_occurrences(parent_id)
        return removed + (1 if self.delete(parent_id) else 0)

    def list_occurrences(self, parent_id: int):
        return sorted((c for c in self.rows.values() if c.recurrence_id == parent_id), key=lambda c: c.start_time)

    def find_overlapping(self, *, room_ids, start: datetime, end: datetime):
        return [
            c
            for c in self.rows.values()
            if c.room_id in set(room_ids) and c.start_time < end and start < c.end_time
        ]

    def list_range(self, *, start: datetime, end: datetime):
        return sorted((c for c in self.rows.values() if start <= c.start_time <= end), key=lambda c: c.start_time)

    def list_by_room(self, room_id: int):
        return [c for c in self.rows.values() if c.room_id == room_id]

    def list_by_teacher(self, teacher_id: int):
        return [c for c in self.rows.values() if c.teacher_id == teacher_id]


class InMemoryPresences:
    def __init__(self):
        self.rows: dict[tuple[int, int], Presence] = {}
        self._id = 0
        self._lock = threading.Lock()

    def get_for_student_and_course(self, student_id: int, course_id: int) -> Optional[Presence]:
        return self.rows.get((student_id, course_id))

    def record_scan(self, *, student_id: int, course_id: int, status: PresenceStatus, scanned_at: datetime):
        with self._lock:
            existing = self.rows.get((student_id, course_id))
            if existing and existing.is_scanned:
                return None
            if existing:
                presence = replace(existing, status=status, scanned_at=scanned_at)
            else:
                self._id += 1
                presence = Presence(self._id, student_id, course_id, status, scanned_at)
            self.rows[(student_id, course_id)] = presence
            return presence

    def create_absent(self, *, course_id: int, student_ids) -> int:
        created = 0
        for student_id in student_ids:
            if (student_id, course_id) in self.rows:
                continue
            self._id += 1
            self.rows[(student_id, course_id)] = Presence(self._id, student_id, course_id, PresenceStatus.ABSENT)
            created += 1
        return created

    def list_by_course(self, course_id: int):
        return [p for p in self.rows.values() if p.course_id == course_id]

    def list_by_student(self, student_id: int):
        return [p for p in self.rows.values() if p.student_id == student_id]

    def count_by_status(self, course_id: int):
        counts: dict[PresenceStatus, int] = {}
        for p in self.list_by_course(course_id):
            counts[p.status] = counts.get(p.status, 0) + 1
        return counts


@dataclass
class RecordingEvents:
    published: list = field(default_factory=list)

    def publish(self, event) -> bool:
        self.published.append(event)
        return True

    def names(self) -> list[str]:
        return [e.name for e in self.published]


@pytest.fixture
def rooms_repo():
    return InMemoryRooms(
        {
            ROOM_A101: Room(ROOM_A101, "A101"),
            ROOM_AMPHI: Room(ROOM_AMPHI, "Amphi", is_modular=True),
            ROOM_AMPHI_1: Room(ROOM_AMPHI_1, "Amphi-1", parent_id=ROOM_AMPHI),
            ROOM_AMPHI_2: Room(ROOM_AMPHI_2, "Amphi-2", parent_id=ROOM_AMPHI),
        }
    )


@pytest.fixture
def users_repo():
    users = {
        TEACHER_ID: User(TEACHER_ID, "Marie", "Curie", Role.TEACHER),
        ADMIN_ID: User(ADMIN_ID, "Ada", "Admin", Role.ADMIN),
    }
    for i, student_id in enumerate(STUDENT_IDS):
        users[student_id] = User(student_id, f"Student{i}", "Test", Role.STUDENT)
    return InMemoryUsers(users)


@pytest.fixture
def subjects_repo():
    return InMemorySubjects({SUBJECT_ID: Subject(SUBJECT_ID, "Physics", "PHY101")})


@pytest.fixture
def courses_repo():
    return InMemoryCourses()


@pytest.fixture
def presences_repo():
    return InMemoryPresences()


@pytest.fixture
def events():
    return RecordingEvents()


@pytest.fixture
def resolver(rooms_repo):
    return RoomHierarchyResolver(rooms_repo)


@pytest.fixture
def detector(courses_repo, resolver):
    return ConflictDetector(courses_repo, resolver)


@pytest.fixture
def expander(courses_repo, resolver, detector):
    return RecurrenceExpander(courses_repo, resolver, detector)


@pytest.fixture
def course_service(courses_repo, subjects_repo, users_repo, resolver, detector, expander, events):
    return CourseService(
        courses_repo,
        subjects_repo,
        users_repo,
        resolver,
        detector,
        expander,
        InProcessRoomLocks(timeout=1),
        events=events,
    )


@pytest.fixture
def token_service(courses_repo, rooms_repo, events):
    return AttendanceTokenService(courses_repo, rooms_repo, lead_minutes=15, events=events)


@pytest.fixture
def attendance_service(presences_repo, courses_repo, users_repo, token_service, events):
    return AttendanceService(presences_repo, courses_repo, users_repo, token_service, events=events)


@pytest.fixture
def make_draft():
    def _make(**overrides) -> CourseDraft:
        values = dict(
            name="Mechanics",
            subject_id=SUBJECT_ID,
            teacher_id=TEACHER_ID,
            room_id=ROOM_A101,
            start_time=datetime(2024, 9, 2, 10, 0),
            duration=60,
        )
        values.update(overrides)
        return CourseDraft(**values)

    return _make
