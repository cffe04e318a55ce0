import threading
from datetime import datetime, timedelta

import pytest

from src.school_attendance.school_attendance.attendance.tokens import AttendanceToken
from src.school_attendance.school_attendance.core.enums import PresenceStatus
from src.school_attendance.school_attendance.core.exceptions import (
    AlreadyScannedError,
    InvalidRoleError,
    NotFoundError,
    TokenInvalidError,
    WindowClosedError,
)

START = datetime(2024, 9, 2, 10, 0)


@pytest.fixture
def course(courses_repo, make_draft):
    return courses_repo.create(make_draft(start_time=START, duration=60))


@pytest.fixture
def token(course):
    return AttendanceToken.issue(course.course_id, START).encode()


@pytest.mark.parametrize(
    "minutes, status",
    [(0, PresenceStatus.PRESENT), (10, PresenceStatus.PRESENT), (20, PresenceStatus.LATE), (40, PresenceStatus.ABSENT)],
)
def test_scan_status_depends_on_time_since_start(attendance_service, token, course, minutes, status):
    presence = attendance_service.scan(token, 100, now=START + timedelta(minutes=minutes))

    assert presence.status == status
    assert presence.course_id == course.course_id
    assert presence.scanned_at == START + timedelta(minutes=minutes)


def test_second_scan_is_rejected(attendance_service, token, events):
    attendance_service.scan(token, 100, now=START + timedelta(minutes=5))

    with pytest.raises(AlreadyScannedError):
        attendance_service.scan(token, 100, now=START + timedelta(minutes=6))

    assert events.names().count("presence.scanned") == 1


def test_scan_outside_course_window(attendance_service, token):
    with pytest.raises(WindowClosedError):
        attendance_service.scan(token, 100, now=START - timedelta(minutes=1))
    with pytest.raises(WindowClosedError):
        attendance_service.scan(token, 100, now=START + timedelta(minutes=60))


def test_scan_requires_a_student(attendance_service, token):
    with pytest.raises(InvalidRoleError):
        attendance_service.scan(token, 1, now=START)
    with pytest.raises(NotFoundError):
        attendance_service.scan(token, 555, now=START)


def test_scan_with_garbage_token(attendance_service, course):
    with pytest.raises(TokenInvalidError):
        attendance_service.scan("garbage", 100, now=START)


def test_seeded_absence_is_overwritten_by_scan(attendance_service, presences_repo, token, course):
    assert attendance_service.seed_absences(course.course_id) == 3
    assert attendance_service.seed_absences(course.course_id) == 0

    presence = attendance_service.scan(token, 101, now=START + timedelta(minutes=3))

    assert presence.status == PresenceStatus.PRESENT
    assert presence.is_scanned
    assert len(attendance_service.list_by_course(course.course_id)) == 3


def test_stats(attendance_service, token, course):
    attendance_service.seed_absences(course.course_id)
    attendance_service.scan(token, 100, now=START + timedelta(minutes=1))
    attendance_service.scan(token, 101, now=START + timedelta(minutes=20))

    stats = attendance_service.stats(course.course_id)

    assert (stats.total_students, stats.present, stats.late, stats.absent) == (3, 1, 1, 1)
    assert stats.attendance_rate == pytest.approx(200 / 3)
    assert [p.course_id for p in attendance_service.list_by_student(100)] == [course.course_id]


def test_seed_and_stats_unknown_course(attendance_service):
    with pytest.raises(NotFoundError):
        attendance_service.seed_absences(404)
    with pytest.raises(NotFoundError):
        attendance_service.stats(404)


def test_concurrent_scans_record_one_presence(attendance_service, presences_repo, token, course):
    barrier = threading.Barrier(4)
    outcomes = []

    def scan():
        barrier.wait(2)
        try:
            outcomes.append(attendance_service.scan(token, 100, now=START + timedelta(minutes=2)))
        except AlreadyScannedError as exc:
            outcomes.append(exc)

    threads = [threading.Thread(target=scan) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    assert len(outcomes) == 4
    assert sum(not isinstance(o, AlreadyScannedError) for o in outcomes) == 1
    assert len(presences_repo.list_by_course(course.course_id)) == 1
