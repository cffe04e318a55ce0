from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Course, CourseDraft
from .recurrence import dump_weekdays, parse_weekdays
from .repository import CourseRepository

_COLUMNS = """
    course_id, name, subject_id, teacher_id, room_id, start_time, end_time, duration,
    description, is_recurring, recurrence_id, recurrence_pattern, recurrence_end_date,
    exclude_holidays
"""


def _to_course(r: dict) -> Course:
    pattern = r.get("recurrence_pattern")
    return Course(
        course_id=int(r["course_id"]),
        name=r["name"],
        subject_id=int(r["subject_id"]),
        teacher_id=int(r["teacher_id"]),
        room_id=int(r["room_id"]),
        start_time=r["start_time"],
        duration=int(r["duration"]),
        description=r.get("description") or "",
        is_recurring=bool(r.get("is_recurring")),
        recurrence_id=int(r["recurrence_id"]) if r.get("recurrence_id") is not None else None,
        recurrence_pattern=parse_weekdays(pattern) if pattern else None,
        recurrence_end_date=r.get("recurrence_end_date"),
        exclude_holidays=bool(r.get("exclude_holidays")),
    )


def _params(c: CourseDraft) -> tuple:
    return (
        c.name,
        int(c.subject_id),
        int(c.teacher_id),
        int(c.room_id),
        c.start_time,
        c.end_time,
        int(c.duration),
        c.description or None,
        int(bool(c.is_recurring)),
        c.recurrence_id,
        dump_weekdays(c.recurrence_pattern),
        c.recurrence_end_date,
        int(bool(c.exclude_holidays)),
    )


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM courses WHERE course_id=%s", (int(course_id),))
            r = fetchone(cur)
            return _to_course(r) if r else None

    def create(self, draft: CourseDraft) -> Course:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO courses(
                    name, subject_id, teacher_id, room_id, start_time, end_time, duration,
                    description, is_recurring, recurrence_id, recurrence_pattern,
                    recurrence_end_date, exclude_holidays
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _params(draft),
            )
            return Course.from_draft(draft, int(cur.lastrowid))

    def update(self, course: Course) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE courses
                SET name=%s, subject_id=%s, teacher_id=%s, room_id=%s, start_time=%s, end_time=%s,
                    duration=%s, description=%s, is_recurring=%s, recurrence_id=%s,
                    recurrence_pattern=%s, recurrence_end_date=%s, exclude_holidays=%s
                WHERE course_id=%s
                """,
                _params(course) + (int(course.course_id),),
            )
            return cur.rowcount > 0

    def delete(self, course_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM courses WHERE course_id=%s", (int(course_id),))
            return cur.rowcount > 0

    def delete_occurrences(self, parent_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM courses WHERE recurrence_id=%s", (int(parent_id),))
            return int(cur.rowcount)

    def delete_series(self, parent_id: int) -> int:
        # Children first, then the parent, in one transaction.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM courses WHERE recurrence_id=%s", (int(parent_id),))
            removed = int(cur.rowcount)
            cur.execute("DELETE FROM courses WHERE course_id=%s", (int(parent_id),))
            return removed + int(cur.rowcount)

    def list_occurrences(self, parent_id: int) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM courses WHERE recurrence_id=%s ORDER BY start_time",
                (int(parent_id),),
            )
            return [_to_course(r) for r in fetchall(cur)]

    def find_overlapping(self, *, room_ids: Sequence[int], start: datetime, end: datetime) -> Sequence[Course]:
        ids = [int(i) for i in room_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM courses
                WHERE room_id IN ({in_clause(ids)})
                  AND start_time < %s
                  AND %s < end_time
                """,
                tuple(ids) + (end, start),
            )
            return [_to_course(r) for r in fetchall(cur)]

    def list_range(self, *, start: datetime, end: datetime) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM courses
                WHERE start_time BETWEEN %s AND %s
                ORDER BY start_time ASC, room_id ASC
                """,
                (start, end),
            )
            return [_to_course(r) for r in fetchall(cur)]

    def list_by_room(self, room_id: int) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM courses WHERE room_id=%s ORDER BY start_time",
                (int(room_id),),
            )
            return [_to_course(r) for r in fetchall(cur)]

    def list_by_teacher(self, teacher_id: int) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM courses WHERE teacher_id=%s ORDER BY start_time",
                (int(teacher_id),),
            )
            return [_to_course(r) for r in fetchall(cur)]
