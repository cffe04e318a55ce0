from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import PresenceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Presence
from .repository import PresenceRepository

_COLUMNS = "presence_id, student_id, course_id, status, scanned_at"


def _to_presence(r: dict) -> Presence:
    return Presence(
        presence_id=int(r["presence_id"]),
        student_id=int(r["student_id"]),
        course_id=int(r["course_id"]),
        status=PresenceStatus(r["status"]),
        scanned_at=r.get("scanned_at"),
    )


class MySQLPresenceRepository(PresenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_and_course(self, student_id: int, course_id: int) -> Optional[Presence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM presences WHERE student_id=%s AND course_id=%s",
                (int(student_id), int(course_id)),
            )
            r = fetchone(cur)
            return _to_presence(r) if r else None

    def record_scan(
        self,
        *,
        student_id: int,
        course_id: int,
        status: PresenceStatus,
        scanned_at: datetime,
    ) -> Optional[Presence]:
        key = (int(student_id), int(course_id))
        with db_cursor(self._conn_factory) as (_, cur):
            claimed = self._claim_unscanned(cur, key, status, scanned_at)
            if not claimed:
                try:
                    cur.execute(
                        """
                        INSERT INTO presences(student_id, course_id, status, scanned_at)
                        VALUES(%s,%s,%s,%s)
                        """,
                        key + (status.value, scanned_at),
                    )
                    claimed = True
                except IntegrityError as exc:
                    if exc.errno != errorcode.ER_DUP_ENTRY:
                        raise
                    # Row appeared since the UPDATE: claim it only if still unscanned.
                    claimed = self._claim_unscanned(cur, key, status, scanned_at)
            if not claimed:
                return None

            cur.execute(f"SELECT {_COLUMNS} FROM presences WHERE student_id=%s AND course_id=%s", key)
            r = fetchone(cur)
            return _to_presence(r) if r else None

    @staticmethod
    def _claim_unscanned(cur, key: tuple, status: PresenceStatus, scanned_at: datetime) -> bool:
        cur.execute(
            """
            UPDATE presences
            SET status=%s, scanned_at=%s
            WHERE student_id=%s AND course_id=%s AND scanned_at IS NULL
            """,
            (status.value, scanned_at) + key,
        )
        return cur.rowcount > 0

    def create_absent(self, *, course_id: int, student_ids: Sequence[int]) -> int:
        if not student_ids:
            return 0
        created = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for student_id in student_ids:
                cur.execute(
                    """
                    INSERT INTO presences(student_id, course_id, status, scanned_at)
                    SELECT %s, %s, %s, NULL
                    FROM DUAL
                    WHERE NOT EXISTS (
                        SELECT 1 FROM presences WHERE student_id=%s AND course_id=%s
                    )
                    """,
                    (int(student_id), int(course_id), PresenceStatus.ABSENT.value, int(student_id), int(course_id)),
                )
                created += int(cur.rowcount)
        return created

    def list_by_course(self, course_id: int) -> Sequence[Presence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM presences WHERE course_id=%s ORDER BY student_id",
                (int(course_id),),
            )
            return [_to_presence(r) for r in fetchall(cur)]

    def list_by_student(self, student_id: int) -> Sequence[Presence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM presences WHERE student_id=%s ORDER BY created_at DESC",
                (int(student_id),),
            )
            return [_to_presence(r) for r in fetchall(cur)]

    def count_by_status(self, course_id: int) -> Mapping[PresenceStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT status, COUNT(*) AS n FROM presences WHERE course_id=%s GROUP BY status",
                (int(course_id),),
            )
            counts = {s: 0 for s in PresenceStatus}
            for r in fetchall(cur):
                counts[PresenceStatus(r["status"])] = int(r["n"])
            return counts
