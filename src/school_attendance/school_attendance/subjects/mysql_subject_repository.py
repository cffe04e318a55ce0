from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Subject
from .repository import SubjectRepository


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, subject_id: int) -> Optional[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT subject_id, name, code FROM subjects WHERE subject_id=%s", (int(subject_id),))
            r = fetchone(cur)
            if not r:
                return None
            return Subject(subject_id=int(r["subject_id"]), name=r["name"], code=r.get("code"))

    def exists(self, subject_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM subjects WHERE subject_id=%s", (int(subject_id),))
            return fetchone(cur) is not None
