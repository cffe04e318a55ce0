from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Room
from .repository import RoomRepository


def _to_room(r: dict) -> Room:
    return Room(
        room_id=int(r["room_id"]),
        name=r["name"],
        is_modular=bool(r.get("is_modular")),
        parent_id=int(r["parent_id"]) if r.get("parent_id") is not None else None,
        building=r.get("building"),
        floor=r.get("floor"),
    )


class MySQLRoomRepository(RoomRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, room_id: int) -> Optional[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT room_id, name, building, floor, is_modular, parent_id
                FROM rooms
                WHERE room_id=%s
                """,
                (int(room_id),),
            )
            r = fetchone(cur)
            return _to_room(r) if r else None

    def list_children(self, parent_id: int) -> Sequence[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT room_id, name, building, floor, is_modular, parent_id
                FROM rooms
                WHERE parent_id=%s
                ORDER BY room_id
                """,
                (int(parent_id),),
            )
            return [_to_room(r) for r in fetchall(cur)]
