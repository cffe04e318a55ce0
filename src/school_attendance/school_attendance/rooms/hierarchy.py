from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..core.exceptions import NotFoundError
from .model import Room
from .repository import RoomRepository


@dataclass(frozen=True)
class ContentionGroup:
    """Rooms whose bookings must be checked together.

    ``rooms[0]`` is always the room that was asked about.
    """

    rooms: Sequence[Room]

    @property
    def room(self) -> Room:
        return self.rooms[0]

    @property
    def room_ids(self) -> list[int]:
        return [r.room_id for r in self.rooms]

    def name_of(self, room_id: int) -> str:
        for r in self.rooms:
            if r.room_id == room_id:
                return r.name
        return ""


class RoomHierarchyResolver:
    """Resolves a room to its contention group.

    A modular parent contends with its children, a sub-room with its parent.
    Only one level is ever walked; siblings of a sub-room are not included.
    """

    def __init__(self, rooms: RoomRepository):
        self._rooms = rooms

    def resolve(self, room_id: int) -> ContentionGroup:
        room = self._rooms.get_by_id(int(room_id))
        if not room:
            raise NotFoundError("room", room_id)

        group: list[Room] = [room]
        if room.is_modular:
            group.extend(c for c in self._rooms.list_children(room.room_id) if c.room_id != room.room_id)
        if room.parent_id is not None:
            parent = self._rooms.get_by_id(room.parent_id)
            if parent:
                group.append(parent)
        return ContentionGroup(rooms=tuple(group))
