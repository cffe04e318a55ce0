from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Room:
    """A bookable room.

    Exactly one of three shapes: standalone (no parent, not modular),
    modular parent (``is_modular`` and no parent) or sub-room (``parent_id``
    set, not modular). Children are never stored on the row; they are looked
    up by ``parent_id``.
    """

    room_id: int
    name: str
    is_modular: bool = False
    parent_id: Optional[int] = None
    building: Optional[str] = None
    floor: Optional[str] = None
