from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Identity record as seen by the scheduling core (read-only)."""

    user_id: int
    first_name: str
    last_name: str
    role: Role
    email: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
