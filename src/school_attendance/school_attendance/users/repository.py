from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Lookup interface onto the identity service.

    User CRUD and authentication live outside this package.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def list_ids_by_role(self, role: Role) -> Sequence[int]:
        raise NotImplementedError
