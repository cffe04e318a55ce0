from __future__ import annotations

from typing import Optional, Protocol

from .model import Subject


class SubjectRepository(Protocol):
    def get_by_id(self, subject_id: int) -> Optional[Subject]:
        raise NotImplementedError

    def exists(self, subject_id: int) -> bool:
        raise NotImplementedError
