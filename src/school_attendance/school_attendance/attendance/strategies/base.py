from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import PresenceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: PresenceStatus
    note: Optional[str] = None


class ScanStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a presence status."""

    @abstractmethod
    def decide_scan(self, *, now: datetime, course_start: datetime) -> StatusDecision:
        raise NotImplementedError
