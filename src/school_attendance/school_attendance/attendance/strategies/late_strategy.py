from __future__ import annotations

from datetime import datetime

from ...core.enums import PresenceStatus
from .base import ScanStrategy, StatusDecision


class LateStrategy(ScanStrategy):
    """Late scan."""

    def decide_scan(self, *, now: datetime, course_start: datetime) -> StatusDecision:
        minutes = int((now - course_start).total_seconds() // 60)
        return StatusDecision(status=PresenceStatus.LATE, note=f"{minutes} min late")
