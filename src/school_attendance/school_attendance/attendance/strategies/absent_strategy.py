from __future__ import annotations

from datetime import datetime

from ...core.enums import PresenceStatus
from .base import ScanStrategy, StatusDecision


class AbsentStrategy(ScanStrategy):
    """Scanned too long after the start to count as attending."""

    def decide_scan(self, *, now: datetime, course_start: datetime) -> StatusDecision:
        return StatusDecision(status=PresenceStatus.ABSENT, note="scanned after the late window")
