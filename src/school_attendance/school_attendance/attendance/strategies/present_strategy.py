from __future__ import annotations

from datetime import datetime

from ...core.enums import PresenceStatus
from .base import ScanStrategy, StatusDecision


class PresentStrategy(ScanStrategy):
    """Scanned within the on-time window."""

    def decide_scan(self, *, now: datetime, course_start: datetime) -> StatusDecision:
        return StatusDecision(status=PresenceStatus.PRESENT)
