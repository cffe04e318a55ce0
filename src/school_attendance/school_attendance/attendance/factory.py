from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.constants import DEFAULT_LATE_WINDOW_MINUTES, DEFAULT_PRESENT_WINDOW_MINUTES
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import ScanStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the scan strategy from time elapsed since course start.

    elapsed < present window           -> Present
    present window <= elapsed < late   -> Late
    otherwise                          -> Absent
    """

    present_minutes: int = DEFAULT_PRESENT_WINDOW_MINUTES
    late_minutes: int = DEFAULT_LATE_WINDOW_MINUTES

    def for_scan(self, *, now: datetime, course_start: datetime) -> ScanStrategy:
        elapsed = now - course_start
        if elapsed < timedelta(minutes=self.present_minutes):
            return PresentStrategy()
        if elapsed < timedelta(minutes=self.late_minutes):
            return LateStrategy()
        return AbsentStrategy()
