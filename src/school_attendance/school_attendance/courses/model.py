from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime, timedelta
from typing import FrozenSet, Optional

from ..core.enums import Weekday


@dataclass(frozen=True)
class CourseDraft:
    """Course fields before persistence assigns an id."""

    name: str
    subject_id: int
    teacher_id: int
    room_id: int
    start_time: datetime
    duration: int  # minutes
    description: str = ""
    is_recurring: bool = False
    recurrence_id: Optional[int] = None
    recurrence_pattern: Optional[FrozenSet[Weekday]] = None
    # Exclusive: no occurrence is generated on this date.
    recurrence_end_date: Optional[date] = None
    # Stored and returned, not consulted by recurrence expansion.
    exclude_holidays: bool = True

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=int(self.duration))


@dataclass(frozen=True)
class Course(CourseDraft):
    """A persisted course: standalone, series parent, or one occurrence of a series."""

    course_id: int = 0

    @property
    def is_series_parent(self) -> bool:
        return self.is_recurring and self.recurrence_id is None

    @property
    def is_occurrence(self) -> bool:
        return self.recurrence_id is not None

    @property
    def series_parent_id(self) -> Optional[int]:
        if self.recurrence_id is not None:
            return self.recurrence_id
        if self.is_recurring:
            return self.course_id
        return None

    @classmethod
    def from_draft(cls, draft: CourseDraft, course_id: int) -> "Course":
        return cls(course_id=int(course_id), **{f.name: getattr(draft, f.name) for f in fields(CourseDraft)})


@dataclass(frozen=True)
class CoursePatch:
    """Partial update; ``None`` means keep the current value."""

    name: Optional[str] = None
    subject_id: Optional[int] = None
    teacher_id: Optional[int] = None
    room_id: Optional[int] = None
    start_time: Optional[datetime] = None
    duration: Optional[int] = None
    description: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[FrozenSet[Weekday]] = None
    recurrence_end_date: Optional[date] = None
    exclude_holidays: Optional[bool] = None

    def apply_to(self, course: CourseDraft) -> CourseDraft:
        values = {f.name: getattr(course, f.name) for f in fields(CourseDraft)}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                values[f.name] = value
        values["recurrence_id"] = None
        return CourseDraft(**values)


@dataclass(frozen=True)
class ConflictInfo:
    """Reporting row for one booking that overlaps a candidate slot."""

    date: date
    start_time: datetime
    end_time: datetime
    room_name: str
    course_name: str
    course_id: int
    room_id: int
