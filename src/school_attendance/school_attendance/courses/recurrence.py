"""Weekly recurrence: pattern parsing and series expansion."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta
from typing import FrozenSet, Iterable, Iterator, Optional, Union

from ..common.datetime_utils import as_date, at_time_of
from ..core.enums import Weekday
from ..core.exceptions import ValidationError
from ..rooms.hierarchy import ContentionGroup, RoomHierarchyResolver
from .conflicts import ConflictDetector
from .model import Course, CourseDraft
from .repository import CourseRepository

logger = logging.getLogger(__name__)

PatternInput = Union[str, Iterable[Union[str, Weekday]], None]


def parse_weekdays(value: PatternInput) -> FrozenSet[Weekday]:
    """Validate a recurrence pattern into a set of weekdays.

    Accepts a JSON array (``'["monday", "friday"]'``), the legacy object form
    (``'{"days": [...]}'``) or any iterable of names / ``Weekday`` members.
    Names are case-insensitive. Unknown names raise ``ValidationError``.
    """
    if value is None:
        return frozenset()

    items: Iterable
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError as exc:
            raise ValidationError(f"recurrence pattern is not valid JSON: {value!r}") from exc
        if isinstance(decoded, dict):
            decoded = decoded.get("days", [])
        if not isinstance(decoded, list):
            raise ValidationError("recurrence pattern must be a list of day names")
        items = decoded
    else:
        items = value

    days: set[Weekday] = set()
    for item in items:
        if isinstance(item, Weekday):
            days.add(item)
            continue
        try:
            days.add(Weekday(str(item).strip().lower()))
        except ValueError as exc:
            raise ValidationError(f"unknown weekday: {item!r}") from exc
    return frozenset(days)


def dump_weekdays(days: Optional[Iterable[Weekday]]) -> Optional[str]:
    """Serialize a pattern as a JSON array in Monday..Sunday order."""
    if days is None:
        return None
    chosen = set(days)
    return json.dumps([d.value for d in Weekday if d in chosen])


def iter_occurrence_days(
    first_day: date, pattern: Iterable[Weekday], end_date_exclusive: date
) -> Iterator[date]:
    """Days from ``first_day`` (inclusive) to ``end_date_exclusive`` (exclusive) matching ``pattern``."""
    wanted = frozenset(pattern)
    day = first_day
    while day < end_date_exclusive:
        if Weekday.from_date(day) in wanted:
            yield day
        day += timedelta(days=1)


class RecurrenceExpander:
    """Generates and stores the occurrences of a recurring parent course.

    Runs sequentially and assumes the caller holds the room lock of the
    parent's contention group, so check and insert cannot interleave with
    another booking. A date whose occurrence would overlap an existing
    booking is skipped without error.
    """

    def __init__(self, courses: CourseRepository, resolver: RoomHierarchyResolver, detector: ConflictDetector):
        self._courses = courses
        self._resolver = resolver
        self._detector = detector

    def expand(
        self,
        parent: Course,
        pattern: Iterable[Weekday],
        end_date_exclusive: Union[date, datetime],
        *,
        group: Optional[ContentionGroup] = None,
    ) -> int:
        """Create the occurrences of ``parent``; returns how many were stored."""
        group = group or self._resolver.resolve(parent.room_id)
        end_day = as_date(end_date_exclusive)

        created = 0
        skipped = 0
        for day in iter_occurrence_days(parent.start_time.date(), pattern, end_day):
            occurrence = self._occurrence_of(parent, day)
            # The stored parent already books its own start slot.
            conflicts = self._detector.check_group(group, start=occurrence.start_time, end=occurrence.end_time)
            if conflicts:
                skipped += 1
                logger.debug(
                    "occurrence skipped, room busy",
                    extra={"parent_id": parent.course_id, "day": day, "conflicts": len(conflicts)},
                )
                continue
            self._courses.create(occurrence)
            created += 1

        logger.info(
            "series expanded",
            extra={"parent_id": parent.course_id, "created": created, "skipped": skipped},
        )
        return created

    @staticmethod
    def _occurrence_of(parent: Course, day: date) -> CourseDraft:
        return CourseDraft(
            name=parent.name,
            subject_id=parent.subject_id,
            teacher_id=parent.teacher_id,
            room_id=parent.room_id,
            start_time=at_time_of(day, parent.start_time),
            duration=parent.duration,
            description=parent.description,
            is_recurring=parent.is_recurring,
            recurrence_id=parent.course_id,
            recurrence_pattern=parent.recurrence_pattern,
            recurrence_end_date=parent.recurrence_end_date,
            exclude_holidays=parent.exclude_holidays,
        )
