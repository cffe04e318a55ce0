from __future__ import annotations

from ..core.constants import MAX_COURSE_MINUTES, MIN_COURSE_MINUTES
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_positive_id(value: int, field_name: str) -> int:
    if value is None or int(value) <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return int(value)


def require_duration(minutes: int) -> int:
    if minutes is None or not (MIN_COURSE_MINUTES <= int(minutes) <= MAX_COURSE_MINUTES):
        raise ValidationError(
            f"duration must be between {MIN_COURSE_MINUTES} and {MAX_COURSE_MINUTES} minutes"
        )
    return int(minutes)
