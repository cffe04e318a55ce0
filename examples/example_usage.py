"""Example: book a weekly course and take attendance through the service layer.

Needs a reachable MySQL server configured through the usual DB_* variables.
"""

from datetime import date, datetime, timedelta

from src.school_attendance.school_attendance.core.enums import Weekday
from src.school_attendance.school_attendance.courses.model import CourseDraft
from src.school_attendance.school_attendance.main import create_container


def main():
    container = create_container()

    start = datetime.now().replace(second=0, microsecond=0) + timedelta(minutes=5)
    course = container.course_service.create(
        CourseDraft(
            name="Mechanics",
            subject_id=1,
            teacher_id=1,
            room_id=1,
            start_time=start,
            duration=90,
            is_recurring=True,
            recurrence_pattern=frozenset({Weekday.from_date(start)}),
            recurrence_end_date=date.today() + timedelta(weeks=4),
        )
    )
    print("series", course.course_id, "->", len(container.course_service.list_series(course.course_id)), "occurrences")

    token = container.token_service.generate(course.course_id)
    print("token", token)
    print("absences seeded", container.attendance_service.seed_absences(course.course_id))
    print(container.attendance_service.stats(course.course_id))

    container.events.stop()


if __name__ == "__main__":
    main()
