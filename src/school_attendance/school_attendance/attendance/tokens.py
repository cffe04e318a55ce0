"""Attendance tokens shown as QR codes.

A token is base64url(JSON{"course_id", "token", "timestamp"}), where
``token`` is 256 random bits. Nothing is stored server side and the token is
not signed: whoever can read the QR code can use it while the course window
is open. Validity comes only from the course's time window at validation
time, never from the token's own age.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_TOKEN_LEAD_MINUTES, TOKEN_NONCE_BYTES
from ..core.exceptions import NotFoundError, TokenInvalidError, WindowClosedError
from ..courses.repository import CourseRepository
from ..events.model import DomainEvent
from ..events.queue import EventQueue
from ..rooms.repository import RoomRepository
from .model import TokenValidation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceToken:
    course_id: int
    nonce: str
    issued_at: int  # unix seconds

    def encode(self) -> str:
        raw = json.dumps(
            {"course_id": self.course_id, "token": self.nonce, "timestamp": self.issued_at},
            separators=(",", ":"),
        ).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii")

    @classmethod
    def issue(cls, course_id: int, now: datetime) -> "AttendanceToken":
        nonce = base64.urlsafe_b64encode(secrets.token_bytes(TOKEN_NONCE_BYTES)).decode("ascii")
        return cls(course_id=int(course_id), nonce=nonce, issued_at=int(now.timestamp()))

    @classmethod
    def decode(cls, value: str) -> "AttendanceToken":
        try:
            raw = base64.urlsafe_b64decode(value.strip().encode("ascii"))
            data = json.loads(raw.decode("utf-8"))
        except (AttributeError, binascii.Error, UnicodeError, ValueError) as exc:
            raise TokenInvalidError("attendance token is malformed") from exc

        if not isinstance(data, dict):
            raise TokenInvalidError("attendance token is malformed")
        course_id = data.get("course_id")
        nonce = data.get("token")
        issued_at = data.get("timestamp")
        # bool is an int subclass; reject it explicitly
        if not isinstance(course_id, int) or isinstance(course_id, bool) or course_id <= 0:
            raise TokenInvalidError("attendance token has no course")
        if not isinstance(nonce, str) or not nonce:
            raise TokenInvalidError("attendance token has no nonce")
        if not isinstance(issued_at, int) or isinstance(issued_at, bool):
            raise TokenInvalidError("attendance token has no timestamp")
        return cls(course_id=course_id, nonce=nonce, issued_at=issued_at)


class AttendanceTokenService:
    def __init__(
        self,
        courses: CourseRepository,
        rooms: RoomRepository,
        *,
        lead_minutes: int = DEFAULT_TOKEN_LEAD_MINUTES,
        events: EventQueue | None = None,
    ):
        self._courses = courses
        self._rooms = rooms
        self._lead = timedelta(minutes=int(lead_minutes))
        self._events = events

    def generate(self, course_id: int, *, now: Optional[datetime] = None) -> str:
        """Issue a token; only from ``lead_minutes`` before start until the course ends."""
        now = now or now_local()
        course = self._courses.get_by_id(int(course_id))
        if not course:
            raise NotFoundError("course", course_id)

        if now < course.start_time - self._lead:
            raise WindowClosedError(
                f"attendance opens {int(self._lead.total_seconds() // 60)} minutes before the course starts"
            )
        if now > course.end_time:
            raise WindowClosedError("course has already ended")

        token = AttendanceToken.issue(course.course_id, now)
        logger.info("attendance token issued", extra={"course_id": course.course_id})
        if self._events is not None:
            self._events.publish(DomainEvent(name="attendance.token_issued", payload={"course_id": course.course_id}))
        return token.encode()

    def validate(self, token: str, *, now: Optional[datetime] = None) -> TokenValidation:
        """Decode ``token`` and report whether its course is running right now."""
        now = now or now_local()
        decoded = AttendanceToken.decode(token)
        course = self._courses.get_by_id(decoded.course_id)
        if not course:
            raise TokenInvalidError("attendance token refers to an unknown course")

        room = self._rooms.get_by_id(course.room_id)
        return TokenValidation(
            course_id=course.course_id,
            course_name=course.name,
            room_name=room.name if room else "",
            start_time=course.start_time,
            end_time=course.end_time,
            is_valid=course.start_time <= now < course.end_time,
        )
