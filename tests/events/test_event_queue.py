import logging
import threading

from src.school_attendance.school_attendance.events.audit import AUDIT_LOGGER_NAME, LoggingAuditHandler
from src.school_attendance.school_attendance.events.model import DomainEvent
from src.school_attendance.school_attendance.events.queue import EventQueue


def test_drain_delivers_in_publish_order():
    q = EventQueue(maxsize=10)
    q.publish(DomainEvent("course.created", {"course_id": 1}))
    q.publish(DomainEvent("course.deleted", {"course_id": 1}))

    seen = []
    assert q.drain(seen.append) == 2
    assert [e.name for e in seen] == ["course.created", "course.deleted"]
    assert q.pending() == 0


def test_full_queue_drops_instead_of_blocking():
    q = EventQueue(maxsize=1)

    assert q.publish(DomainEvent("a"))
    assert not q.publish(DomainEvent("b"))
    assert q.dropped == 1


def test_failing_handler_does_not_stop_delivery():
    q = EventQueue(maxsize=10)
    q.publish(DomainEvent("boom"))
    q.publish(DomainEvent("ok"))
    seen = []

    def handler(event):
        if event.name == "boom":
            raise RuntimeError("handler failed")
        seen.append(event.name)

    assert q.drain(handler) == 1
    assert seen == ["ok"]


def test_worker_thread_delivers_and_stops():
    q = EventQueue(maxsize=10)
    delivered = threading.Event()
    q.start(lambda event: delivered.set())

    q.publish(DomainEvent("presence.scanned", {"student_id": 100}))

    assert delivered.wait(2)
    q.stop(timeout=2)


def test_audit_handler_logs_event(caplog):
    with caplog.at_level(logging.INFO, logger=AUDIT_LOGGER_NAME):
        LoggingAuditHandler()(DomainEvent("course.created", {"course_id": 5}))

    record = caplog.records[-1]
    assert record.getMessage() == "course.created"
    assert record.payload == {"course_id": 5}


def test_stopped_worker_leaves_events_queued_until_restart():
    q = EventQueue(maxsize=10)
    q.start(lambda event: None)
    q.stop(timeout=2)

    q.publish(DomainEvent("course.updated"))
    assert q.pending() == 1

    delivered = threading.Event()
    q.start(lambda event: delivered.set())
    assert delivered.wait(2)
    q.stop(timeout=2)
    assert q.pending() == 0
