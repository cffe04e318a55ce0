import threading

import pytest

from src.school_attendance.school_attendance.core.exceptions import LockTimeoutError
from src.school_attendance.school_attendance.courses.locks import InProcessRoomLocks, MySQLRoomLocks


def test_in_process_lock_times_out_while_held():
    locks = InProcessRoomLocks(timeout=0.05)
    held = threading.Event()
    release = threading.Event()

    def holder():
        with locks.hold([2]):
            held.set()
            release.wait(2)

    t = threading.Thread(target=holder)
    t.start()
    held.wait(2)
    try:
        with pytest.raises(LockTimeoutError):
            with locks.hold([2, 1]):
                pass
        # room 1 was released when acquiring room 2 failed
        with locks.hold([1]):
            pass
    finally:
        release.set()
        t.join(2)

    with locks.hold([1, 2]):
        pass


class FakeCursor:
    def __init__(self, results):
        self.results = list(results)
        self.executed = []
        self.closed = False

    def execute(self, sql, params=None):
        self.executed.append((sql, params))

    def fetchone(self):
        return self.results.pop(0) if self.results else (1,)

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.closed = False

    def cursor(self):
        return self._cursor

    def close(self):
        self.closed = True


class FakeConnFactory:
    database = "school"

    def __init__(self, results=()):
        self.cur = FakeCursor(results)
        self.conn = FakeConnection(self.cur)

    def connect(self):
        return self.conn


def test_mysql_locks_acquire_in_room_order_and_release():
    factory = FakeConnFactory()
    locks = MySQLRoomLocks(factory, timeout=3)

    with locks.hold([12, 10, 11, 10]):
        pass

    acquired = [p[0] for sql, p in factory.cur.executed if "GET_LOCK" in sql]
    released = [p[0] for sql, p in factory.cur.executed if "RELEASE_LOCK" in sql]
    assert acquired == ["school.room:10", "school.room:11", "school.room:12"]
    assert released == list(reversed(acquired))
    assert factory.conn.closed


def test_mysql_lock_timeout_releases_what_was_taken():
    factory = FakeConnFactory(results=[(1,), (0,)])
    locks = MySQLRoomLocks(factory, timeout=1)

    with pytest.raises(LockTimeoutError):
        with locks.hold([1, 2]):
            pass

    released = [p[0] for sql, p in factory.cur.executed if "RELEASE_LOCK" in sql]
    assert released == ["school.room:1"]
    assert factory.cur.closed and factory.conn.closed
