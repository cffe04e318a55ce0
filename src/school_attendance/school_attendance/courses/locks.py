"""Serialisation of booking writes per room.

Conflict check and insert are separate statements, so every writer must hold
the locks of the whole contention group while doing both. Two rooms that can
conflict always appear in each other's group, so they always share a lock.
Locks are taken in ascending room id order to avoid deadlocks.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import ContextManager, Dict, Iterable, Iterator, List, Protocol

from ..core.constants import DEFAULT_ROOM_LOCK_TIMEOUT_SECONDS
from ..core.exceptions import LockTimeoutError
from ..database.connection import DatabaseConnection

logger = logging.getLogger(__name__)


def _ordered(room_ids: Iterable[int]) -> List[int]:
    return sorted({int(r) for r in room_ids})


class RoomLocks(Protocol):
    def hold(self, room_ids: Iterable[int]) -> ContextManager[None]:
        raise NotImplementedError


class InProcessRoomLocks(RoomLocks):
    """One ``threading.Lock`` per room; only protects a single process."""

    def __init__(self, timeout: float = DEFAULT_ROOM_LOCK_TIMEOUT_SECONDS):
        self._timeout = float(timeout)
        self._locks: Dict[int, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, room_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(room_id)
            if lock is None:
                lock = self._locks[room_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, room_ids: Iterable[int]) -> Iterator[None]:
        acquired: List[threading.Lock] = []
        try:
            for room_id in _ordered(room_ids):
                lock = self._lock_for(room_id)
                if not lock.acquire(timeout=self._timeout):
                    raise LockTimeoutError(f"timed out waiting for room {room_id}")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


class MySQLRoomLocks(RoomLocks):
    """Named MySQL advisory locks (``GET_LOCK``), one per room id.

    The locks live on a dedicated connection kept open for the duration of
    the block, so they are visible to every application server sharing the
    database. Repository calls inside the block use their own connections.
    """

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        timeout: float = DEFAULT_ROOM_LOCK_TIMEOUT_SECONDS,
        prefix: str | None = None,
    ):
        self._conn_factory = conn_factory
        self._timeout = float(timeout)
        self._prefix = prefix or f"{conn_factory.database}.room"

    def _name(self, room_id: int) -> str:
        # GET_LOCK names are limited to 64 characters.
        return f"{self._prefix}:{room_id}"[-64:]

    @contextmanager
    def hold(self, room_ids: Iterable[int]) -> Iterator[None]:
        conn = self._conn_factory.connect()
        cur = conn.cursor()
        acquired: List[str] = []
        try:
            for room_id in _ordered(room_ids):
                name = self._name(room_id)
                cur.execute("SELECT GET_LOCK(%s, %s)", (name, self._timeout))
                row = cur.fetchone()
                if not row or row[0] != 1:
                    raise LockTimeoutError(f"timed out waiting for room {room_id}")
                acquired.append(name)
            yield
        finally:
            try:
                for name in reversed(acquired):
                    cur.execute("SELECT RELEASE_LOCK(%s)", (name,))
                    cur.fetchone()
            finally:
                cur.close()
                # Closing the session also frees any lock left behind.
                conn.close()
