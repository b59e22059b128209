from __future__ import annotations

from contextlib import contextmanager
from threading import Lock, RLock
from typing import Iterator
from weakref import WeakValueDictionary


class ScheduleLockRegistry:
    """
    One re-entrant lock per schedule id; different schedules never contend.

    Locks are held weakly, so an id's lock lives only while some caller
    holds it and the registry does not grow with every schedule touched.
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: WeakValueDictionary[str, RLock] = WeakValueDictionary()

    def lock_for(self, schedule_id: str) -> RLock:
        with self._guard:
            lock = self._locks.get(schedule_id)
            if lock is None:
                lock = RLock()
                self._locks[schedule_id] = lock
            return lock

    @contextmanager
    def hold(self, schedule_id: str) -> Iterator[None]:
        lock = self.lock_for(schedule_id)
        with lock:
            yield

    def __contains__(self, schedule_id: object) -> bool:
        with self._guard:
            return schedule_id in self._locks


__all__ = ["ScheduleLockRegistry"]
