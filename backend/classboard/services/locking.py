"""
Per-classroom locks for read-modify-write cycles.

Every mutation of a classroom (and its students) runs while holding the
lock for that classroom id, so two requests for the same classroom are
serialized while different classrooms proceed in parallel. Scope is one
process; multi-process PostgreSQL deployments additionally rely on the
SELECT ... FOR UPDATE issued by the store.
"""

import threading
from contextlib import contextmanager
from typing import Optional


class ClassroomLocks:
    """
    Registry of one lock per classroom id.

    An entry lives only while some thread holds or waits for it; the last
    one out removes it, so ids that never name a classroom leave nothing
    behind.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # classroom id -> [lock, number of holders and waiters]
        self._locks = {}

    def _acquire_entry(self, classroom_id: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(classroom_id)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[classroom_id] = entry
            entry[1] += 1
            return entry[0]

    def _release_entry(self, classroom_id: str):
        with self._guard:
            entry = self._locks[classroom_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[classroom_id]

    @contextmanager
    def hold(self, classroom_id: str):
        lock = self._acquire_entry(classroom_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(classroom_id)

    def __len__(self):
        with self._guard:
            return len(self._locks)


# Process-wide registry shared by all request-scoped stores
classroom_locks = ClassroomLocks()


@contextmanager
def locked_transaction(db, classroom_id: str, locks: Optional[ClassroomLocks] = None):
    """
    Hold the classroom lock for a whole read-modify-write cycle.

    Commits when the block completes and rolls back (releasing any row
    locks) when it raises.
    """
    locks = locks if locks is not None else classroom_locks
    with locks.hold(classroom_id):
        try:
            yield
            db.commit()
        except Exception:
            db.rollback()
            raise
