"""
Classroom poller - keeps a student view's copy of the classroom fresh.

While the view is active a daemon thread fetches the classroom every
`interval` seconds and replaces the local state wholesale. A failed fetch
is logged and the last known state is kept; the next tick simply tries
again (no backoff). stop() wakes the thread immediately, and an in-flight
GET is left to finish since it is idempotent.
"""

import threading
from typing import Callable, Optional

import httpx

from classboard.client.api_client import ApiError, ClassroomApiClient
from classboard.config import POLL_INTERVAL_SECONDS
from classboard.logging_config import get_logger, log_with_context

logger = get_logger("sync")


class ClassroomPoller:
    """
    Periodic refresh of one classroom.

    Args:
        api: Client used for get_classroom
        classroom_id: Classroom to follow
        interval: Seconds between fetches
        student_id: Student whose record is tracked in `student`
        on_update: Called with (classroom, student) after each successful fetch
    """

    def __init__(self, api: ClassroomApiClient, classroom_id: str,
                 interval: float = POLL_INTERVAL_SECONDS,
                 student_id: Optional[str] = None,
                 on_update: Optional[Callable[[dict, Optional[dict]], None]] = None,
                 classroom: Optional[dict] = None):
        self.api = api
        self.classroom_id = classroom_id
        self.interval = interval
        self.student_id = student_id
        self.on_update = on_update
        self.classroom = classroom
        self.student = None
        self.failures = 0
        self._stop_event = threading.Event()
        self._thread = None
        self._state_lock = threading.Lock()
        if classroom is not None:
            self.student = self._find_student(classroom)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Begin polling; the first fetch happens after one interval."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name=f"poll-{self.classroom_id}", daemon=True
        )
        self._thread.start()
        log_with_context(logger, "DEBUG", "Polling started",
                         context={"classroom_id": self.classroom_id},
                         extra_data={"interval": self.interval})

    def stop(self, timeout: Optional[float] = None):
        """Stop polling. Safe to call when not running."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def poll_once(self) -> bool:
        """
        Fetch the classroom once and replace local state.

        Returns:
            True on success, False when the fetch failed (state kept)
        """
        try:
            classroom = self.api.get_classroom(self.classroom_id)
            if not isinstance(classroom.get("students"), list):
                raise ApiError(200, "Classroom payload has no student list.")
        except (ApiError, httpx.HTTPError) as exc:
            self.failures += 1
            log_with_context(logger, "WARNING", "Polling failed: {}".format(exc),
                             context={"classroom_id": self.classroom_id},
                             extra_data={"failures": self.failures})
            return False

        with self._state_lock:
            self.classroom = classroom
            student = self._find_student(classroom)
            if student is not None:
                self.student = student

        if self.on_update is not None:
            self.on_update(self.classroom, self.student)
        return True

    def _find_student(self, classroom: dict) -> Optional[dict]:
        if self.student_id is None:
            return None
        return next((s for s in classroom.get("students", []) if s.get("id") == self.student_id), None)

    def _run(self):
        # wait() returns True as soon as stop() is called
        while not self._stop_event.wait(self.interval):
            try:
                self.poll_once()
            except Exception as exc:
                # A failing tick (e.g. in on_update) must not end polling
                log_with_context(logger, "ERROR", "Polling tick crashed: {}".format(exc),
                                 context={"classroom_id": self.classroom_id},
                                 extra_data={"error_type": type(exc).__name__})
