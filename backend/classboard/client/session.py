"""
Client session persistence and restore.

A client remembers which classroom it was in and either a student access
code or a teacher token. On start-up restore_session() turns those saved
values back into the view to show, refetching the classroom first.
"""

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import httpx

from classboard.client.api_client import ApiError, ClassroomApiClient
from classboard.logging_config import get_logger, log_with_context

logger = get_logger("sync")

SESSION_KEYS = ("class_code", "student_access_code", "teacher_token")


class View(str, Enum):
    LOGIN = "login"
    TEACHER = "teacher"
    STUDENT = "student"
    SET_USERNAME = "set_username"


class SessionStore:
    """
    Saved session values, in memory or backed by a JSON file.

    Only the keys in SESSION_KEYS are kept.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self._values = {}
        if self.path and self.path.exists():
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            self._values = {k: v for k, v in data.items() if k in SESSION_KEYS and v}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str):
        if key not in SESSION_KEYS:
            raise KeyError(key)
        self._values[key] = value
        self._save()

    def clear(self):
        self._values = {}
        self._save()

    def remember_teacher(self, classroom_id: str, token: str):
        self._values = {"class_code": classroom_id, "teacher_token": token}
        self._save()

    def remember_student(self, classroom_id: str, access_code: str):
        self._values = {"class_code": classroom_id, "student_access_code": access_code}
        self._save()

    def _save(self):
        if self.path:
            self.path.write_text(json.dumps(self._values), encoding="utf-8")


@dataclass
class RestoredSession:
    view: View
    classroom: Optional[dict] = None
    student: Optional[dict] = None
    teacher_token: Optional[str] = None


def restore_session(api: ClassroomApiClient, store: SessionStore) -> RestoredSession:
    """
    Rebuild the client state from saved session values.

    - No saved classroom: LOGIN
    - Saved teacher token: TEACHER (the token is validated lazily by the
      first protected call)
    - Saved access code of a named student: STUDENT, unnamed: SET_USERNAME
    - Unknown access code or classroom fetch failure: session cleared, LOGIN
    """
    class_code = store.get("class_code")
    if not class_code:
        return RestoredSession(View.LOGIN)

    try:
        classroom = api.get_classroom(class_code)
    except (ApiError, httpx.HTTPError) as exc:
        log_with_context(logger, "WARNING", "Session could not be restored: {}".format(exc),
                         context={"classroom_id": class_code})
        store.clear()
        return RestoredSession(View.LOGIN)

    token = store.get("teacher_token")
    if token:
        return RestoredSession(View.TEACHER, classroom=classroom, teacher_token=token)

    access_code = store.get("student_access_code")
    if not access_code:
        return RestoredSession(View.LOGIN, classroom=classroom)

    student = next((s for s in classroom["students"] if s["access_code"] == access_code), None)
    if student is None:
        store.clear()
        return RestoredSession(View.LOGIN)

    view = View.STUDENT if student["name"] else View.SET_USERNAME
    return RestoredSession(view, classroom=classroom, student=student)
