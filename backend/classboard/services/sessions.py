"""
Session Authority - Teacher authentication and token lifecycle.

Each classroom has a single token slot. Logging in or resetting the
password writes a new token into that slot, which revokes whatever token
was issued before: only one teacher session is active at a time.

Authentication failures use generic messages so callers cannot tell a
wrong password from other failure causes beyond what the status implies.
"""

from typing import Optional, Tuple

from passlib.utils import consteq
from sqlalchemy.orm import Session

from classboard.config import MIN_PASSWORD_LENGTH
from classboard.errors import (
    NotFound, BadCredentials, BadSecretAnswer, InvalidInput,
    Unauthenticated, Forbidden
)
from classboard.models.classroom import Classroom
from classboard.services.codes import generate_token
from classboard.services.credentials import hash_secret, verify_secret
from classboard.services.locking import ClassroomLocks, classroom_locks, locked_transaction
from classboard.logging_config import get_logger, log_with_context

logger = get_logger("auth")


def load_classroom(db: Session, classroom_id: str, for_update: bool = False) -> Optional[Classroom]:
    """Fetch a classroom by id, optionally locking its row (FOR UPDATE)."""
    query = db.query(Classroom).filter(Classroom.id == classroom_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


class SessionAuthority:
    """Issues, validates and rotates teacher tokens for one database session."""

    def __init__(self, db: Session, locks: Optional[ClassroomLocks] = None):
        self.db = db
        self.locks = locks if locks is not None else classroom_locks

    def login(self, classroom_id: str, password: str) -> Tuple[Classroom, str]:
        """
        Verify the teacher password and start a new session.

        Returns:
            (classroom, token) where token replaces any previous token

        Raises:
            NotFound: classroom does not exist
            BadCredentials: password does not verify
        """
        with locked_transaction(self.db, classroom_id, self.locks):
            classroom = load_classroom(self.db, classroom_id, for_update=True)
            if classroom is None:
                raise NotFound("Classroom not found.")
            if not verify_secret(password, classroom.password_hash, classroom.password_salt):
                log_with_context(logger, "WARNING", "Teacher login rejected",
                                 context={"classroom_id": classroom_id})
                raise BadCredentials()
            token = generate_token()
            classroom.teacher_token = token

        log_with_context(logger, "INFO", "Teacher logged in, previous session revoked",
                         context={"classroom_id": classroom_id})
        return classroom, token

    def authorize(self, classroom_id: str, token: Optional[str]) -> Classroom:
        """
        Check a teacher token against the classroom's active token.

        Must be called inside the caller's locked transaction; the row is
        loaded FOR UPDATE so the caller can mutate it.

        Raises:
            Unauthenticated: no token supplied
            Forbidden: token does not match, no active session, or no such classroom
        """
        if not token or not token.strip():
            raise Unauthenticated()
        classroom = load_classroom(self.db, classroom_id, for_update=True)
        if classroom is None or not classroom.teacher_token:
            raise Forbidden()
        if not consteq(classroom.teacher_token, token.strip()):
            log_with_context(logger, "WARNING", "Stale or invalid teacher token",
                             context={"classroom_id": classroom_id})
            raise Forbidden()
        return classroom

    def secret_question(self, classroom_id: str) -> str:
        classroom = load_classroom(self.db, classroom_id)
        if classroom is None or not classroom.secret_question:
            raise NotFound("Classroom not found or no security question configured.")
        return classroom.secret_question

    def reset_password(self, classroom_id: str, secret_answer: str, new_password: str) -> None:
        """
        Replace the teacher password after a correct secret answer.

        The new password is hashed with the classroom's original password
        salt, and the token slot is rotated so any open session ends.

        Raises:
            InvalidInput: new password shorter than the minimum
            NotFound: classroom does not exist
            BadSecretAnswer: answer does not verify
        """
        if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput("The new password is invalid.")

        with locked_transaction(self.db, classroom_id, self.locks):
            classroom = load_classroom(self.db, classroom_id, for_update=True)
            if classroom is None:
                raise NotFound("Classroom not found.")
            answer = (secret_answer or "").strip()
            if not verify_secret(answer, classroom.secret_answer_hash, classroom.secret_answer_salt):
                log_with_context(logger, "WARNING", "Password reset rejected",
                                 context={"classroom_id": classroom_id})
                raise BadSecretAnswer()
            classroom.password_hash = hash_secret(new_password, classroom.password_salt)
            classroom.teacher_token = generate_token()

        log_with_context(logger, "INFO", "Teacher password reset, session revoked",
                         context={"classroom_id": classroom_id})
