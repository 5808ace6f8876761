"""
Classroom Store - Authoritative read/mutate operations on classrooms.

Every mutation follows the same cycle under the classroom's lock:
1. Load the classroom row (FOR UPDATE) and, for protected operations,
   check the teacher token through the SessionAuthority
2. Apply the change in memory
3. Commit (or roll back on any error)

The store works on an injected SQLAlchemy session and returns ORM
entities; serializers.py builds the public projections. Validation
thresholds come from config.py.
"""

import time
from datetime import date
from typing import Callable, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classboard.config import (
    MIN_PASSWORD_LENGTH, MIN_CLASSROOM_NAME_LENGTH, MIN_SECRET_QUESTION_LENGTH,
    MIN_SECRET_ANSWER_LENGTH, MIN_STUDENT_NAME_LENGTH
)
from classboard.errors import InvalidInput, NotFound, Conflict, Forbidden
from classboard.models.classroom import Classroom
from classboard.models.student import Student
from classboard.services import archiver
from classboard.services.codes import derive_classroom_id, generate_access_code, generate_id, generate_token
from classboard.services.credentials import hash_secret, new_salt
from classboard.services.locking import ClassroomLocks, classroom_locks, locked_transaction
from classboard.services.sessions import SessionAuthority, load_classroom
from classboard.logging_config import get_logger, log_with_context

# Channel logger for store operations
logger = get_logger("store")
db_logger = get_logger("db")


class ClassroomStore:
    """
    Keyed collection of Classroom aggregates backed by a database session.

    Args:
        db: SQLAlchemy session (one per request)
        locks: Lock registry, shared process-wide by default
        today: Callable returning the archive date, UTC today by default
    """

    def __init__(self, db: Session, locks: Optional[ClassroomLocks] = None,
                 today: Optional[Callable[[], date]] = None):
        self.db = db
        self.locks = locks if locks is not None else classroom_locks
        self.today = today or archiver.utc_today
        self.sessions = SessionAuthority(db, self.locks)

    # ── Public operations ─────────────────────────────────────

    def create(self, password: str, name: str, secret_question: str,
               secret_answer: str) -> Tuple[Classroom, str]:
        """
        Create a classroom and open its first teacher session.

        Raises:
            InvalidInput: a field is missing or below its minimum length
            Conflict: the derived classroom id already exists
        """
        if not password or not name or not secret_question or not secret_answer:
            raise InvalidInput("All fields are required.")
        name = name.strip()
        secret_question = secret_question.strip()
        secret_answer = secret_answer.strip()
        if (len(password) < MIN_PASSWORD_LENGTH
                or len(name) < MIN_CLASSROOM_NAME_LENGTH
                or len(secret_question) < MIN_SECRET_QUESTION_LENGTH
                or len(secret_answer) < MIN_SECRET_ANSWER_LENGTH):
            raise InvalidInput("Please respect the minimum length required for each field.")

        classroom_id = derive_classroom_id(name)

        with locked_transaction(self.db, classroom_id, self.locks):
            if load_classroom(self.db, classroom_id) is not None:
                raise Conflict()

            password_salt = new_salt()
            answer_salt = new_salt()
            token = generate_token()
            classroom = Classroom(
                id=classroom_id,
                name=name,
                password_salt=password_salt,
                password_hash=hash_secret(password, password_salt),
                teacher_token=token,
                secret_question=secret_question,
                secret_answer_salt=answer_salt,
                secret_answer_hash=hash_secret(secret_answer, answer_salt),
                announcement=None,
            )
            self.db.add(classroom)
            try:
                self.db.flush()
            except IntegrityError:
                # Another process created the same id between check and insert
                raise Conflict()

        log_with_context(logger, "INFO", "Created classroom: {}".format(classroom_id),
                         context={"classroom_id": classroom_id})
        return classroom, token

    def get(self, classroom_id: str) -> Classroom:
        """Read a classroom; serialize with serializers.serialize_classroom."""
        classroom = load_classroom(self.db, classroom_id)
        if classroom is None:
            raise NotFound("Classroom not found.")
        return classroom

    def join_as_student(self, classroom_id: str, access_code: str) -> Tuple[Classroom, Student]:
        """
        Resolve a student by access code.

        Raises:
            NotFound: classroom does not exist
            Forbidden: no student has this access code
        """
        classroom = self.get(classroom_id)
        student = classroom.find_student(access_code=(access_code or "").strip())
        if student is None:
            log_with_context(logger, "WARNING", "Join rejected: unknown access code",
                             context={"classroom_id": classroom_id})
            raise Forbidden("Invalid student code.")
        return classroom, student

    def set_student_name(self, classroom_id: str, access_code: str, name: str) -> Student:
        """
        Set a student's display name once.

        A student that already has a name is returned unchanged, whatever
        name is submitted.

        Raises:
            InvalidInput: trimmed name shorter than 2 characters
            NotFound: classroom or student does not exist
        """
        name = (name or "").strip()
        if len(name) < MIN_STUDENT_NAME_LENGTH:
            raise InvalidInput("The student name is invalid.")

        with locked_transaction(self.db, classroom_id, self.locks):
            classroom = load_classroom(self.db, classroom_id, for_update=True)
            if classroom is None:
                raise NotFound("Classroom not found.")
            student = classroom.find_student(access_code=(access_code or "").strip())
            if student is None:
                raise NotFound("Student not found.")
            if student.name is None:
                student.name = name
                log_with_context(logger, "INFO", "Student name set",
                                 context={"classroom_id": classroom_id, "student_id": student.id})
        return student

    # ── Protected operations (teacher token required) ─────────

    def add_student(self, classroom_id: str, token: Optional[str]) -> Tuple[Classroom, Student]:
        """Append a new unnamed student with a fresh access code and score 0."""
        with locked_transaction(self.db, classroom_id, self.locks):
            classroom = self.sessions.authorize(classroom_id, token)
            next_position = max((s.position for s in classroom.students), default=-1) + 1
            student = Student(
                id=generate_id("S"),
                access_code=generate_access_code(classroom.access_codes),
                name=None,
                score=0,
                position=next_position,
            )
            classroom.students.append(student)
            self.db.flush()

        log_with_context(logger, "INFO", "Student added",
                         context={"classroom_id": classroom_id, "student_id": student.id})
        return classroom, student

    def update_score(self, classroom_id: str, student_id: str, score: int,
                     token: Optional[str]) -> Classroom:
        """Store the score exactly as given (no bounds are applied)."""
        with locked_transaction(self.db, classroom_id, self.locks):
            classroom = self.sessions.authorize(classroom_id, token)
            student = classroom.find_student(student_id=student_id)
            if student is None:
                raise NotFound("Student not found.")
            student.score = int(score)

        log_with_context(db_logger, "DEBUG", "Score updated",
                         context={"classroom_id": classroom_id, "student_id": student_id},
                         extra_data={"score": int(score)})
        return classroom

    def remove_student(self, classroom_id: str, student_id: str, token: Optional[str]) -> Classroom:
        """Delete a student and its history permanently."""
        with locked_transaction(self.db, classroom_id, self.locks):
            classroom = self.sessions.authorize(classroom_id, token)
            student = classroom.find_student(student_id=student_id)
            if student is None:
                raise NotFound("Student not found.")
            classroom.students.remove(student)

        log_with_context(logger, "INFO", "Student removed",
                         context={"classroom_id": classroom_id, "student_id": student_id})
        return classroom

    def reset_scores(self, classroom_id: str, token: Optional[str]) -> Classroom:
        """Archive every live score into the history, then zero them."""
        start_time = time.time()
        with locked_transaction(self.db, classroom_id, self.locks):
            classroom = self.sessions.authorize(classroom_id, token)
            archived = archiver.archive_and_reset(classroom.students, self.today())

        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "INFO", "Scores reset for {} students".format(archived),
                         context={"classroom_id": classroom_id},
                         extra_data={"duration_ms": round(duration_ms, 2)})
        return classroom

    def update_announcement(self, classroom_id: str, announcement: Optional[str],
                            token: Optional[str]) -> Classroom:
        """Set the announcement; blank input clears it (stored as NULL)."""
        with locked_transaction(self.db, classroom_id, self.locks):
            classroom = self.sessions.authorize(classroom_id, token)
            classroom.announcement = announcement if announcement and announcement.strip() else None

        log_with_context(logger, "INFO", "Announcement updated",
                         context={"classroom_id": classroom_id},
                         extra_data={"cleared": classroom.announcement is None})
        return classroom

    def delete(self, classroom_id: str, token: Optional[str]) -> None:
        """Remove the classroom with all its students and their history."""
        with locked_transaction(self.db, classroom_id, self.locks):
            classroom = self.sessions.authorize(classroom_id, token)
            self.db.delete(classroom)

        log_with_context(logger, "INFO", "Deleted classroom: {}".format(classroom_id),
                         context={"classroom_id": classroom_id})
