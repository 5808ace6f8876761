"""
Classroom model - the aggregate root of the scoreboard.

A classroom groups a single teacher session, its students and a shared
announcement. Credential fields (hashes, salts, token) stay server-side;
only serializers.py decides what leaves the process.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, String
from sqlalchemy.orm import relationship
from classboard.database import Base


class Classroom(Base):
    """
    SQLAlchemy model for the classrooms table.

    The primary key is the human-derived slug (e.g. CLS-MATH-4B) and is
    never changed after creation. teacher_token is a single slot: issuing
    a new token overwrites, and so revokes, the previous one.
    """
    __tablename__ = "classrooms"

    id = Column(String(32), primary_key=True,
                doc="Slug derived from the classroom name, prefixed with CLS-")
    name = Column(Text, nullable=False,
                  doc="Classroom display name as entered by the teacher (trimmed)")
    password_hash = Column(Text, nullable=False,
                           doc="PBKDF2-SHA512 digest of the teacher password")
    password_salt = Column(String(64), nullable=False,
                           doc="Hex salt for the password, reused on password reset")
    teacher_token = Column(String(64), nullable=True,
                           doc="Currently valid teacher token, NULL when no session is active")
    secret_question = Column(Text, nullable=False,
                             doc="Password recovery question shown to the teacher")
    secret_answer_hash = Column(Text, nullable=False,
                                doc="PBKDF2-SHA512 digest of the trimmed secret answer")
    secret_answer_salt = Column(String(64), nullable=False,
                                doc="Hex salt for the secret answer")
    announcement = Column(Text, nullable=True,
                          doc="Announcement shown to students, NULL when cleared")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        doc="Timestamp when the classroom was created")

    # Insertion order is display order
    students = relationship(
        "Student",
        back_populates="classroom",
        order_by="Student.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def access_codes(self):
        """Access codes already taken in this classroom."""
        return {s.access_code for s in self.students}

    def find_student(self, student_id=None, access_code=None):
        """Return the student matching the id or access code, or None."""
        for student in self.students:
            if student_id is not None and student.id == student_id:
                return student
            if access_code is not None and student.access_code == access_code:
                return student
        return None

    def __repr__(self):
        return f"<Classroom(id={self.id}, name='{self.name}', students={len(self.students)})>"
