"""
Student model - a scored participant owned by exactly one classroom.

Students are created by the teacher with only an access code; the student
picks a display name on first login and it cannot be changed afterwards.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Text, Integer, DateTime, ForeignKey, String, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from classboard.database import Base
from classboard.models.types import ScoreInteger


class Student(Base):
    """
    SQLAlchemy model for the students table.

    access_code is unique per classroom only; the same code may exist in
    another classroom. Deleting the classroom deletes its students.
    """
    __tablename__ = "students"

    id = Column(String(32), primary_key=True,
                doc="System-wide student identifier (S-XXXXXXXX)")
    classroom_id = Column(String(32), ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False,
                          doc="Owning classroom")
    access_code = Column(String(4), nullable=False,
                         doc="4-digit numeral the student uses to join")
    name = Column(Text, nullable=True,
                  doc="Display name, NULL until the first login sets it")
    score = Column(ScoreInteger, nullable=False, default=0,
                   doc="Live score, any integer, stored exactly as given by the teacher")
    position = Column(Integer, nullable=False, default=0,
                      doc="Insertion order within the classroom")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        doc="Timestamp when the teacher added the student")

    classroom = relationship("Classroom", back_populates="students")
    # Append-only; autoincrement id gives archive order
    score_history = relationship(
        "ScoreRecord",
        back_populates="student",
        order_by="ScoreRecord.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("classroom_id", "access_code", name="uq_students_classroom_access_code"),
        Index("ix_students_classroom_id", "classroom_id"),
    )

    def __repr__(self):
        return f"<Student(id={self.id}, classroom={self.classroom_id}, code='{self.access_code}', score={self.score})>"
