"""
ScoreRecord model - one archived score snapshot.

Records are only ever inserted by the score reset; they are never updated
or deleted individually (they go away with their student).
"""

from sqlalchemy import Column, Integer, Date, ForeignKey, String, Index
from sqlalchemy.orm import relationship
from classboard.database import Base
from classboard.models.types import ScoreInteger


class ScoreRecord(Base):
    """SQLAlchemy model for the score_records table."""
    __tablename__ = "score_records"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Monotonic id, defines the order of the history")
    student_id = Column(String(32), ForeignKey("students.id", ondelete="CASCADE"), nullable=False,
                        doc="Student whose score was archived")
    date = Column(Date, nullable=False,
                  doc="Calendar date (UTC) of the archive event")
    score = Column(ScoreInteger, nullable=False,
                   doc="Live score at archive time")

    student = relationship("Student", back_populates="score_history")

    __table_args__ = (
        Index("ix_score_records_student_id", "student_id"),
    )

    def __repr__(self):
        return f"<ScoreRecord(student={self.student_id}, date={self.date}, score={self.score})>"
