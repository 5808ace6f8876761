from classboard.models.classroom import Classroom
from classboard.models.student import Student
from classboard.models.score_record import ScoreRecord

__all__ = ["Classroom", "Student", "ScoreRecord"]
