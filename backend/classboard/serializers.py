"""
Public projections of classrooms and students for API responses.

This is the only place ORM entities become JSON-ready dicts. Password and
secret-answer hashes, salts and the teacher token are never included.
"""

from classboard.models.classroom import Classroom
from classboard.models.student import Student


def serialize_student(student: Student) -> dict:
    """Serialize a Student with its archived history."""
    return {
        "id": student.id,
        "access_code": student.access_code,
        "name": student.name,
        "score": student.score,
        "score_history": [
            {"date": record.date.isoformat(), "score": record.score}
            for record in student.score_history
        ],
    }


def serialize_classroom(classroom: Classroom, include_question: bool = True) -> dict:
    """
    Serialize a Classroom with its students in display order.

    The secret question is public (it is shown on the recovery screen), so
    it is included unless the caller opts out.
    """
    result = {
        "id": classroom.id,
        "name": classroom.name,
        "students": [serialize_student(s) for s in classroom.students],
        "announcement": classroom.announcement,
    }
    if include_question:
        result["secret_question"] = classroom.secret_question
    return result
