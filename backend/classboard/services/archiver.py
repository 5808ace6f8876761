"""
Score History Archiver - Snapshots live scores into each student's history.

An archive event appends one ScoreRecord {date, score} per student and then
sets the live score to 0. History is append-only: earlier records are
never modified, and several resets on the same calendar date each append
their own record.
"""

from datetime import date, datetime, timezone
from typing import Optional

from classboard.models.score_record import ScoreRecord
from classboard.models.student import Student
from classboard.logging_config import get_logger, log_with_context

# Channel logger for archive operations
logger = get_logger("archive")


def utc_today() -> date:
    """Current calendar date in UTC."""
    return datetime.now(timezone.utc).date()


def archive(student: Student, as_of: date) -> ScoreRecord:
    """
    Append the student's current score to their history.

    Args:
        student: Student whose live score is snapshotted (not reset here)
        as_of: Calendar date recorded on the entry

    Returns:
        The new ScoreRecord (attached to the student, pending flush)
    """
    record = ScoreRecord(date=as_of, score=student.score)
    student.score_history.append(record)
    return record


def archive_and_reset(students, as_of: Optional[date] = None) -> int:
    """
    Archive every student's score, then zero all live scores.

    Returns:
        Number of records appended
    """
    as_of = as_of or utc_today()
    appended = 0
    for student in students:
        archive(student, as_of)
        appended += 1
    for student in students:
        student.score = 0

    log_with_context(logger, "INFO",
        "Archived {} scores for {}".format(appended, as_of.isoformat()),
        extra_data={"records": appended})
    return appended
