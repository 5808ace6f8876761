"""
Protected teacher API routes.

Every endpoint requires the X-Teacher-Token header to match the
classroom's active token. Provides endpoints for:
- Adding, scoring and removing students
- Archiving and resetting all scores
- Updating the announcement
- Deleting the classroom
"""

import time
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from classboard.services.classroom_store import ClassroomStore
from classboard.serializers import serialize_classroom, serialize_student
from classboard.routes.deps import get_store, teacher_token
from classboard.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


# ── Pydantic schemas ─────────────────────────────────────────

class ScoreUpdateRequest(BaseModel):
    """Schema for a score update. Any integer is accepted."""
    score: int = Field(..., description="New live score")


class AnnouncementRequest(BaseModel):
    """Schema for an announcement update; empty or null clears it."""
    announcement: Optional[str] = None


@router.post("/api/classrooms/{classroom_id}/students", status_code=201)
def add_student(classroom_id: str, store: ClassroomStore = Depends(get_store),
                token: Optional[str] = Depends(teacher_token)):
    """Add a student; the response carries the new access code."""
    classroom, student = store.add_student(classroom_id, token)
    return {
        "new_student": serialize_student(student),
        "classroom": serialize_classroom(classroom),
    }


@router.put("/api/classrooms/{classroom_id}/students/{student_id}/score")
def update_score(classroom_id: str, student_id: str, request: ScoreUpdateRequest,
                 store: ClassroomStore = Depends(get_store),
                 token: Optional[str] = Depends(teacher_token)):
    classroom = store.update_score(classroom_id, student_id, request.score, token)
    return serialize_classroom(classroom)


@router.delete("/api/classrooms/{classroom_id}/students/{student_id}")
def remove_student(classroom_id: str, student_id: str,
                   store: ClassroomStore = Depends(get_store),
                   token: Optional[str] = Depends(teacher_token)):
    """Remove a student permanently, history included."""
    classroom = store.remove_student(classroom_id, student_id, token)
    return serialize_classroom(classroom)


@router.post("/api/classrooms/{classroom_id}/reset-scores")
def reset_scores(classroom_id: str, store: ClassroomStore = Depends(get_store),
                 token: Optional[str] = Depends(teacher_token)):
    """Archive every student's score into their history and zero it."""
    start_time = time.time()
    classroom = store.reset_scores(classroom_id, token)
    result = serialize_classroom(classroom)

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Scores archived for {} students".format(len(result["students"])),
        context={"classroom_id": classroom_id},
        extra_data={"duration_ms": round(duration_ms, 2)})
    return result


@router.put("/api/classrooms/{classroom_id}/announcement")
def update_announcement(classroom_id: str, request: AnnouncementRequest,
                        store: ClassroomStore = Depends(get_store),
                        token: Optional[str] = Depends(teacher_token)):
    classroom = store.update_announcement(classroom_id, request.announcement, token)
    return serialize_classroom(classroom)


@router.delete("/api/classrooms/{classroom_id}")
def delete_classroom(classroom_id: str, store: ClassroomStore = Depends(get_store),
                     token: Optional[str] = Depends(teacher_token)):
    """Delete the classroom and all of its students irrecoverably."""
    store.delete(classroom_id, token)
    return {"message": "Classroom deleted successfully."}
