"""
Public API routes - classroom state as seen by students.

Provides endpoints for:
- Reading a classroom (polled by the student view)
- Joining a classroom with a student access code
- Choosing a display name on first login
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from classboard.services.classroom_store import ClassroomStore
from classboard.serializers import serialize_classroom, serialize_student
from classboard.routes.deps import get_store
from classboard.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


# ── Pydantic schemas ─────────────────────────────────────────

class JoinRequest(BaseModel):
    """Schema for joining a classroom as a student."""
    access_code: str = Field(..., description="4-digit student access code")


class SetNameRequest(BaseModel):
    """Schema for setting a student's display name."""
    access_code: str = Field(..., description="4-digit student access code")
    name: str = Field(..., description="Display name, at least 2 characters")


@router.get("/api/classrooms/{classroom_id}")
def get_classroom(classroom_id: str, store: ClassroomStore = Depends(get_store)):
    """Get the public state of a classroom."""
    return serialize_classroom(store.get(classroom_id))


@router.post("/api/classrooms/{classroom_id}/join")
def join_classroom(classroom_id: str, request: JoinRequest,
                   store: ClassroomStore = Depends(get_store)):
    """Resolve a student from their access code."""
    classroom, student = store.join_as_student(classroom_id, request.access_code)

    log_with_context(logger, "INFO", "Student joined classroom",
                     context={"classroom_id": classroom_id, "student_id": student.id})

    return {
        "classroom": serialize_classroom(classroom, include_question=False),
        "student": serialize_student(student),
    }


@router.post("/api/classrooms/{classroom_id}/students/name")
def set_student_name(classroom_id: str, request: SetNameRequest,
                     store: ClassroomStore = Depends(get_store)):
    """Set the student's name; a name that is already set is kept."""
    student = store.set_student_name(classroom_id, request.access_code, request.name)
    return serialize_student(student)
