"""
Teacher authentication API routes.

Provides endpoints for:
- Creating a classroom (opens the first teacher session)
- Logging in (revokes the previous session)
- Password recovery through the secret question
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from classboard.services.classroom_store import ClassroomStore
from classboard.serializers import serialize_classroom
from classboard.routes.deps import get_store

router = APIRouter()


# ── Pydantic schemas ─────────────────────────────────────────

class CreateClassroomRequest(BaseModel):
    """Schema for classroom creation."""
    password: str = Field(..., description="Teacher password, at least 4 characters")
    name: str = Field(..., description="Classroom name, at least 2 characters")
    secret_question: str = Field(..., description="Recovery question, at least 10 characters")
    secret_answer: str = Field(..., description="Recovery answer, at least 4 characters")


class LoginRequest(BaseModel):
    password: str


class ResetPasswordRequest(BaseModel):
    secret_answer: str
    new_password: str


class SessionResponse(BaseModel):
    """Classroom plus the newly issued teacher token."""
    classroom: dict
    teacher_token: str


@router.post("/api/classrooms", status_code=201, response_model=SessionResponse)
def create_classroom(request: CreateClassroomRequest, store: ClassroomStore = Depends(get_store)):
    """Create a classroom; its id is derived from the name."""
    classroom, token = store.create(
        request.password, request.name, request.secret_question, request.secret_answer
    )
    return SessionResponse(classroom=serialize_classroom(classroom), teacher_token=token)


@router.post("/api/classrooms/{classroom_id}/login", response_model=SessionResponse)
def login_teacher(classroom_id: str, request: LoginRequest,
                  store: ClassroomStore = Depends(get_store)):
    """Log the teacher in and issue a new token."""
    classroom, token = store.sessions.login(classroom_id, request.password)
    return SessionResponse(classroom=serialize_classroom(classroom), teacher_token=token)


@router.get("/api/classrooms/{classroom_id}/secret-question")
def get_secret_question(classroom_id: str, store: ClassroomStore = Depends(get_store)):
    return {"secret_question": store.sessions.secret_question(classroom_id)}


@router.post("/api/classrooms/{classroom_id}/reset-password")
def reset_password(classroom_id: str, request: ResetPasswordRequest,
                   store: ClassroomStore = Depends(get_store)):
    """Set a new password after a correct secret answer; ends the active session."""
    store.sessions.reset_password(classroom_id, request.secret_answer, request.new_password)
    return {"message": "Password reset successfully."}
