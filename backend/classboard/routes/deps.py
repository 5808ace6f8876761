"""Shared FastAPI dependencies for the classroom routes."""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from classboard.database import get_db
from classboard.services.classroom_store import ClassroomStore


def get_store(db: Session = Depends(get_db)) -> ClassroomStore:
    """Request-scoped store over the injected database session."""
    return ClassroomStore(db)


def teacher_token(x_teacher_token: Optional[str] = Header(None)) -> Optional[str]:
    """Teacher token from the X-Teacher-Token header (None when absent)."""
    return x_teacher_token
