"""
Classroom stats API route - aggregated performance view.

Returns the class mean, the per-date history timeline, the live score
distribution and the leaderboard for one classroom.
"""

from fastapi import APIRouter, Depends

from classboard.services.classroom_store import ClassroomStore
from classboard.services.stats import classroom_stats
from classboard.routes.deps import get_store

router = APIRouter()


@router.get("/api/classrooms/{classroom_id}/stats")
def get_classroom_stats(classroom_id: str, store: ClassroomStore = Depends(get_store)):
    """Get aggregated statistics for a classroom."""
    return classroom_stats(store.get(classroom_id))
