"""FastAPI dependencies for mood tracking."""

from typing import Annotated

from fastapi import Depends, Request

from rehabtrack.core.errors import DependencyFailureError
from rehabtrack.core.http import handle_engine_error

from .service import MoodService


async def get_mood_service(request: Request) -> MoodService:
    """Get mood service from app state."""
    service = getattr(request.app.state, "mood_service", None)
    if service is None:
        raise handle_engine_error(DependencyFailureError("Mood service not available"))
    return service


MoodServiceDep = Annotated[MoodService, Depends(get_mood_service)]
