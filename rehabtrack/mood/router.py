"""Mood tracking API endpoints."""

from fastapi import APIRouter, Query, status

from rehabtrack.auth.dependencies import PatientUser
from rehabtrack.core.errors import EngineError
from rehabtrack.core.http import handle_engine_error

from .dependencies import MoodServiceDep
from .schemas import MoodEntryCreate, MoodEntryListResponse, MoodEntryResponse
from .service import DEFAULT_ENTRY_LIMIT, MAX_ENTRY_LIMIT


router = APIRouter(prefix="/v1/mood", tags=["mood"])


@router.post(
    "",
    response_model=MoodEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record mood entry",
)
async def submit_mood_entry(
    data: MoodEntryCreate,
    service: MoodServiceDep,
    user: PatientUser,
) -> MoodEntryResponse:
    """Record how the patient feels, scored 1 to 10."""
    try:
        entry = await service.submit_entry(user, data)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return MoodEntryResponse.from_entity(entry)


@router.get(
    "",
    response_model=MoodEntryListResponse,
    summary="List mood entries",
)
async def list_mood_entries(
    service: MoodServiceDep,
    user: PatientUser,
    limit: int = Query(
        default=DEFAULT_ENTRY_LIMIT, ge=1, le=MAX_ENTRY_LIMIT, description="Max entries"
    ),
) -> MoodEntryListResponse:
    """List the patient's latest mood entries, newest first."""
    try:
        entries = await service.list_entries(user, limit)
    except EngineError as e:
        raise handle_engine_error(e) from e
    items = [MoodEntryResponse.from_entity(e) for e in entries]
    return MoodEntryListResponse(items=items, total=len(items))
