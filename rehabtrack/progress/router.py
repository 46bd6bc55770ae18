"""Patient program and progress API endpoints.

Provides routes for:
- Programs the patient is enrolled in (by category)
- Module overview, content and completion
- Program progress ratio
- Time spent tracking
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from rehabtrack.access.service import ALL_CATEGORIES
from rehabtrack.auth.dependencies import PatientUser
from rehabtrack.core.errors import EngineError
from rehabtrack.core.http import handle_engine_error

from .dependencies import AccessGateDep, ProgressServiceDep
from .schemas import (
    ModuleContentResponse,
    ModuleProgressResponse,
    ProgramListResponse,
    ProgramModulesResponse,
    ProgramProgressResponse,
    ProgramSummary,
    TimeSpentRequest,
)


programs_router = APIRouter(prefix="/v1/programs", tags=["programs"])
modules_router = APIRouter(prefix="/v1/modules", tags=["modules"])
router = APIRouter(prefix="/v1/progress", tags=["progress"])


# ==============================================================================
# Program Endpoints
# ==============================================================================


@programs_router.get(
    "",
    response_model=ProgramListResponse,
    summary="List enrolled programs",
)
async def list_programs(
    gate: AccessGateDep,
    user: PatientUser,
    category: str = Query(
        ALL_CATEGORIES, description="Category UUID, or 'all' for the assigned one"
    ),
) -> ProgramListResponse:
    """List active programs of a category the patient is enrolled in.

    Patients without a category get an empty list.
    """
    try:
        pairs = await gate.get_category_programs(user, category)
    except EngineError as e:
        raise handle_engine_error(e) from e

    items = [ProgramSummary.from_entities(p, e) for p, e in pairs]
    return ProgramListResponse(items=items, total=len(items))


@programs_router.get(
    "/{program_id}/modules",
    response_model=ProgramModulesResponse,
    summary="Get program modules with progress",
)
async def get_program_modules(
    program_id: UUID,
    progress_service: ProgressServiceDep,
    user: PatientUser,
) -> ProgramModulesResponse:
    """Get the program's modules in sequence order with progress and content counts."""
    try:
        return await progress_service.get_program_modules(user, program_id)
    except EngineError as e:
        raise handle_engine_error(e) from e


# ==============================================================================
# Module Endpoints
# ==============================================================================


@modules_router.get(
    "/{module_id}/content",
    response_model=ModuleContentResponse,
    summary="Get module content",
)
async def get_module_content(
    module_id: UUID,
    progress_service: ProgressServiceDep,
    user: PatientUser,
) -> ModuleContentResponse:
    """Get the module's content items. Opening a module records access."""
    try:
        return await progress_service.get_module_content(user, module_id)
    except EngineError as e:
        raise handle_engine_error(e) from e


@modules_router.post(
    "/{module_id}/access",
    response_model=ModuleProgressResponse,
    status_code=status.HTTP_200_OK,
    summary="Record module access",
)
async def record_module_access(
    module_id: UUID,
    progress_service: ProgressServiceDep,
    user: PatientUser,
) -> ModuleProgressResponse:
    """Record that the patient started a module (idempotent)."""
    try:
        progress = await progress_service.record_module_access(user, module_id)
        return ModuleProgressResponse.from_entity(progress)
    except EngineError as e:
        raise handle_engine_error(e) from e


@modules_router.post(
    "/{module_id}/complete",
    response_model=ModuleProgressResponse,
    status_code=status.HTTP_200_OK,
    summary="Mark module as complete",
)
async def complete_module(
    module_id: UUID,
    progress_service: ProgressServiceDep,
    user: PatientUser,
) -> ModuleProgressResponse:
    """Mark a module complete; completes the program once all required modules are."""
    try:
        progress = await progress_service.complete_module(user, module_id)
        return ModuleProgressResponse.from_entity(progress)
    except EngineError as e:
        raise handle_engine_error(e) from e


@modules_router.post(
    "/{module_id}/time",
    response_model=ModuleProgressResponse,
    status_code=status.HTTP_200_OK,
    summary="Add time spent on module",
)
async def record_time_spent(
    module_id: UUID,
    data: TimeSpentRequest,
    progress_service: ProgressServiceDep,
    user: PatientUser,
) -> ModuleProgressResponse:
    """Add time spent on the module's content."""
    try:
        progress = await progress_service.record_time_spent(
            user, module_id, data.seconds
        )
        return ModuleProgressResponse.from_entity(progress)
    except EngineError as e:
        raise handle_engine_error(e) from e


# ==============================================================================
# Progress Endpoints
# ==============================================================================


@router.get(
    "/programs/{program_id}",
    response_model=ProgramProgressResponse,
    summary="Get program progress",
)
async def get_program_progress(
    program_id: UUID,
    progress_service: ProgressServiceDep,
    user: PatientUser,
) -> ProgramProgressResponse:
    """Get the share of required modules the patient has completed."""
    try:
        return await progress_service.get_program_progress(user, program_id)
    except EngineError as e:
        raise handle_engine_error(e) from e
