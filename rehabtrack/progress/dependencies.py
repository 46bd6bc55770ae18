"""FastAPI dependencies for progress tracking.

Provides dependency injection for:
- Access gate
- Progress service
- Admin enrollment service
"""

from typing import Annotated

from fastapi import Depends, Request

from rehabtrack.access.service import AccessGate
from rehabtrack.core.errors import DependencyFailureError
from rehabtrack.core.http import handle_engine_error

from .enrollment_service import EnrollmentService
from .service import ProgressService


def _get_state_service(request: Request, name: str, label: str):
    app_state = request.app.state
    service = getattr(app_state, name, None)
    if service is None:
        raise handle_engine_error(
            DependencyFailureError(f"{label} service not available")
        )
    return service


async def get_access_gate(request: Request) -> AccessGate:
    """Get access gate from app state."""
    return _get_state_service(request, "access_gate", "Access")


async def get_progress_service(request: Request) -> ProgressService:
    """Get progress service from app state."""
    return _get_state_service(request, "progress_service", "Progress")


async def get_enrollment_service(request: Request) -> EnrollmentService:
    """Get enrollment service from app state."""
    return _get_state_service(request, "enrollment_service", "Enrollment")


# Type aliases for dependency injection
AccessGateDep = Annotated[AccessGate, Depends(get_access_gate)]
ProgressServiceDep = Annotated[ProgressService, Depends(get_progress_service)]
EnrollmentServiceDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]
