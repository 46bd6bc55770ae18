"""FastAPI dependencies for assessments."""

from typing import Annotated

from fastapi import Depends, Request

from rehabtrack.core.errors import DependencyFailureError
from rehabtrack.core.http import handle_engine_error

from .service import AssessmentGrader


async def get_assessment_grader(request: Request) -> AssessmentGrader:
    """Get assessment grader from app state.

    Args:
        request: FastAPI request

    Returns:
        AssessmentGrader instance
    """
    app_state = request.app.state
    if not hasattr(app_state, "assessment_grader") or not app_state.assessment_grader:
        raise handle_engine_error(
            DependencyFailureError("Assessment service not available")
        )
    return app_state.assessment_grader


# Type alias for dependency injection
AssessmentGraderDep = Annotated[AssessmentGrader, Depends(get_assessment_grader)]
