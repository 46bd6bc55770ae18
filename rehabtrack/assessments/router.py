"""Assessment API endpoints.

Provides routes for:
- Patient assessment listing
- Assessment detail (without correct answers)
- Attempt submission and grading
- Attempt results
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from rehabtrack.access.service import ALL_CATEGORIES
from rehabtrack.auth.dependencies import PatientUser
from rehabtrack.core.errors import EngineError
from rehabtrack.core.http import handle_engine_error

from .dependencies import AssessmentGraderDep
from .schemas import (
    AssessmentDetailResponse,
    AttemptResponse,
    PatientAssessmentsResponse,
    SubmitAssessmentRequest,
)


router = APIRouter(prefix="/v1/assessments", tags=["assessments"])


@router.get(
    "",
    response_model=PatientAssessmentsResponse,
    summary="List patient assessments",
)
async def list_assessments(
    grader: AssessmentGraderDep,
    user: PatientUser,
    category: str = Query(
        ALL_CATEGORIES, description="Category UUID, or 'all' for the assigned one"
    ),
) -> PatientAssessmentsResponse:
    """List assessments of enrolled programs, split into available and completed."""
    try:
        return await grader.list_patient_assessments(user, category)
    except EngineError as e:
        raise handle_engine_error(e) from e


@router.get(
    "/attempts/{attempt_id}",
    response_model=AttemptResponse,
    summary="Get attempt result",
)
async def get_attempt(
    attempt_id: UUID,
    grader: AssessmentGraderDep,
    user: PatientUser,
) -> AttemptResponse:
    """Get one of the patient's own attempts with its responses."""
    try:
        attempt = await grader.get_attempt(user, attempt_id)
        return AttemptResponse.from_entity(attempt)
    except EngineError as e:
        raise handle_engine_error(e) from e


@router.get(
    "/{assessment_id}",
    response_model=AssessmentDetailResponse,
    summary="Get assessment",
)
async def get_assessment(
    assessment_id: UUID,
    grader: AssessmentGraderDep,
    user: PatientUser,
) -> AssessmentDetailResponse:
    """Get an assessment with its questions (correct answers hidden)."""
    try:
        return await grader.get_assessment(user, assessment_id)
    except EngineError as e:
        raise handle_engine_error(e) from e


@router.post(
    "/{assessment_id}/attempts",
    response_model=AttemptResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit assessment attempt",
)
async def submit_attempt(
    assessment_id: UUID,
    data: SubmitAssessmentRequest,
    grader: AssessmentGraderDep,
    user: PatientUser,
) -> AttemptResponse:
    """Submit answers and receive the graded attempt.

    Free-text answers are recorded for review and do not earn points.
    """
    try:
        attempt = await grader.grade(user, assessment_id, data.answers)
        return AttemptResponse.from_entity(attempt)
    except EngineError as e:
        raise handle_engine_error(e) from e
