"""Admin API endpoints for category assignment and enrollments."""

from uuid import UUID

from fastapi import APIRouter, status

from rehabtrack.auth.dependencies import AdminUser
from rehabtrack.core.errors import EngineError
from rehabtrack.core.http import handle_engine_error

from .dependencies import EnrollmentServiceDep
from .schemas import (
    AssignCategoryRequest,
    AssignCategoryResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollRequest,
)


patients_router = APIRouter(prefix="/v1/admin/patients", tags=["admin"])
enrollments_router = APIRouter(prefix="/v1/admin/enrollments", tags=["admin"])


@patients_router.put(
    "/{patient_id}/category",
    response_model=AssignCategoryResponse,
    summary="Assign patient category",
)
async def assign_category(
    patient_id: UUID,
    data: AssignCategoryRequest,
    enrollment_service: EnrollmentServiceDep,
    admin: AdminUser,
) -> AssignCategoryResponse:
    """Assign a category and enroll the patient in its active programs."""
    try:
        assignment, enrolled = await enrollment_service.assign_category(
            admin, patient_id, data.category_id
        )
    except EngineError as e:
        raise handle_engine_error(e) from e

    return AssignCategoryResponse(
        patient_id=assignment.patient_id,
        category_id=assignment.category_id,
        assigned_by=assignment.assigned_by,
        assigned_at=assignment.assigned_at,
        enrolled_programs=enrolled,
    )


@patients_router.get(
    "/{patient_id}/enrollments",
    response_model=EnrollmentListResponse,
    summary="List patient enrollments",
)
async def list_patient_enrollments(
    patient_id: UUID,
    enrollment_service: EnrollmentServiceDep,
    admin: AdminUser,
) -> EnrollmentListResponse:
    """List the patient's non-dropped enrollments."""
    try:
        enrollments = await enrollment_service.list_patient_enrollments(
            admin, patient_id
        )
    except EngineError as e:
        raise handle_engine_error(e) from e

    items = [EnrollmentResponse.from_entity(e) for e in enrollments]
    return EnrollmentListResponse(items=items, total=len(items))


@enrollments_router.post(
    "",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll patient in program",
)
async def enroll_patient(
    data: EnrollRequest,
    enrollment_service: EnrollmentServiceDep,
    admin: AdminUser,
) -> EnrollmentResponse:
    """Enroll a patient; returns the existing enrollment if already enrolled."""
    try:
        enrollment = await enrollment_service.enroll_patient(
            admin, data.patient_id, data.program_id, data.start_date
        )
        return EnrollmentResponse.from_entity(enrollment)
    except EngineError as e:
        raise handle_engine_error(e) from e


@enrollments_router.post(
    "/{enrollment_id}/drop",
    response_model=EnrollmentResponse,
    summary="Drop enrollment",
)
async def drop_enrollment(
    enrollment_id: UUID,
    enrollment_service: EnrollmentServiceDep,
    admin: AdminUser,
) -> EnrollmentResponse:
    """Soft-remove an enrollment (status becomes dropped)."""
    try:
        enrollment = await enrollment_service.drop_enrollment(admin, enrollment_id)
        return EnrollmentResponse.from_entity(enrollment)
    except EngineError as e:
        raise handle_engine_error(e) from e
