"""Admin enrollment management.

Business logic for:
- Category assignment with automatic enrollment in the category's programs
- Single-program enrollment (idempotent)
- Dropping enrollments (soft removal)
- Listing a patient's enrollments
"""

from datetime import date, timedelta
from uuid import UUID

import structlog

from rehabtrack.access.models import PatientCategory
from rehabtrack.access.repository import CategoryRepository
from rehabtrack.access.service import ProgramNotFoundError
from rehabtrack.auth.permissions import require_admin
from rehabtrack.auth.repository import UserRepository
from rehabtrack.auth.schemas import Principal
from rehabtrack.catalog.models import Program
from rehabtrack.catalog.repository import CatalogRepository
from rehabtrack.core.dates import utcnow
from rehabtrack.core.errors import NotFoundError

from .models import Enrollment, EnrollmentStatus
from .repository import ProgressRepository


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class PatientNotFoundError(NotFoundError):
    def __init__(self, message: str = "Patient not found"):
        super().__init__(message, "patient_not_found")


class CategoryNotFoundError(NotFoundError):
    def __init__(self, message: str = "Category not found"):
        super().__init__(message, "category_not_found")


class EnrollmentNotFoundError(NotFoundError):
    def __init__(self, message: str = "Enrollment not found"):
        super().__init__(message, "enrollment_not_found")


def expected_end_date(start: date, program: Program) -> date | None:
    """Planned end of treatment, None for open-ended programs."""
    if program.duration_days is None:
        return None
    return start + timedelta(days=program.duration_days)


# ==============================================================================
# Enrollment Service
# ==============================================================================


class EnrollmentService:
    """Admin operations on category assignments and enrollments."""

    def __init__(
        self,
        users: UserRepository,
        catalog: CatalogRepository,
        categories: CategoryRepository,
        progress: ProgressRepository,
    ):
        self.users = users
        self.catalog = catalog
        self.categories = categories
        self.progress = progress

    async def _require_patient_account(self, patient_id: UUID) -> None:
        user = await self.users.get_user(patient_id)
        if user is None or not user.is_patient:
            raise PatientNotFoundError

    async def _create_enrollment(
        self,
        admin: Principal,
        patient_id: UUID,
        program: Program,
        status: EnrollmentStatus,
        start_date: date | None = None,
    ) -> Enrollment:
        start = start_date or utcnow().date()
        enrollment = Enrollment(
            patient_id=patient_id,
            program_id=program.id,
            status=status.value,
            start_date=start,
            expected_end_date=expected_end_date(start, program),
            enrolled_by=admin.id,
        )
        await self.progress.create_enrollment(enrollment)
        logger.info(
            "enrollment_created",
            enrollment_id=str(enrollment.id),
            patient_id=str(patient_id),
            program_id=str(program.id),
            status=enrollment.status,
            enrolled_by=str(admin.id),
        )
        return enrollment

    async def assign_category(
        self, admin: Principal, patient_id: UUID, category_id: UUID
    ) -> tuple[PatientCategory, int]:
        """Assign a patient to a category and enroll them in its programs.

        Replaces any previous assignment. Active programs of the category
        without a non-dropped enrollment get a new in_progress enrollment;
        existing enrollments are left untouched.

        Returns:
            Tuple of (assignment, number of enrollments created)

        Raises:
            UnauthorizedError: Caller is not an admin
            PatientNotFoundError: No active patient account
            CategoryNotFoundError: Category does not exist
        """
        require_admin(admin)
        await self._require_patient_account(patient_id)
        category = await self.catalog.get_category(category_id)
        if category is None:
            raise CategoryNotFoundError

        assignment = await self.categories.save_patient_category(
            PatientCategory(
                patient_id=patient_id,
                category_id=category.id,
                assigned_by=admin.id,
            )
        )

        enrolled = 0
        for program in await self.catalog.list_active_programs(category.id):
            existing = await self.progress.find_active_enrollment(patient_id, program.id)
            if existing is not None:
                continue
            await self._create_enrollment(
                admin, patient_id, program, EnrollmentStatus.IN_PROGRESS
            )
            enrolled += 1

        logger.info(
            "category_assigned",
            patient_id=str(patient_id),
            category_id=str(category.id),
            assigned_by=str(admin.id),
            enrolled_programs=enrolled,
        )
        return assignment, enrolled

    async def enroll_patient(
        self,
        admin: Principal,
        patient_id: UUID,
        program_id: UUID,
        start_date: date | None = None,
    ) -> Enrollment:
        """Enroll a patient in one program.

        Idempotent: returns the existing non-dropped enrollment if any.

        Raises:
            UnauthorizedError: Caller is not an admin
            PatientNotFoundError: No active patient account
            ProgramNotFoundError: Program does not exist
        """
        require_admin(admin)
        await self._require_patient_account(patient_id)
        program = await self.catalog.get_program(program_id)
        if program is None:
            raise ProgramNotFoundError

        existing = await self.progress.find_active_enrollment(patient_id, program.id)
        if existing is not None:
            return existing

        return await self._create_enrollment(
            admin, patient_id, program, EnrollmentStatus.ASSIGNED, start_date
        )

    async def drop_enrollment(self, admin: Principal, enrollment_id: UUID) -> Enrollment:
        """Soft-remove an enrollment. Dropping twice is a no-op.

        Raises:
            UnauthorizedError: Caller is not an admin
            EnrollmentNotFoundError: Enrollment does not exist
        """
        require_admin(admin)
        enrollment = await self.progress.get_enrollment(enrollment_id)
        if enrollment is None:
            raise EnrollmentNotFoundError
        if not enrollment.is_active:
            return enrollment

        await self.progress.update_enrollment_status(
            enrollment, EnrollmentStatus.DROPPED.value, enrollment.completed_date
        )
        logger.info(
            "enrollment_dropped",
            enrollment_id=str(enrollment.id),
            patient_id=str(enrollment.patient_id),
            dropped_by=str(admin.id),
        )
        return enrollment

    async def list_patient_enrollments(
        self, admin: Principal, patient_id: UUID
    ) -> list[Enrollment]:
        """Non-dropped enrollments of a patient, oldest first.

        Raises:
            UnauthorizedError: Caller is not an admin
        """
        require_admin(admin)
        enrollments = await self.progress.list_patient_enrollments(patient_id)
        return [e for e in enrollments if e.is_active]
