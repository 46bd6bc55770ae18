"""Category/enrollment gate.

Answers one question for every patient-facing operation: may this patient
see or act on this program, module or assessment? Access is granted by a
non-dropped enrollment in the owning program. Single-resource checks raise;
listing operations degrade to empty collections.
"""

from uuid import UUID

import structlog

from rehabtrack.auth.permissions import require_patient
from rehabtrack.auth.schemas import Principal
from rehabtrack.catalog.models import Assessment, LearningModule, Program
from rehabtrack.catalog.repository import CatalogRepository
from rehabtrack.core.errors import InvalidInputError, NotFoundError, UnauthorizedError
from rehabtrack.progress.models import Enrollment
from rehabtrack.progress.repository import ProgressRepository

from .repository import CategoryRepository


logger = structlog.get_logger(__name__)

ALL_CATEGORIES = "all"


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class NotEnrolledError(UnauthorizedError):
    """Patient has no active enrollment in the owning program."""

    def __init__(self, message: str = "Patient is not enrolled in this program"):
        super().__init__(message, "not_enrolled")


class ProgramNotFoundError(NotFoundError):
    def __init__(self, message: str = "Program not found"):
        super().__init__(message, "program_not_found")


class LearningModuleNotFoundError(NotFoundError):
    def __init__(self, message: str = "Module not found"):
        super().__init__(message, "module_not_found")


class AssessmentNotFoundError(NotFoundError):
    def __init__(self, message: str = "Assessment not found"):
        super().__init__(message, "assessment_not_found")


class InvalidCategoryError(InvalidInputError):
    def __init__(self, message: str = "Category must be a UUID or 'all'"):
        super().__init__(message, "invalid_category")


# ==============================================================================
# Access Gate
# ==============================================================================


class AccessGate:
    """Enrollment-based access checks for patients."""

    def __init__(
        self,
        catalog: CatalogRepository,
        categories: CategoryRepository,
        progress: ProgressRepository,
    ):
        self.catalog = catalog
        self.categories = categories
        self.progress = progress

    async def can_access_program(self, patient_id: UUID, program_id: UUID) -> bool:
        """Check if the patient holds a non-dropped enrollment. No side effects."""
        enrollment = await self.progress.find_active_enrollment(patient_id, program_id)
        return enrollment is not None

    async def resolve_effective_category(
        self, patient_id: UUID, category_id: UUID | str
    ) -> UUID | None:
        """Resolve ``"all"`` to the patient's assigned category.

        Any other value is used as-is after UUID validation.

        Returns:
            Category UUID, or None if the patient has no category assigned

        Raises:
            InvalidCategoryError: Value is neither "all" nor a UUID
        """
        if isinstance(category_id, UUID):
            return category_id
        if category_id == ALL_CATEGORIES:
            assignment = await self.categories.get_patient_category(patient_id)
            return assignment.category_id if assignment else None
        try:
            return UUID(category_id)
        except ValueError as e:
            raise InvalidCategoryError from e

    async def filter_programs_by_enrollment(
        self, patient_id: UUID, programs: list[Program]
    ) -> list[tuple[Program, Enrollment]]:
        """Keep programs the patient is enrolled in, paired with the enrollment."""
        if not programs:
            return []

        enrollments = await self.progress.list_patient_enrollments(patient_id)
        # Later enrollments override earlier ones for the same program
        active = {e.program_id: e for e in enrollments if e.is_active}
        return [(p, active[p.id]) for p in programs if p.id in active]

    async def get_category_programs(
        self, principal: Principal, category_id: UUID | str = ALL_CATEGORIES
    ) -> list[tuple[Program, Enrollment]]:
        """List active programs of a category the patient is enrolled in."""
        require_patient(principal)
        effective = await self.resolve_effective_category(principal.id, category_id)
        if effective is None:
            logger.info("patient_without_category", patient_id=str(principal.id))
            return []

        programs = await self.catalog.list_active_programs(effective)
        return await self.filter_programs_by_enrollment(principal.id, programs)

    async def _require_enrollment(
        self, principal: Principal, program_id: UUID | None, resource: str
    ) -> Enrollment:
        enrollment = None
        if program_id is not None:
            enrollment = await self.progress.find_active_enrollment(
                principal.id, program_id
            )
        if enrollment is None:
            logger.info(
                "access_denied",
                patient_id=str(principal.id),
                program_id=str(program_id) if program_id else None,
                resource=resource,
                reason="not_enrolled",
            )
            raise NotEnrolledError
        return enrollment

    async def require_program_access(
        self, principal: Principal, program_id: UUID
    ) -> tuple[Program, Enrollment]:
        """Get a program the patient is enrolled in.

        Raises:
            ProgramNotFoundError: Program does not exist
            NotEnrolledError: No active enrollment
        """
        require_patient(principal)
        program = await self.catalog.get_program(program_id)
        if program is None:
            raise ProgramNotFoundError
        enrollment = await self._require_enrollment(principal, program.id, "program")
        return program, enrollment

    async def require_module_access(
        self, principal: Principal, module_id: UUID
    ) -> tuple[LearningModule, Enrollment]:
        """Get a module whose program the patient is enrolled in.

        Raises:
            LearningModuleNotFoundError: Module does not exist
            NotEnrolledError: No active enrollment in the owning program
        """
        require_patient(principal)
        module = await self.catalog.get_module(module_id)
        if module is None:
            raise LearningModuleNotFoundError
        enrollment = await self._require_enrollment(principal, module.program_id, "module")
        return module, enrollment

    async def require_assessment_access(
        self, principal: Principal, assessment_id: UUID
    ) -> tuple[Assessment, Enrollment]:
        """Get an assessment whose program the patient is enrolled in.

        Raises:
            AssessmentNotFoundError: Assessment does not exist
            NotEnrolledError: No active enrollment in the owning program
        """
        require_patient(principal)
        assessment = await self.catalog.get_assessment(assessment_id)
        if assessment is None:
            raise AssessmentNotFoundError
        enrollment = await self._require_enrollment(
            principal, assessment.program_id, "assessment"
        )
        return assessment, enrollment
