"""Enrollment and module progress tracking.

Business logic for:
- Recording module access (not started -> in progress)
- Module completion with program roll-up from required modules
- Module overview and content views
- Program progress ratio and time tracking

State machines:
    ModuleProgress: not_started -> in_progress -> completed (terminal)
    Enrollment: assigned -> in_progress -> completed; dropped only via admin
"""

from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

import structlog

from rehabtrack.access.service import AccessGate
from rehabtrack.auth.schemas import Principal
from rehabtrack.catalog.models import LearningModule
from rehabtrack.catalog.repository import CatalogRepository
from rehabtrack.core.dates import utcnow
from rehabtrack.core.errors import InvalidInputError

from .models import Enrollment, EnrollmentStatus, ModuleProgress, ModuleProgressStatus
from .repository import ProgressRepository
from .schemas import (
    ContentItemResponse,
    EnrollmentResponse,
    ModuleContentResponse,
    ModuleOverview,
    ModuleProgressResponse,
    ProgramModulesResponse,
    ProgramProgressResponse,
)


logger = structlog.get_logger(__name__)

PERCENT_QUANTUM = Decimal("0.01")


def required_module_ids(modules: list[LearningModule]) -> set[UUID]:
    return {m.id for m in modules if m.is_required}


def completed_module_ids(rows: list[ModuleProgress]) -> set[UUID]:
    return {p.module_id for p in rows if p.is_completed}


def progress_percent(done: int, required: int) -> Decimal:
    """Share of required modules completed, 0-100 (0 without required modules)."""
    if required <= 0:
        return Decimal(0)
    ratio = Decimal(100) * Decimal(done) / Decimal(required)
    return ratio.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


# ==============================================================================
# Progress Service
# ==============================================================================


class ProgressService:
    """Service for patient progress tracking."""

    def __init__(
        self,
        catalog: CatalogRepository,
        progress: ProgressRepository,
        gate: AccessGate,
    ):
        self.catalog = catalog
        self.progress = progress
        self.gate = gate

    # ==========================================================================
    # Module Access
    # ==========================================================================

    async def _touch_module(
        self, patient_id: UUID, enrollment: Enrollment, module_id: UUID
    ) -> ModuleProgress:
        """Ensure a progress row exists and start the enrollment."""
        candidate = ModuleProgress(
            patient_id=patient_id,
            enrollment_id=enrollment.id,
            module_id=module_id,
            status=ModuleProgressStatus.IN_PROGRESS.value,
            started_at=utcnow(),
        )
        created = await self.progress.create_module_progress_if_absent(candidate)

        if created:
            progress = candidate
            logger.info(
                "module_started",
                patient_id=str(patient_id),
                enrollment_id=str(enrollment.id),
                module_id=str(module_id),
            )
        else:
            progress = await self.progress.get_module_progress(
                patient_id, enrollment.id, module_id
            ) or candidate

        await self._start_enrollment(enrollment)
        return progress

    async def _start_enrollment(self, enrollment: Enrollment) -> None:
        """Move an assigned enrollment to in_progress."""
        if enrollment.status != EnrollmentStatus.ASSIGNED.value:
            return
        await self.progress.update_enrollment_status(
            enrollment, EnrollmentStatus.IN_PROGRESS.value
        )
        logger.info(
            "enrollment_started",
            enrollment_id=str(enrollment.id),
            program_id=str(enrollment.program_id),
        )

    async def record_module_access(
        self, principal: Principal, module_id: UUID
    ) -> ModuleProgress:
        """Record that the patient opened a module.

        Idempotent: the first call creates the progress row and stamps
        ``started_at``; later calls return the existing row unchanged.

        Raises:
            LearningModuleNotFoundError: Module does not exist
            NotEnrolledError: No active enrollment in the module's program
        """
        _, enrollment = await self.gate.require_module_access(principal, module_id)
        return await self._touch_module(principal.id, enrollment, module_id)

    # ==========================================================================
    # Completion
    # ==========================================================================

    async def complete_module(
        self, principal: Principal, module_id: UUID
    ) -> ModuleProgress:
        """Mark a module completed and re-evaluate program completion.

        ``completed_at`` is stamped on the first completion only. The
        enrollment completes once every required module is completed,
        regardless of the order they were completed in.

        Raises:
            LearningModuleNotFoundError: Module does not exist
            NotEnrolledError: No active enrollment in the module's program
        """
        module, enrollment = await self.gate.require_module_access(
            principal, module_id
        )

        progress = await self.progress.get_module_progress(
            principal.id, enrollment.id, module_id
        )
        if progress is None or not progress.is_completed:
            now = utcnow()
            if progress is None:
                progress = ModuleProgress(
                    patient_id=principal.id,
                    enrollment_id=enrollment.id,
                    module_id=module_id,
                    started_at=now,
                )
            progress.status = ModuleProgressStatus.COMPLETED.value
            progress.completed_at = progress.completed_at or now
            await self.progress.save_module_progress(progress)
            logger.info(
                "module_completed",
                patient_id=str(principal.id),
                enrollment_id=str(enrollment.id),
                module_id=str(module_id),
                is_required=module.is_required,
            )

        await self._evaluate_enrollment(principal.id, enrollment, module.program_id)
        return progress

    async def _evaluate_enrollment(
        self, patient_id: UUID, enrollment: Enrollment, program_id: UUID | None
    ) -> None:
        """Recompute program completion from scratch.

        Only ever moves the enrollment to completed; starting it is left to
        module access.
        """
        if enrollment.is_completed or not enrollment.is_active:
            return

        modules = await self.catalog.list_modules(program_id) if program_id else []
        required = required_module_ids(modules)
        rows = await self.progress.list_module_progress(patient_id, enrollment.id)
        done = completed_module_ids(rows) & required

        if required and done == required:
            await self.progress.update_enrollment_status(
                enrollment,
                EnrollmentStatus.COMPLETED.value,
                completed_date=utcnow().date(),
            )
            logger.info(
                "enrollment_completed",
                patient_id=str(patient_id),
                enrollment_id=str(enrollment.id),
                program_id=str(enrollment.program_id),
                required_modules=len(required),
            )

    # ==========================================================================
    # Views
    # ==========================================================================

    async def get_program_modules(
        self, principal: Principal, program_id: UUID
    ) -> ProgramModulesResponse:
        """Modules of a program with the patient's progress and content counts.

        Read-only: no progress rows are created.

        Raises:
            ProgramNotFoundError: Program does not exist
            NotEnrolledError: No active enrollment
        """
        program, enrollment = await self.gate.require_program_access(
            principal, program_id
        )

        modules = await self.catalog.list_modules(program.id)
        rows = await self.progress.list_module_progress(principal.id, enrollment.id)
        by_module = {p.module_id: p for p in rows}
        counts = await self.catalog.count_content_items([m.id for m in modules])

        return ProgramModulesResponse(
            program_id=program.id,
            enrollment=EnrollmentResponse.from_entity(enrollment),
            modules=[
                ModuleOverview.from_entities(
                    module, by_module.get(module.id), counts.get(module.id, 0)
                )
                for module in modules
            ],
        )

    async def get_module_content(
        self, principal: Principal, module_id: UUID
    ) -> ModuleContentResponse:
        """Content items of a module in sequence order.

        Reading content records module access.

        Raises:
            LearningModuleNotFoundError: Module does not exist
            NotEnrolledError: No active enrollment in the module's program
            ContentDecodeError: Stored content is malformed
        """
        module, enrollment = await self.gate.require_module_access(
            principal, module_id
        )
        progress = await self._touch_module(principal.id, enrollment, module.id)
        items = await self.catalog.list_content_items(module.id)

        return ModuleContentResponse(
            module_id=module.id,
            program_id=module.program_id,
            title=module.title,
            progress=ModuleProgressResponse.from_entity(progress),
            items=[ContentItemResponse.from_entity(item) for item in items],
        )

    async def get_program_progress(
        self, principal: Principal, program_id: UUID
    ) -> ProgramProgressResponse:
        """Completion ratio of the program's required modules.

        Raises:
            ProgramNotFoundError: Program does not exist
            NotEnrolledError: No active enrollment
        """
        program, enrollment = await self.gate.require_program_access(
            principal, program_id
        )

        modules = await self.catalog.list_modules(program.id)
        required = required_module_ids(modules)
        rows = await self.progress.list_module_progress(principal.id, enrollment.id)
        done = completed_module_ids(rows) & required

        return ProgramProgressResponse(
            program_id=program.id,
            enrollment=EnrollmentResponse.from_entity(enrollment),
            required_total=len(required),
            required_completed=len(done),
            progress_percent=progress_percent(len(done), len(required)),
        )

    # ==========================================================================
    # Time Tracking
    # ==========================================================================

    async def record_time_spent(
        self, principal: Principal, module_id: UUID, seconds: int
    ) -> ModuleProgress:
        """Add time spent on a module's content.

        Raises:
            InvalidInputError: Negative duration
            LearningModuleNotFoundError: Module does not exist
            NotEnrolledError: No active enrollment in the module's program
        """
        if seconds < 0:
            raise InvalidInputError("Time spent cannot be negative")

        _, enrollment = await self.gate.require_module_access(principal, module_id)
        progress = await self._touch_module(principal.id, enrollment, module_id)
        if seconds == 0:
            return progress

        progress.time_spent_seconds += seconds
        return await self.progress.save_module_progress(progress)
