"""Pydantic schemas for enrollments and progress tracking.

Request and response models for:
- Program listing and module overview
- Module content and completion
- Program progress ratio
- Admin enrollment management
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from rehabtrack.catalog.content import ContentPayload
from rehabtrack.catalog.models import ContentItem, LearningModule, Program

from .models import Enrollment, EnrollmentStatus, ModuleProgress, ModuleProgressStatus


# ==============================================================================
# Enrollment Schemas
# ==============================================================================


class EnrollmentResponse(BaseModel):
    """Enrollment response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    patient_id: UUID
    program_id: UUID
    status: EnrollmentStatus
    start_date: date
    expected_end_date: date | None = None
    completed_date: date | None = None
    enrolled_by: UUID | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: Enrollment) -> "EnrollmentResponse":
        """Create response from entity."""
        return cls.model_validate(entity)


class EnrollmentListResponse(BaseModel):
    """List of patient enrollments."""

    items: list[EnrollmentResponse]
    total: int


class EnrollRequest(BaseModel):
    """Request to enroll a patient in a program."""

    patient_id: UUID = Field(..., description="Patient UUID")
    program_id: UUID = Field(..., description="Program UUID")
    start_date: date | None = Field(None, description="Defaults to today")


class AssignCategoryRequest(BaseModel):
    """Request to assign a patient to a category."""

    category_id: UUID = Field(..., description="Category UUID")


class AssignCategoryResponse(BaseModel):
    """Result of a category assignment."""

    patient_id: UUID
    category_id: UUID
    assigned_by: UUID | None = None
    assigned_at: datetime
    enrolled_programs: int = Field(description="Enrollments created by the assignment")


# ==============================================================================
# Program Schemas
# ==============================================================================


class ProgramSummary(BaseModel):
    """Program the patient is enrolled in."""

    id: UUID
    category_id: UUID | None = None
    title: str
    description: str | None = None
    duration_days: int | None = None
    enrollment: EnrollmentResponse

    @classmethod
    def from_entities(
        cls, program: Program, enrollment: Enrollment
    ) -> "ProgramSummary":
        return cls(
            id=program.id,
            category_id=program.category_id,
            title=program.title,
            description=program.description,
            duration_days=program.duration_days,
            enrollment=EnrollmentResponse.from_entity(enrollment),
        )


class ProgramListResponse(BaseModel):
    items: list[ProgramSummary]
    total: int


# ==============================================================================
# Module Progress Schemas
# ==============================================================================


class ModuleProgressResponse(BaseModel):
    """Progress row of a module."""

    model_config = ConfigDict(from_attributes=True)

    module_id: UUID
    enrollment_id: UUID
    status: ModuleProgressStatus
    started_at: datetime
    completed_at: datetime | None = None
    time_spent_seconds: int = 0

    @classmethod
    def from_entity(cls, entity: ModuleProgress) -> "ModuleProgressResponse":
        """Create response from entity."""
        return cls.model_validate(entity)


class ModuleOverview(BaseModel):
    """Module with the patient's progress and its content count."""

    id: UUID
    title: str
    description: str | None = None
    sequence_number: int
    is_required: bool
    content_count: int = 0
    progress: ModuleProgressResponse | None = Field(None, description="None = not started")

    @classmethod
    def from_entities(
        cls,
        module: LearningModule,
        progress: ModuleProgress | None,
        content_count: int,
    ) -> "ModuleOverview":
        return cls(
            id=module.id,
            title=module.title,
            description=module.description,
            sequence_number=module.sequence_number,
            is_required=module.is_required,
            content_count=content_count,
            progress=ModuleProgressResponse.from_entity(progress) if progress else None,
        )


class ProgramModulesResponse(BaseModel):
    """Modules of a program in sequence order."""

    program_id: UUID
    enrollment: EnrollmentResponse
    modules: list[ModuleOverview] = []


class ContentItemResponse(BaseModel):
    """Content item with its decoded payload."""

    id: UUID
    title: str
    content_type: str
    sequence_number: int
    payload: ContentPayload

    @classmethod
    def from_entity(cls, entity: ContentItem) -> "ContentItemResponse":
        return cls(
            id=entity.id,
            title=entity.title,
            content_type=entity.content_type,
            sequence_number=entity.sequence_number,
            payload=entity.payload,
        )


class ModuleContentResponse(BaseModel):
    """Module content view (reading it records module access)."""

    module_id: UUID
    program_id: UUID | None = None
    title: str
    progress: ModuleProgressResponse
    items: list[ContentItemResponse] = []


class ProgramProgressResponse(BaseModel):
    """Completion ratio of a program's required modules."""

    program_id: UUID
    enrollment: EnrollmentResponse
    required_total: int
    required_completed: int
    progress_percent: Decimal = Field(description="0-100 percentage")


class TimeSpentRequest(BaseModel):
    """Time spent on a module's content since the last report."""

    seconds: int = Field(..., ge=0, description="Seconds to add")

