"""Database models for enrollments and module progress.

Cassandra table definitions for:
- Enrollments: one row per enrollment, never deleted (``dropped`` is soft removal)
- Enrollments by patient: lookup for the gate and the patient dashboard
- Module progress: per (patient, enrollment, module), absent row = not started
"""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from rehabtrack.core.dates import ensure_utc_aware, to_date, utcnow


class EnrollmentStatus(str, Enum):
    """Enrollment lifecycle status."""

    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DROPPED = "dropped"


class ModuleProgressStatus(str, Enum):
    """Module progress status (not started = no row)."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

ENROLLMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments (
    id UUID PRIMARY KEY,
    patient_id UUID,
    program_id UUID,
    status TEXT,
    start_date DATE,
    expected_end_date DATE,
    completed_date DATE,
    enrolled_by UUID,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# Lookup by patient (optionally narrowed to one program)
ENROLLMENTS_BY_PATIENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments_by_patient (
    patient_id UUID,
    program_id UUID,
    enrollment_id UUID,
    PRIMARY KEY (patient_id, program_id, enrollment_id)
)
"""

MODULE_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.module_progress (
    patient_id UUID,
    enrollment_id UUID,
    module_id UUID,
    status TEXT,
    started_at TIMESTAMP,
    completed_at TIMESTAMP,
    time_spent_seconds INT,
    updated_at TIMESTAMP,
    PRIMARY KEY ((patient_id, enrollment_id), module_id)
)
"""

PROGRESS_TABLES_CQL = [
    ENROLLMENTS_TABLE_CQL,
    ENROLLMENTS_BY_PATIENT_TABLE_CQL,
    MODULE_PROGRESS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Enrollment:
    """Patient enrollment in a treatment program.

    Attributes:
        id: Enrollment UUID
        patient_id: Enrolled patient
        program_id: Program enrolled in
        status: assigned, in_progress, completed or dropped
        start_date: Treatment start date
        expected_end_date: Planned end date, None if the program is open-ended
        completed_date: Set once all required modules are completed
        enrolled_by: Admin who created the enrollment, None if unknown
        created_at: Creation timestamp
        updated_at: Last status change
    """

    def __init__(
        self,
        patient_id: UUID,
        program_id: UUID,
        id: UUID | None = None,
        status: str = EnrollmentStatus.ASSIGNED.value,
        start_date: date | None = None,
        expected_end_date: date | None = None,
        completed_date: date | None = None,
        enrolled_by: UUID | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.patient_id = patient_id
        self.program_id = program_id
        self.status = status
        self.created_at = ensure_utc_aware(created_at) or utcnow()
        self.start_date = start_date or self.created_at.date()
        self.expected_end_date = expected_end_date
        self.completed_date = completed_date
        self.enrolled_by = enrolled_by
        self.updated_at = ensure_utc_aware(updated_at)

    @property
    def is_active(self) -> bool:
        """Check if enrollment grants access (anything but dropped)."""
        return self.status != EnrollmentStatus.DROPPED.value

    @property
    def is_completed(self) -> bool:
        return self.status == EnrollmentStatus.COMPLETED.value

    @classmethod
    def from_row(cls, row: Any) -> "Enrollment":
        """Create Enrollment instance from Cassandra row."""
        return cls(
            id=row.id,
            patient_id=row.patient_id,
            program_id=row.program_id,
            status=row.status or EnrollmentStatus.ASSIGNED.value,
            start_date=to_date(row.start_date),
            expected_end_date=to_date(row.expected_end_date),
            completed_date=to_date(row.completed_date),
            enrolled_by=row.enrolled_by,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "program_id": self.program_id,
            "status": self.status,
            "start_date": self.start_date,
            "expected_end_date": self.expected_end_date,
            "completed_date": self.completed_date,
            "enrolled_by": self.enrolled_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return (
            f"<Enrollment patient={self.patient_id} program={self.program_id} "
            f"{self.status}>"
        )


class ModuleProgress:
    """Progress of a patient through one module of an enrollment.

    Attributes:
        patient_id: Patient UUID
        enrollment_id: Enrollment the progress belongs to
        module_id: Module UUID
        status: in_progress or completed
        started_at: First content access, never overwritten
        completed_at: First completion, never overwritten
        time_spent_seconds: Accumulated time on the module's content
        updated_at: Last write timestamp
    """

    def __init__(
        self,
        patient_id: UUID,
        enrollment_id: UUID,
        module_id: UUID,
        status: str = ModuleProgressStatus.IN_PROGRESS.value,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        time_spent_seconds: int = 0,
        updated_at: datetime | None = None,
    ):
        self.patient_id = patient_id
        self.enrollment_id = enrollment_id
        self.module_id = module_id
        self.status = status
        self.started_at = ensure_utc_aware(started_at) or utcnow()
        self.completed_at = ensure_utc_aware(completed_at)
        self.time_spent_seconds = time_spent_seconds
        self.updated_at = ensure_utc_aware(updated_at)

    @property
    def is_completed(self) -> bool:
        return self.status == ModuleProgressStatus.COMPLETED.value

    @classmethod
    def from_row(cls, row: Any) -> "ModuleProgress":
        """Create ModuleProgress instance from Cassandra row."""
        return cls(
            patient_id=row.patient_id,
            enrollment_id=row.enrollment_id,
            module_id=row.module_id,
            status=row.status or ModuleProgressStatus.IN_PROGRESS.value,
            started_at=row.started_at,
            completed_at=row.completed_at,
            time_spent_seconds=row.time_spent_seconds or 0,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "patient_id": self.patient_id,
            "enrollment_id": self.enrollment_id,
            "module_id": self.module_id,
            "status": self.status,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "time_spent_seconds": self.time_spent_seconds,
        }

    def __repr__(self) -> str:
        return f"<ModuleProgress module={self.module_id} {self.status}>"
