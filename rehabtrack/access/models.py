"""Database models for patient category assignments."""

from datetime import datetime
from typing import Any
from uuid import UUID

from rehabtrack.core.dates import ensure_utc_aware, utcnow


# One row per patient: reassignment overwrites the previous category
PATIENT_CATEGORIES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.patient_categories (
    patient_id UUID PRIMARY KEY,
    category_id UUID,
    assigned_by UUID,
    assigned_at TIMESTAMP
)
"""

ACCESS_TABLES_CQL = [PATIENT_CATEGORIES_TABLE_CQL]


class PatientCategory:
    """Active category assignment of a patient.

    Attributes:
        patient_id: Patient UUID
        category_id: Assigned category
        assigned_by: Admin who made the assignment, None if unknown
        assigned_at: Assignment timestamp
    """

    def __init__(
        self,
        patient_id: UUID,
        category_id: UUID,
        assigned_by: UUID | None = None,
        assigned_at: datetime | None = None,
    ):
        self.patient_id = patient_id
        self.category_id = category_id
        self.assigned_by = assigned_by
        self.assigned_at = ensure_utc_aware(assigned_at) or utcnow()

    @classmethod
    def from_row(cls, row: Any) -> "PatientCategory":
        """Create PatientCategory from Cassandra row."""
        return cls(
            patient_id=row.patient_id,
            category_id=row.category_id,
            assigned_by=row.assigned_by,
            assigned_at=row.assigned_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "patient_id": self.patient_id,
            "category_id": self.category_id,
            "assigned_by": self.assigned_by,
            "assigned_at": self.assigned_at,
        }

    def __repr__(self) -> str:
        return f"<PatientCategory patient={self.patient_id} category={self.category_id}>"
