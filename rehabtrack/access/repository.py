"""Persistence for patient category assignments."""

from uuid import UUID

from rehabtrack.core.database.repository import CassandraRepository

from .models import PatientCategory


class CategoryRepository(CassandraRepository):
    """patient_categories table."""

    def _prepare_statements(self) -> None:
        self._get_patient_category = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.patient_categories WHERE patient_id = ?
        """)

        self._upsert_patient_category = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.patient_categories
            (patient_id, category_id, assigned_by, assigned_at)
            VALUES (?, ?, ?, ?)
        """)

    async def get_patient_category(self, patient_id: UUID) -> PatientCategory | None:
        row = await self._fetch_one(
            self._get_patient_category, [patient_id], operation="get_patient_category"
        )
        return PatientCategory.from_row(row) if row else None

    async def save_patient_category(self, assignment: PatientCategory) -> PatientCategory:
        """Store the assignment, replacing any previous one."""
        await self._execute(
            self._upsert_patient_category,
            [
                assignment.patient_id,
                assignment.category_id,
                assignment.assigned_by,
                assignment.assigned_at,
            ],
            operation="save_patient_category",
        )
        return assignment
