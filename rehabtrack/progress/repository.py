"""Persistence for enrollments and module progress."""

from datetime import date
from uuid import UUID

from rehabtrack.core.database.repository import CassandraRepository
from rehabtrack.core.dates import utcnow

from .models import Enrollment, ModuleProgress


class ProgressRepository(CassandraRepository):
    """Enrollment and module progress tables."""

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        # Enrollments
        self._get_enrollment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments WHERE id = ?
        """)

        self._get_enrollments_by_ids = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments WHERE id IN ?
        """)

        self._get_enrollment_ids_by_patient = self.session.prepare(f"""
            SELECT enrollment_id FROM {self.keyspace}.enrollments_by_patient
            WHERE patient_id = ?
        """)

        self._get_enrollment_ids_by_patient_program = self.session.prepare(f"""
            SELECT enrollment_id FROM {self.keyspace}.enrollments_by_patient
            WHERE patient_id = ? AND program_id = ?
        """)

        self._insert_enrollment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments
            (id, patient_id, program_id, status, start_date, expected_end_date,
             completed_date, enrolled_by, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_enrollment_by_patient = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments_by_patient
            (patient_id, program_id, enrollment_id)
            VALUES (?, ?, ?)
        """)

        self._update_enrollment_status = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments
            SET status = ?, completed_date = ?, updated_at = ?
            WHERE id = ?
        """)

        # Module Progress
        self._get_module_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.module_progress
            WHERE patient_id = ? AND enrollment_id = ? AND module_id = ?
        """)

        self._list_module_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.module_progress
            WHERE patient_id = ? AND enrollment_id = ?
        """)

        self._insert_module_progress_if_absent = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.module_progress
            (patient_id, enrollment_id, module_id, status, started_at,
             completed_at, time_spent_seconds, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._upsert_module_progress = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.module_progress
            (patient_id, enrollment_id, module_id, status, started_at,
             completed_at, time_spent_seconds, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)

    # ==========================================================================
    # Enrollments
    # ==========================================================================

    async def get_enrollment(self, enrollment_id: UUID) -> Enrollment | None:
        row = await self._fetch_one(
            self._get_enrollment, [enrollment_id], operation="get_enrollment"
        )
        return Enrollment.from_row(row) if row else None

    async def _get_enrollments(self, enrollment_ids: list[UUID]) -> list[Enrollment]:
        if not enrollment_ids:
            return []
        rows = await self._fetch_all(
            self._get_enrollments_by_ids, [enrollment_ids], operation="get_enrollments"
        )
        enrollments = [Enrollment.from_row(r) for r in rows]
        return sorted(enrollments, key=lambda e: e.created_at)

    async def list_patient_enrollments(self, patient_id: UUID) -> list[Enrollment]:
        """All enrollments of a patient (dropped included), oldest first."""
        rows = await self._fetch_all(
            self._get_enrollment_ids_by_patient,
            [patient_id],
            operation="list_patient_enrollments",
        )
        return await self._get_enrollments([r.enrollment_id for r in rows])

    async def find_active_enrollment(
        self, patient_id: UUID, program_id: UUID
    ) -> Enrollment | None:
        """Get the non-dropped enrollment of a patient in a program, if any.

        Should several exist, the most recent one wins.
        """
        rows = await self._fetch_all(
            self._get_enrollment_ids_by_patient_program,
            [patient_id, program_id],
            operation="find_active_enrollment",
        )
        enrollments = await self._get_enrollments([r.enrollment_id for r in rows])
        active = [e for e in enrollments if e.is_active]
        return active[-1] if active else None

    async def create_enrollment(self, enrollment: Enrollment) -> Enrollment:
        """Persist a new enrollment and its patient lookup row."""
        await self._execute(
            self._insert_enrollment,
            [
                enrollment.id,
                enrollment.patient_id,
                enrollment.program_id,
                enrollment.status,
                enrollment.start_date,
                enrollment.expected_end_date,
                enrollment.completed_date,
                enrollment.enrolled_by,
                enrollment.created_at,
                enrollment.updated_at,
            ],
            operation="create_enrollment",
        )
        await self._execute(
            self._insert_enrollment_by_patient,
            [enrollment.patient_id, enrollment.program_id, enrollment.id],
            operation="create_enrollment",
        )
        return enrollment

    async def update_enrollment_status(
        self,
        enrollment: Enrollment,
        status: str,
        completed_date: date | None = None,
    ) -> Enrollment:
        """Change an enrollment's status (and completion date)."""
        now = utcnow()
        await self._execute(
            self._update_enrollment_status,
            [status, completed_date, now, enrollment.id],
            operation="update_enrollment_status",
        )
        enrollment.status = status
        enrollment.completed_date = completed_date
        enrollment.updated_at = now
        return enrollment

    # ==========================================================================
    # Module Progress
    # ==========================================================================

    async def get_module_progress(
        self, patient_id: UUID, enrollment_id: UUID, module_id: UUID
    ) -> ModuleProgress | None:
        row = await self._fetch_one(
            self._get_module_progress,
            [patient_id, enrollment_id, module_id],
            operation="get_module_progress",
        )
        return ModuleProgress.from_row(row) if row else None

    async def list_module_progress(
        self, patient_id: UUID, enrollment_id: UUID
    ) -> list[ModuleProgress]:
        """All progress rows of an enrollment."""
        rows = await self._fetch_all(
            self._list_module_progress,
            [patient_id, enrollment_id],
            operation="list_module_progress",
        )
        return [ModuleProgress.from_row(r) for r in rows]

    def _progress_params(self, progress: ModuleProgress) -> list:
        return [
            progress.patient_id,
            progress.enrollment_id,
            progress.module_id,
            progress.status,
            progress.started_at,
            progress.completed_at,
            progress.time_spent_seconds,
            progress.updated_at,
        ]

    async def create_module_progress_if_absent(self, progress: ModuleProgress) -> bool:
        """Insert the row unless one already exists.

        Returns:
            True if this call created the row
        """
        result = await self._execute(
            self._insert_module_progress_if_absent,
            self._progress_params(progress),
            operation="create_module_progress",
        )
        return bool(result.was_applied)

    async def save_module_progress(self, progress: ModuleProgress) -> ModuleProgress:
        """Insert or overwrite a progress row.

        The row may have been created by the ``IF NOT EXISTS`` insert in
        ``create_module_progress_if_absent``. This plain write does not take
        part in that Paxos round, so concurrent saves resolve last write wins
        and a racing ``time_spent_seconds`` increment can be lost.
        """
        progress.updated_at = utcnow()
        await self._execute(
            self._upsert_module_progress,
            self._progress_params(progress),
            operation="save_module_progress",
        )
        return progress
