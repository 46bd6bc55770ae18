"""Persistence for assessment attempts and question responses."""

from uuid import UUID

import structlog

from rehabtrack.core.database.repository import CassandraRepository

from .models import AssessmentAttempt, QuestionResponse


logger = structlog.get_logger(__name__)


class AttemptRepository(CassandraRepository):
    """Attempt, attempt lookup and response tables."""

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        # Attempts
        self._get_attempt = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.assessment_attempts WHERE id = ?
        """)

        self._get_attempts_by_ids = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.assessment_attempts WHERE id IN ?
        """)

        self._get_attempt_ids_by_patient = self.session.prepare(f"""
            SELECT attempt_id FROM {self.keyspace}.attempts_by_patient
            WHERE patient_id = ?
        """)

        self._insert_attempt = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.assessment_attempts
            (id, patient_id, assessment_id, started_at, completed_at, score, passed)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_attempt_by_patient = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.attempts_by_patient
            (patient_id, assessment_id, started_at, attempt_id)
            VALUES (?, ?, ?, ?)
        """)

        # Graded attempts are never overwritten
        self._complete_attempt = self.session.prepare(f"""
            UPDATE {self.keyspace}.assessment_attempts
            SET completed_at = ?, score = ?, passed = ?
            WHERE id = ?
            IF completed_at = null
        """)

        # Responses
        self._insert_response = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.question_responses
            (attempt_id, question_id, selected_option_id, text_response,
             is_correct, points_earned, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_responses = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.question_responses WHERE attempt_id = ?
        """)

    # ==========================================================================
    # Attempts
    # ==========================================================================

    async def create_attempt(self, attempt: AssessmentAttempt) -> AssessmentAttempt:
        """Persist a started, ungraded attempt and its patient lookup row."""
        await self._execute(
            self._insert_attempt,
            [
                attempt.id,
                attempt.patient_id,
                attempt.assessment_id,
                attempt.started_at,
                None,
                None,
                None,
            ],
            operation="create_attempt",
        )
        await self._execute(
            self._insert_attempt_by_patient,
            [attempt.patient_id, attempt.assessment_id, attempt.started_at, attempt.id],
            operation="create_attempt",
        )
        return attempt

    async def complete_attempt(self, attempt: AssessmentAttempt) -> bool:
        """Store the grading result.

        Returns:
            False if the attempt had already been graded
        """
        result = await self._execute(
            self._complete_attempt,
            [attempt.completed_at, attempt.score, attempt.passed, attempt.id],
            operation="complete_attempt",
        )
        applied = bool(result.was_applied)
        if not applied:
            logger.warning("attempt_already_graded", attempt_id=str(attempt.id))
        return applied

    async def get_attempt(self, attempt_id: UUID) -> AssessmentAttempt | None:
        row = await self._fetch_one(
            self._get_attempt, [attempt_id], operation="get_attempt"
        )
        return AssessmentAttempt.from_row(row) if row else None

    async def list_patient_attempts(self, patient_id: UUID) -> list[AssessmentAttempt]:
        """All attempts of a patient, newest first."""
        id_rows = await self._fetch_all(
            self._get_attempt_ids_by_patient,
            [patient_id],
            operation="list_patient_attempts",
        )
        attempt_ids = [r.attempt_id for r in id_rows]
        if not attempt_ids:
            return []

        rows = await self._fetch_all(
            self._get_attempts_by_ids, [attempt_ids], operation="list_patient_attempts"
        )
        attempts = [AssessmentAttempt.from_row(r) for r in rows]
        return sorted(attempts, key=lambda a: a.started_at, reverse=True)

    # ==========================================================================
    # Responses
    # ==========================================================================

    async def save_response(self, response: QuestionResponse) -> QuestionResponse:
        await self._execute(
            self._insert_response,
            [
                response.attempt_id,
                response.question_id,
                response.selected_option_id,
                response.text_response,
                response.is_correct,
                response.points_earned,
                response.created_at,
            ],
            operation="save_response",
        )
        return response

    async def list_responses(self, attempt_id: UUID) -> list[QuestionResponse]:
        rows = await self._fetch_all(
            self._get_responses, [attempt_id], operation="list_responses"
        )
        return [QuestionResponse.from_row(r) for r in rows]
