"""Database models for assessment attempts and responses.

Cassandra table definitions for:
- Attempts: one row per attempt, immutable once graded
- Attempts by patient: lookup for latest-attempt queries
- Question responses: one row per answered question of an attempt
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from rehabtrack.core.dates import ensure_utc_aware, utcnow


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

ATTEMPTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.assessment_attempts (
    id UUID PRIMARY KEY,
    patient_id UUID,
    assessment_id UUID,
    started_at TIMESTAMP,
    completed_at TIMESTAMP,
    score INT,
    passed BOOLEAN
)
"""

ATTEMPTS_BY_PATIENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.attempts_by_patient (
    patient_id UUID,
    assessment_id UUID,
    started_at TIMESTAMP,
    attempt_id UUID,
    PRIMARY KEY (patient_id, assessment_id, started_at, attempt_id)
) WITH CLUSTERING ORDER BY (assessment_id ASC, started_at DESC, attempt_id ASC)
"""

QUESTION_RESPONSES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.question_responses (
    attempt_id UUID,
    question_id UUID,
    selected_option_id UUID,
    text_response TEXT,
    is_correct BOOLEAN,
    points_earned INT,
    created_at TIMESTAMP,
    PRIMARY KEY (attempt_id, question_id)
)
"""

ASSESSMENT_TABLES_CQL = [
    ATTEMPTS_TABLE_CQL,
    ATTEMPTS_BY_PATIENT_TABLE_CQL,
    QUESTION_RESPONSES_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class QuestionResponse:
    """Recorded answer to one question.

    Exactly one of ``selected_option_id`` and ``text_response`` is set,
    depending on the question type. ``is_correct`` is None for free-text
    answers awaiting review.
    """

    def __init__(
        self,
        attempt_id: UUID,
        question_id: UUID,
        selected_option_id: UUID | None = None,
        text_response: str | None = None,
        is_correct: bool | None = None,
        points_earned: int = 0,
        created_at: datetime | None = None,
    ):
        self.attempt_id = attempt_id
        self.question_id = question_id
        self.selected_option_id = selected_option_id
        self.text_response = text_response
        self.is_correct = is_correct
        self.points_earned = points_earned
        self.created_at = ensure_utc_aware(created_at) or utcnow()

    @property
    def is_graded(self) -> bool:
        return self.is_correct is not None

    @classmethod
    def from_row(cls, row: Any) -> "QuestionResponse":
        """Create QuestionResponse from Cassandra row."""
        return cls(
            attempt_id=row.attempt_id,
            question_id=row.question_id,
            selected_option_id=row.selected_option_id,
            text_response=row.text_response,
            is_correct=row.is_correct,
            points_earned=row.points_earned or 0,
            created_at=row.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempt_id": self.attempt_id,
            "question_id": self.question_id,
            "selected_option_id": self.selected_option_id,
            "text_response": self.text_response,
            "is_correct": self.is_correct,
            "points_earned": self.points_earned,
        }

    def __repr__(self) -> str:
        return f"<QuestionResponse question={self.question_id} correct={self.is_correct}>"


class AssessmentAttempt:
    """One attempt of a patient at an assessment.

    ``score`` and ``passed`` are meaningful only once ``completed_at`` is set.
    A retake is a new attempt.

    Attributes:
        id: Attempt UUID
        patient_id: Patient taking the assessment
        assessment_id: Assessment UUID
        started_at: Attempt creation timestamp
        completed_at: Grading timestamp, None while ungraded
        score: 0-100 score, None while ungraded
        passed: score >= passing score, None while ungraded
        responses: Recorded responses (loaded on demand)
    """

    def __init__(
        self,
        patient_id: UUID,
        assessment_id: UUID,
        id: UUID | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        score: int | None = None,
        passed: bool | None = None,
        responses: list[QuestionResponse] | None = None,
    ):
        self.id = id or uuid4()
        self.patient_id = patient_id
        self.assessment_id = assessment_id
        self.started_at = ensure_utc_aware(started_at) or utcnow()
        self.completed_at = ensure_utc_aware(completed_at)
        self.score = score
        self.passed = passed
        self.responses = responses or []

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @classmethod
    def from_row(cls, row: Any) -> "AssessmentAttempt":
        """Create AssessmentAttempt from Cassandra row."""
        return cls(
            id=row.id,
            patient_id=row.patient_id,
            assessment_id=row.assessment_id,
            started_at=row.started_at,
            completed_at=row.completed_at,
            score=row.score,
            passed=row.passed,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "assessment_id": self.assessment_id,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "score": self.score,
            "passed": self.passed,
            "responses": [r.to_dict() for r in self.responses],
        }

    def __repr__(self) -> str:
        return f"<AssessmentAttempt {self.id} score={self.score} passed={self.passed}>"
