"""Pydantic schemas for assessments.

Request and response models for:
- Assessment detail (questions without correct answers)
- Attempt submission and graded results
- Patient assessment listing
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from rehabtrack.catalog.models import Assessment, Question, QuestionOption

from .models import AssessmentAttempt


# ==============================================================================
# Assessment Detail Schemas
# ==============================================================================


class OptionResponse(BaseModel):
    """Answer option (correctness never exposed to patients)."""

    id: UUID
    option_text: str
    sequence_number: int

    @classmethod
    def from_entity(cls, entity: QuestionOption) -> "OptionResponse":
        return cls(
            id=entity.id,
            option_text=entity.option_text,
            sequence_number=entity.sequence_number,
        )


class QuestionDetail(BaseModel):
    id: UUID
    question_text: str
    question_type: str
    points: int
    sequence_number: int
    options: list[OptionResponse] = []

    @classmethod
    def from_entity(cls, entity: Question) -> "QuestionDetail":
        return cls(
            id=entity.id,
            question_text=entity.question_text,
            question_type=entity.question_type,
            points=entity.points,
            sequence_number=entity.sequence_number,
            options=[OptionResponse.from_entity(o) for o in entity.options],
        )


class AssessmentSummary(BaseModel):
    """Assessment metadata."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    program_id: UUID | None = None
    module_id: UUID | None = None
    title: str
    description: str | None = None
    passing_score: int
    time_limit_minutes: int | None = None

    @classmethod
    def from_entity(cls, entity: Assessment) -> "AssessmentSummary":
        return cls.model_validate(entity)


class AssessmentDetailResponse(AssessmentSummary):
    """Assessment with its questions in sequence order."""

    total_points: int
    questions: list[QuestionDetail] = []


# ==============================================================================
# Submission Schemas
# ==============================================================================


class AnswerSubmission(BaseModel):
    """Answer to one question.

    Choice questions use ``selected_option_id``; text questions use
    ``text_response``.
    """

    question_id: UUID
    selected_option_id: UUID | None = None
    text_response: str | None = Field(None, max_length=10_000)


class SubmitAssessmentRequest(BaseModel):
    """Attempt submission."""

    answers: list[AnswerSubmission] = Field(..., min_length=1)


class QuestionResponseDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    question_id: UUID
    selected_option_id: UUID | None = None
    text_response: str | None = None
    is_correct: bool | None = Field(None, description="None = pending review")
    points_earned: int = 0


class AttemptResponse(BaseModel):
    """Attempt with its recorded responses."""

    id: UUID
    assessment_id: UUID
    started_at: datetime
    completed_at: datetime | None = None
    score: int | None = None
    passed: bool | None = None
    responses: list[QuestionResponseDetail] = []

    @classmethod
    def from_entity(cls, entity: AssessmentAttempt) -> "AttemptResponse":
        return cls(
            id=entity.id,
            assessment_id=entity.assessment_id,
            started_at=entity.started_at,
            completed_at=entity.completed_at,
            score=entity.score,
            passed=entity.passed,
            responses=[
                QuestionResponseDetail.model_validate(r) for r in entity.responses
            ],
        )


# ==============================================================================
# Listing Schemas
# ==============================================================================


class PatientAssessmentItem(BaseModel):
    """Assessment with the patient's latest attempt, if any."""

    assessment: AssessmentSummary
    latest_attempt_id: UUID | None = None
    latest_score: int | None = None
    passed: bool | None = None
    completed_at: datetime | None = None


class PatientAssessmentsResponse(BaseModel):
    """Assessments split by the status of their latest attempt."""

    available: list[PatientAssessmentItem] = []
    completed: list[PatientAssessmentItem] = []
