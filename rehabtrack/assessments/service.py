"""Assessment grading service.

Business logic for:
- Grading a submitted attempt into an immutable, graded attempt record
- Assessment detail for patients (correct answers hidden)
- Patient assessment listing split by latest attempt
- Attempt lookup

Grading flow:
    validate answers -> gate -> create attempt -> record responses
    -> score -> complete attempt
Per-answer lookup failures skip the answer; everything else aborts and
leaves already written rows in place.
"""

from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

import structlog

from rehabtrack.access.service import ALL_CATEGORIES, AccessGate
from rehabtrack.auth.permissions import require_patient
from rehabtrack.auth.schemas import Principal
from rehabtrack.catalog.models import Question
from rehabtrack.catalog.repository import CatalogRepository
from rehabtrack.core.dates import utcnow
from rehabtrack.core.errors import InvalidInputError, NotFoundError

from .models import AssessmentAttempt, QuestionResponse
from .repository import AttemptRepository
from .schemas import (
    AnswerSubmission,
    AssessmentDetailResponse,
    AssessmentSummary,
    PatientAssessmentItem,
    PatientAssessmentsResponse,
    QuestionDetail,
)


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class NoAnswersError(InvalidInputError):
    def __init__(self, message: str = "At least one answer is required"):
        super().__init__(message, "no_answers")


class AttemptNotFoundError(NotFoundError):
    def __init__(self, message: str = "Attempt not found"):
        super().__init__(message, "attempt_not_found")


# ==============================================================================
# Scoring
# ==============================================================================


def calculate_score(earned: int, total: int) -> int:
    """Percentage of points earned, rounded half up.

    A total of zero is treated as one so empty assessments score 0.
    """
    denominator = Decimal(max(1, total))
    ratio = Decimal(100) * Decimal(earned) / denominator
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def grade_answer(
    attempt_id: UUID, question: Question, answer: AnswerSubmission
) -> tuple[QuestionResponse | None, str | None]:
    """Grade one answer against its catalog question.

    Returns:
        Tuple of (response, None), or (None, skip reason)
    """
    if not question.is_choice:
        # Recorded as submitted, blank included
        return (
            QuestionResponse(
                attempt_id=attempt_id,
                question_id=question.id,
                text_response=answer.text_response or "",
                is_correct=None,
                points_earned=0,
            ),
            None,
        )

    if answer.selected_option_id is None:
        return None, "no_option_selected"

    correct = question.correct_options
    if len(correct) != 1:
        return None, "no_correct_option" if not correct else "multiple_correct_options"

    is_correct = answer.selected_option_id == correct[0].id
    return (
        QuestionResponse(
            attempt_id=attempt_id,
            question_id=question.id,
            selected_option_id=answer.selected_option_id,
            is_correct=is_correct,
            points_earned=question.points if is_correct else 0,
        ),
        None,
    )


# ==============================================================================
# Assessment Grader
# ==============================================================================


class AssessmentGrader:
    """Service for grading attempts and reading assessments."""

    def __init__(
        self,
        catalog: CatalogRepository,
        attempts: AttemptRepository,
        gate: AccessGate,
    ):
        self.catalog = catalog
        self.attempts = attempts
        self.gate = gate

    async def grade(
        self,
        principal: Principal,
        assessment_id: UUID,
        answers: list[AnswerSubmission],
    ) -> AssessmentAttempt:
        """Grade a submitted attempt.

        Each answer is graded against the catalog question type. Unknown
        questions, duplicate answers, missing selections and questions
        without exactly one correct option are skipped. Free-text answers
        are recorded as pending review and earn no points.

        Raises:
            NoAnswersError: Empty submission (nothing is written)
            AssessmentNotFoundError: Assessment does not exist
            NotEnrolledError: No active enrollment in the owning program
        """
        if not answers:
            raise NoAnswersError

        assessment, _ = await self.gate.require_assessment_access(
            principal, assessment_id
        )

        attempt = await self.attempts.create_attempt(
            AssessmentAttempt(patient_id=principal.id, assessment_id=assessment.id)
        )
        logger.info(
            "assessment_attempt_started",
            attempt_id=str(attempt.id),
            assessment_id=str(assessment.id),
            patient_id=str(principal.id),
        )

        questions = {q.id: q for q in await self.catalog.list_questions(assessment.id)}
        answered: set[UUID] = set()

        for answer in answers:
            question = questions.get(answer.question_id)
            if question is None:
                reason = "unknown_question"
                response = None
            elif answer.question_id in answered:
                reason = "duplicate_answer"
                response = None
            else:
                response, reason = grade_answer(attempt.id, question, answer)

            if response is None:
                logger.warning(
                    "assessment_answer_skipped",
                    attempt_id=str(attempt.id),
                    question_id=str(answer.question_id),
                    reason=reason,
                )
                continue

            answered.add(answer.question_id)
            attempt.responses.append(await self.attempts.save_response(response))

        total = sum(q.points for q in questions.values())
        earned = sum(r.points_earned for r in attempt.responses if r.is_graded)

        attempt.score = calculate_score(earned, total)
        attempt.passed = attempt.score >= assessment.passing_score
        attempt.completed_at = utcnow()
        await self.attempts.complete_attempt(attempt)

        logger.info(
            "assessment_graded",
            attempt_id=str(attempt.id),
            assessment_id=str(assessment.id),
            patient_id=str(principal.id),
            score=attempt.score,
            passed=attempt.passed,
            earned_points=earned,
            total_points=total,
            responses=len(attempt.responses),
            skipped=len(answers) - len(attempt.responses),
        )
        return attempt

    async def get_assessment(
        self, principal: Principal, assessment_id: UUID
    ) -> AssessmentDetailResponse:
        """Assessment with its questions; correct answers are not included.

        Raises:
            AssessmentNotFoundError: Assessment does not exist
            NotEnrolledError: No active enrollment in the owning program
        """
        assessment, _ = await self.gate.require_assessment_access(
            principal, assessment_id
        )
        questions = await self.catalog.list_questions(assessment.id)
        summary = AssessmentSummary.from_entity(assessment)

        return AssessmentDetailResponse(
            **summary.model_dump(),
            total_points=sum(q.points for q in questions),
            questions=[QuestionDetail.from_entity(q) for q in questions],
        )

    async def list_patient_assessments(
        self, principal: Principal, category_id: UUID | str = ALL_CATEGORIES
    ) -> PatientAssessmentsResponse:
        """Assessments of the patient's enrolled programs in a category.

        An assessment is completed when its latest attempt has been graded.
        """
        pairs = await self.gate.get_category_programs(principal, category_id)
        assessments = await self.catalog.list_program_assessments(
            [program.id for program, _ in pairs]
        )
        if not assessments:
            return PatientAssessmentsResponse()

        latest: dict[UUID, AssessmentAttempt] = {}
        for attempt in await self.attempts.list_patient_attempts(principal.id):
            # Newest first, so the first seen per assessment is the latest
            latest.setdefault(attempt.assessment_id, attempt)

        result = PatientAssessmentsResponse()
        for assessment in assessments:
            attempt = latest.get(assessment.id)
            item = PatientAssessmentItem(
                assessment=AssessmentSummary.from_entity(assessment),
                latest_attempt_id=attempt.id if attempt else None,
                latest_score=attempt.score if attempt else None,
                passed=attempt.passed if attempt else None,
                completed_at=attempt.completed_at if attempt else None,
            )
            if attempt is not None and attempt.is_completed:
                result.completed.append(item)
            else:
                result.available.append(item)
        return result

    async def get_attempt(
        self, principal: Principal, attempt_id: UUID
    ) -> AssessmentAttempt:
        """The patient's own attempt with its responses.

        Raises:
            AttemptNotFoundError: Missing or owned by another patient
        """
        require_patient(principal)
        attempt = await self.attempts.get_attempt(attempt_id)
        if attempt is None or attempt.patient_id != principal.id:
            raise AttemptNotFoundError

        attempt.responses = await self.attempts.list_responses(attempt.id)
        return attempt
