"""Assessment attempts and grading.

Provides:
- Attempt and response records (immutable once graded)
- Deterministic grading of choice questions
- Free-text responses recorded for manual review
"""

from .models import ASSESSMENT_TABLES_CQL, AssessmentAttempt, QuestionResponse


__all__ = ["ASSESSMENT_TABLES_CQL", "AssessmentAttempt", "QuestionResponse"]
