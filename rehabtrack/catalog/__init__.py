"""Treatment catalog (read-only to the engine).

Provides:
- Category, program, module and content item entities
- Assessments with their questions and options
- Typed content payload decoding
"""

from .content import ContentDecodeError, ContentType, decode_content
from .models import (
    CATALOG_TABLES_CQL,
    Assessment,
    Category,
    ContentItem,
    LearningModule,
    Program,
    Question,
    QuestionOption,
    QuestionType,
)


__all__ = [
    "CATALOG_TABLES_CQL",
    "Assessment",
    "Category",
    "ContentDecodeError",
    "ContentItem",
    "ContentType",
    "LearningModule",
    "Program",
    "Question",
    "QuestionOption",
    "QuestionType",
    "decode_content",
]
