"""Database models for the treatment catalog.

Cassandra table definitions for:
- Categories and treatment programs
- Learning modules and their content items
- Assessments, questions and answer options
- Lookup tables: programs by category, modules by program, assessments by program

The catalog is authored elsewhere; the engine only reads it.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from rehabtrack.core.dates import ensure_utc_aware, utcnow

from .content import ContentType, decode_content


class QuestionType(str, Enum):
    """Assessment question type."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    TEXT_RESPONSE = "text_response"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

CATEGORY_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.program_categories (
    id UUID PRIMARY KEY,
    name TEXT,
    description TEXT,
    created_at TIMESTAMP
)
"""

PROGRAM_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.treatment_programs (
    id UUID PRIMARY KEY,
    category_id UUID,
    title TEXT,
    description TEXT,
    duration_days INT,
    is_active BOOLEAN,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

PROGRAMS_BY_CATEGORY_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.programs_by_category (
    category_id UUID,
    title TEXT,
    program_id UUID,
    is_active BOOLEAN,
    PRIMARY KEY (category_id, title, program_id)
) WITH CLUSTERING ORDER BY (title ASC, program_id ASC)
"""

MODULE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.learning_modules (
    id UUID PRIMARY KEY,
    program_id UUID,
    title TEXT,
    description TEXT,
    sequence_number INT,
    is_required BOOLEAN,
    created_at TIMESTAMP
)
"""

MODULES_BY_PROGRAM_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.modules_by_program (
    program_id UUID,
    sequence_number INT,
    module_id UUID,
    PRIMARY KEY (program_id, sequence_number, module_id)
) WITH CLUSTERING ORDER BY (sequence_number ASC, module_id ASC)
"""

CONTENT_ITEM_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.content_items (
    module_id UUID,
    sequence_number INT,
    id UUID,
    title TEXT,
    content_type TEXT,
    content TEXT,
    created_at TIMESTAMP,
    PRIMARY KEY (module_id, sequence_number, id)
) WITH CLUSTERING ORDER BY (sequence_number ASC, id ASC)
"""

ASSESSMENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.assessments (
    id UUID PRIMARY KEY,
    content_item_id UUID,
    module_id UUID,
    program_id UUID,
    title TEXT,
    description TEXT,
    passing_score INT,
    time_limit_minutes INT,
    created_at TIMESTAMP
)
"""

ASSESSMENTS_BY_PROGRAM_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.assessments_by_program (
    program_id UUID,
    assessment_id UUID,
    PRIMARY KEY (program_id, assessment_id)
)
"""

QUESTION_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.assessment_questions (
    assessment_id UUID,
    sequence_number INT,
    id UUID,
    question_text TEXT,
    question_type TEXT,
    points INT,
    PRIMARY KEY (assessment_id, sequence_number, id)
) WITH CLUSTERING ORDER BY (sequence_number ASC, id ASC)
"""

# Options are partitioned by assessment so grading loads them in one query
QUESTION_OPTION_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.question_options (
    assessment_id UUID,
    question_id UUID,
    sequence_number INT,
    id UUID,
    option_text TEXT,
    is_correct BOOLEAN,
    PRIMARY KEY (assessment_id, question_id, sequence_number, id)
) WITH CLUSTERING ORDER BY (question_id ASC, sequence_number ASC, id ASC)
"""

CATALOG_TABLES_CQL = [
    # Main tables
    CATEGORY_TABLE_CQL,
    PROGRAM_TABLE_CQL,
    MODULE_TABLE_CQL,
    CONTENT_ITEM_TABLE_CQL,
    ASSESSMENT_TABLE_CQL,
    QUESTION_TABLE_CQL,
    QUESTION_OPTION_TABLE_CQL,
    # Lookup tables
    PROGRAMS_BY_CATEGORY_TABLE_CQL,
    MODULES_BY_PROGRAM_TABLE_CQL,
    ASSESSMENTS_BY_PROGRAM_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Category:
    """Program category (e.g. a treatment track) patients are assigned to."""

    def __init__(
        self,
        id: UUID | None = None,
        name: str = "",
        description: str | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.name = name
        self.description = description
        self.created_at = ensure_utc_aware(created_at) or utcnow()

    @classmethod
    def from_row(cls, row: Any) -> "Category":
        """Create Category from Cassandra row."""
        return cls(
            id=row.id,
            name=row.name or "",
            description=row.description,
            created_at=row.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
        }

    def __repr__(self) -> str:
        return f"<Category {self.name}>"


class Program:
    """Treatment program.

    Attributes:
        id: Program UUID
        category_id: Owning category
        title: Program title
        description: Long description
        duration_days: Planned length in days, None if open-ended
        is_active: Inactive programs are hidden from new assignments
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        id: UUID | None = None,
        category_id: UUID | None = None,
        title: str = "",
        description: str | None = None,
        duration_days: int | None = None,
        is_active: bool = True,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.category_id = category_id
        self.title = title
        self.description = description
        self.duration_days = duration_days
        self.is_active = is_active
        self.created_at = ensure_utc_aware(created_at) or utcnow()
        self.updated_at = ensure_utc_aware(updated_at)

    @classmethod
    def from_row(cls, row: Any) -> "Program":
        """Create Program from Cassandra row."""
        return cls(
            id=row.id,
            category_id=row.category_id,
            title=row.title or "",
            description=row.description,
            duration_days=row.duration_days,
            is_active=row.is_active if row.is_active is not None else True,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category_id": self.category_id,
            "title": self.title,
            "description": self.description,
            "duration_days": self.duration_days,
            "is_active": self.is_active,
        }

    def __repr__(self) -> str:
        return f"<Program {self.title}>"


class LearningModule:
    """Module within a program.

    Only required modules count towards program completion.
    """

    def __init__(
        self,
        id: UUID | None = None,
        program_id: UUID | None = None,
        title: str = "",
        description: str | None = None,
        sequence_number: int = 0,
        is_required: bool = True,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.program_id = program_id
        self.title = title
        self.description = description
        self.sequence_number = sequence_number
        self.is_required = is_required
        self.created_at = ensure_utc_aware(created_at) or utcnow()

    @classmethod
    def from_row(cls, row: Any) -> "LearningModule":
        """Create LearningModule from Cassandra row."""
        return cls(
            id=row.id,
            program_id=row.program_id,
            title=row.title or "",
            description=row.description,
            sequence_number=row.sequence_number or 0,
            is_required=row.is_required if row.is_required is not None else True,
            created_at=row.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "program_id": self.program_id,
            "title": self.title,
            "description": self.description,
            "sequence_number": self.sequence_number,
            "is_required": self.is_required,
        }

    def __repr__(self) -> str:
        return f"<LearningModule {self.title} #{self.sequence_number}>"


class ContentItem:
    """Content item in a module with its decoded payload.

    The payload is decoded on construction; malformed stored content raises
    ``ContentDecodeError``.
    """

    def __init__(
        self,
        id: UUID | None = None,
        module_id: UUID | None = None,
        title: str = "",
        content_type: str = ContentType.TEXT.value,
        content: str | None = None,
        sequence_number: int = 0,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.module_id = module_id
        self.title = title
        self.content_type = content_type
        self.sequence_number = sequence_number
        self.payload = decode_content(content_type, content, content_id=self.id)
        self.created_at = ensure_utc_aware(created_at) or utcnow()

    @classmethod
    def from_row(cls, row: Any) -> "ContentItem":
        """Create ContentItem from Cassandra row."""
        return cls(
            id=row.id,
            module_id=row.module_id,
            title=row.title or "",
            content_type=row.content_type,
            content=row.content,
            sequence_number=row.sequence_number or 0,
            created_at=row.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "module_id": self.module_id,
            "title": self.title,
            "content_type": self.content_type,
            "sequence_number": self.sequence_number,
            "payload": self.payload.model_dump(mode="json"),
        }

    def __repr__(self) -> str:
        return f"<ContentItem {self.content_type} #{self.sequence_number}>"


class Assessment:
    """Assessment anchored to a content item.

    ``module_id`` and ``program_id`` are stored with the assessment so access
    checks do not need to walk content -> module -> program.
    """

    def __init__(
        self,
        id: UUID | None = None,
        content_item_id: UUID | None = None,
        module_id: UUID | None = None,
        program_id: UUID | None = None,
        title: str = "",
        description: str | None = None,
        passing_score: int = 0,
        time_limit_minutes: int | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.content_item_id = content_item_id
        self.module_id = module_id
        self.program_id = program_id
        self.title = title
        self.description = description
        self.passing_score = passing_score
        self.time_limit_minutes = time_limit_minutes
        self.created_at = ensure_utc_aware(created_at) or utcnow()

    @classmethod
    def from_row(cls, row: Any) -> "Assessment":
        """Create Assessment from Cassandra row."""
        return cls(
            id=row.id,
            content_item_id=row.content_item_id,
            module_id=row.module_id,
            program_id=row.program_id,
            title=row.title or "",
            description=row.description,
            passing_score=row.passing_score or 0,
            time_limit_minutes=row.time_limit_minutes,
            created_at=row.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content_item_id": self.content_item_id,
            "module_id": self.module_id,
            "program_id": self.program_id,
            "title": self.title,
            "description": self.description,
            "passing_score": self.passing_score,
            "time_limit_minutes": self.time_limit_minutes,
        }

    def __repr__(self) -> str:
        return f"<Assessment {self.title} pass>={self.passing_score}>"


class QuestionOption:
    """Answer option for a choice question."""

    def __init__(
        self,
        id: UUID | None = None,
        question_id: UUID | None = None,
        option_text: str = "",
        is_correct: bool = False,
        sequence_number: int = 0,
    ):
        self.id = id or uuid4()
        self.question_id = question_id
        self.option_text = option_text
        self.is_correct = is_correct
        self.sequence_number = sequence_number

    @classmethod
    def from_row(cls, row: Any) -> "QuestionOption":
        """Create QuestionOption from Cassandra row."""
        return cls(
            id=row.id,
            question_id=row.question_id,
            option_text=row.option_text or "",
            is_correct=bool(row.is_correct),
            sequence_number=row.sequence_number or 0,
        )

    def to_dict(self, include_answer: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "option_text": self.option_text,
            "sequence_number": self.sequence_number,
        }
        if include_answer:
            data["is_correct"] = self.is_correct
        return data


class Question:
    """Assessment question with its options in sequence order."""

    def __init__(
        self,
        id: UUID | None = None,
        assessment_id: UUID | None = None,
        question_text: str = "",
        question_type: str = QuestionType.MULTIPLE_CHOICE.value,
        points: int = 0,
        sequence_number: int = 0,
        options: list[QuestionOption] | None = None,
    ):
        self.id = id or uuid4()
        self.assessment_id = assessment_id
        self.question_text = question_text
        self.question_type = question_type
        self.points = points
        self.sequence_number = sequence_number
        self.options = sorted(options or [], key=lambda o: o.sequence_number)

    @property
    def is_choice(self) -> bool:
        return self.question_type != QuestionType.TEXT_RESPONSE.value

    @property
    def correct_options(self) -> list[QuestionOption]:
        return [option for option in self.options if option.is_correct]

    @classmethod
    def from_row(cls, row: Any, options: list[QuestionOption] | None = None) -> "Question":
        """Create Question from Cassandra row."""
        return cls(
            id=row.id,
            assessment_id=row.assessment_id,
            question_text=row.question_text or "",
            question_type=row.question_type or QuestionType.MULTIPLE_CHOICE.value,
            points=row.points or 0,
            sequence_number=row.sequence_number or 0,
            options=options,
        )

    def to_dict(self, include_answers: bool = False) -> dict[str, Any]:
        return {
            "id": self.id,
            "question_text": self.question_text,
            "question_type": self.question_type,
            "points": self.points,
            "sequence_number": self.sequence_number,
            "options": [o.to_dict(include_answers) for o in self.options],
        }

    def __repr__(self) -> str:
        return f"<Question {self.question_type} #{self.sequence_number}>"
