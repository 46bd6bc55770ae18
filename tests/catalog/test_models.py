"""Tests for catalog entities."""

from types import SimpleNamespace
from uuid import uuid4

from rehabtrack.catalog.models import (
    LearningModule,
    Program,
    Question,
    QuestionOption,
)


class TestQuestion:
    """Tests for Question."""

    def test_options_sorted_by_sequence(self) -> None:
        question = Question(
            options=[
                QuestionOption(option_text="b", sequence_number=2),
                QuestionOption(option_text="a", sequence_number=1),
            ]
        )
        assert [o.option_text for o in question.options] == ["a", "b"]

    def test_correct_options(self) -> None:
        right = QuestionOption(is_correct=True)
        question = Question(options=[QuestionOption(), right])
        assert question.correct_options == [right]

    def test_choice_types(self) -> None:
        assert Question(question_type="multiple_choice").is_choice
        assert Question(question_type="true_false").is_choice
        assert not Question(question_type="text_response").is_choice

    def test_to_dict_hides_answers_by_default(self) -> None:
        question = Question(options=[QuestionOption(is_correct=True)])
        assert "is_correct" not in question.to_dict()["options"][0]
        assert question.to_dict(include_answers=True)["options"][0]["is_correct"]


class TestFromRow:
    """Tests for building entities from Cassandra rows."""

    def test_program_defaults(self) -> None:
        row = SimpleNamespace(
            id=uuid4(),
            category_id=uuid4(),
            title=None,
            description=None,
            duration_days=None,
            is_active=None,
            created_at=None,
            updated_at=None,
        )
        program = Program.from_row(row)
        assert program.title == ""
        assert program.is_active is True
        assert program.duration_days is None
        assert program.created_at.tzinfo is not None

    def test_module_keeps_optional_flag(self) -> None:
        row = SimpleNamespace(
            id=uuid4(),
            program_id=uuid4(),
            title="Sleep",
            description=None,
            sequence_number=3,
            is_required=False,
            created_at=None,
        )
        module = LearningModule.from_row(row)
        assert module.is_required is False
        assert module.sequence_number == 3
