"""Tests for module progress tracking and program completion."""

from decimal import Decimal
from uuid import uuid4

import pytest

from rehabtrack.access.service import LearningModuleNotFoundError, NotEnrolledError
from rehabtrack.catalog.models import ContentItem
from rehabtrack.core.errors import InvalidInputError
from rehabtrack.progress.models import Enrollment, EnrollmentStatus
from rehabtrack.progress.service import progress_percent


@pytest.fixture
def program(engine):
    return engine.catalog.add_program(engine.catalog.add_category(), title="Recovery")


@pytest.fixture
def enrollment(engine, patient, program):
    return engine.progress.add_enrollment(
        Enrollment(
            patient_id=patient.id,
            program_id=program.id,
            status=EnrollmentStatus.ASSIGNED.value,
        )
    )


def stored_status(engine, enrollment) -> str:
    return engine.progress.enrollments[enrollment.id].status


class TestProgressPercent:
    """Tests for progress_percent."""

    def test_no_required_modules(self) -> None:
        assert progress_percent(0, 0) == Decimal(0)

    def test_rounds_half_up(self) -> None:
        assert progress_percent(1, 3) == Decimal("33.33")
        assert progress_percent(2, 3) == Decimal("66.67")

    def test_complete(self) -> None:
        assert progress_percent(4, 4) == Decimal("100.00")


class TestRecordModuleAccess:
    """Tests for record_module_access."""

    @pytest.mark.asyncio
    async def test_first_access_starts_module_and_enrollment(
        self, engine, patient, program, enrollment
    ) -> None:
        module = engine.catalog.add_module(program)

        progress = await engine.tracker.record_module_access(patient, module.id)

        assert progress.status == "in_progress"
        assert progress.completed_at is None
        assert stored_status(engine, enrollment) == "in_progress"

    @pytest.mark.asyncio
    async def test_repeated_access_keeps_started_at(
        self, engine, patient, program, enrollment
    ) -> None:
        module = engine.catalog.add_module(program)

        first = await engine.tracker.record_module_access(patient, module.id)
        second = await engine.tracker.record_module_access(patient, module.id)

        assert second.started_at == first.started_at
        assert engine.progress.writes.count("create_module_progress") == 1

    @pytest.mark.asyncio
    async def test_access_after_completion_keeps_completed(
        self, engine, patient, program, enrollment
    ) -> None:
        module = engine.catalog.add_module(program, is_required=False)
        engine.catalog.add_module(program, sequence_number=2)
        await engine.tracker.complete_module(patient, module.id)

        progress = await engine.tracker.record_module_access(patient, module.id)

        assert progress.is_completed

    @pytest.mark.asyncio
    async def test_not_enrolled_writes_nothing(self, engine, patient, program) -> None:
        module = engine.catalog.add_module(program)

        with pytest.raises(NotEnrolledError):
            await engine.tracker.record_module_access(patient, module.id)

        assert engine.progress.writes == []

    @pytest.mark.asyncio
    async def test_unknown_module(self, engine, patient) -> None:
        with pytest.raises(LearningModuleNotFoundError):
            await engine.tracker.record_module_access(patient, uuid4())


class TestCompleteModule:
    """Tests for complete_module and program roll-up."""

    @pytest.mark.asyncio
    async def test_completing_all_required_completes_enrollment(
        self, engine, patient, program, enrollment
    ) -> None:
        # Arrange
        first = engine.catalog.add_module(program, 1)
        second = engine.catalog.add_module(program, 2)
        engine.catalog.add_module(program, 3, is_required=False)
        await engine.tracker.record_module_access(patient, first.id)

        # Act: completion order does not matter
        await engine.tracker.complete_module(patient, second.id)
        assert stored_status(engine, enrollment) == "in_progress"
        await engine.tracker.complete_module(patient, first.id)

        # Assert
        stored = engine.progress.enrollments[enrollment.id]
        assert stored.status == "completed"
        assert stored.completed_date is not None

    @pytest.mark.asyncio
    async def test_optional_module_never_changes_status(
        self, engine, patient, program, enrollment
    ) -> None:
        engine.catalog.add_module(program, 1)
        optional = engine.catalog.add_module(program, 2, is_required=False)

        progress = await engine.tracker.complete_module(patient, optional.id)

        assert progress.is_completed
        assert stored_status(engine, enrollment) == "assigned"

    @pytest.mark.asyncio
    async def test_program_without_required_modules_never_completes(
        self, engine, patient, program, enrollment
    ) -> None:
        optional = engine.catalog.add_module(program, is_required=False)
        await engine.tracker.record_module_access(patient, optional.id)

        await engine.tracker.complete_module(patient, optional.id)

        assert stored_status(engine, enrollment) == "in_progress"

    @pytest.mark.asyncio
    async def test_completed_at_stamped_once(
        self, engine, patient, program, enrollment
    ) -> None:
        module = engine.catalog.add_module(program)
        engine.catalog.add_module(program, 2)

        first = await engine.tracker.complete_module(patient, module.id)
        second = await engine.tracker.complete_module(patient, module.id)

        assert second.completed_at == first.completed_at
        assert engine.progress.writes.count("save_module_progress") == 1

    @pytest.mark.asyncio
    async def test_completion_without_prior_access(
        self, engine, patient, program, enrollment
    ) -> None:
        module = engine.catalog.add_module(program)

        progress = await engine.tracker.complete_module(patient, module.id)

        assert progress.started_at is not None
        assert progress.completed_at is not None
        assert stored_status(engine, enrollment) == "completed"

    @pytest.mark.asyncio
    async def test_dropped_enrollment_is_denied(
        self, engine, patient, program, enrollment
    ) -> None:
        module = engine.catalog.add_module(program)
        engine.progress.enrollments[enrollment.id].status = "dropped"

        with pytest.raises(NotEnrolledError):
            await engine.tracker.complete_module(patient, module.id)

        assert engine.progress.writes == []


class TestProgramViews:
    """Tests for module overview, content and progress views."""

    @pytest.mark.asyncio
    async def test_program_modules_is_read_only(
        self, engine, patient, program, enrollment
    ) -> None:
        # Arrange
        first = engine.catalog.add_module(program, 1)
        second = engine.catalog.add_module(program, 2)
        engine.catalog.add_content(first, ContentItem(content="Warm up", sequence_number=1))
        engine.catalog.add_content(first, ContentItem(content="Stretch", sequence_number=2))
        await engine.tracker.record_module_access(patient, second.id)
        writes_before = list(engine.progress.writes)

        # Act
        result = await engine.tracker.get_program_modules(patient, program.id)

        # Assert
        assert engine.progress.writes == writes_before
        assert engine.catalog.count_calls == 1
        assert [m.id for m in result.modules] == [first.id, second.id]
        assert result.modules[0].content_count == 2
        assert result.modules[0].progress is None
        assert result.modules[1].content_count == 0
        assert result.modules[1].progress.status == "in_progress"

    @pytest.mark.asyncio
    async def test_module_content_records_access(
        self, engine, patient, program, enrollment
    ) -> None:
        module = engine.catalog.add_module(program)
        engine.catalog.add_content(
            module,
            ContentItem(
                content_type="link",
                content='{"linkUrl": "https://example.org/help"}',
                sequence_number=2,
            ),
        )
        engine.catalog.add_content(module, ContentItem(content="Intro", sequence_number=1))

        result = await engine.tracker.get_module_content(patient, module.id)

        assert [item.content_type for item in result.items] == ["text", "link"]
        assert result.items[0].payload.body == "Intro"
        assert result.progress.status == "in_progress"
        assert stored_status(engine, enrollment) == "in_progress"

    @pytest.mark.asyncio
    async def test_program_progress_ratio(
        self, engine, patient, program, enrollment
    ) -> None:
        modules = [engine.catalog.add_module(program, i) for i in range(1, 4)]
        optional = engine.catalog.add_module(program, 4, is_required=False)
        await engine.tracker.complete_module(patient, modules[0].id)
        await engine.tracker.complete_module(patient, optional.id)

        result = await engine.tracker.get_program_progress(patient, program.id)

        assert result.required_total == 3
        assert result.required_completed == 1
        assert result.progress_percent == Decimal("33.33")

    @pytest.mark.asyncio
    async def test_program_progress_without_required_modules(
        self, engine, patient, program, enrollment
    ) -> None:
        engine.catalog.add_module(program, is_required=False)

        result = await engine.tracker.get_program_progress(patient, program.id)

        assert result.required_total == 0
        assert result.progress_percent == Decimal(0)


class TestRecordTimeSpent:
    """Tests for record_time_spent."""

    @pytest.mark.asyncio
    async def test_accumulates(self, engine, patient, program, enrollment) -> None:
        module = engine.catalog.add_module(program)

        await engine.tracker.record_time_spent(patient, module.id, 90)
        progress = await engine.tracker.record_time_spent(patient, module.id, 30)

        assert progress.time_spent_seconds == 120

    @pytest.mark.asyncio
    async def test_zero_does_not_write(
        self, engine, patient, program, enrollment
    ) -> None:
        module = engine.catalog.add_module(program)
        await engine.tracker.record_module_access(patient, module.id)

        await engine.tracker.record_time_spent(patient, module.id, 0)

        assert "save_module_progress" not in engine.progress.writes

    @pytest.mark.asyncio
    async def test_negative_rejected_before_writes(
        self, engine, patient, program, enrollment
    ) -> None:
        module = engine.catalog.add_module(program)

        with pytest.raises(InvalidInputError):
            await engine.tracker.record_time_spent(patient, module.id, -5)

        assert engine.progress.writes == []
