"""Tests for the category/enrollment gate."""

from uuid import uuid4

import pytest

from rehabtrack.access.models import PatientCategory
from rehabtrack.access.service import (
    AssessmentNotFoundError,
    InvalidCategoryError,
    LearningModuleNotFoundError,
    NotEnrolledError,
    ProgramNotFoundError,
)
from rehabtrack.auth.schemas import Principal
from rehabtrack.core.errors import ErrorKind, UnauthenticatedError, UnauthorizedError
from rehabtrack.progress.models import Enrollment, EnrollmentStatus


def enroll(engine, patient: Principal, program, status=EnrollmentStatus.IN_PROGRESS):
    return engine.progress.add_enrollment(
        Enrollment(patient_id=patient.id, program_id=program.id, status=status.value)
    )


class TestCanAccessProgram:
    """Tests for can_access_program."""

    @pytest.mark.asyncio
    async def test_enrolled_patient(self, engine, patient) -> None:
        program = engine.catalog.add_program()
        enroll(engine, patient, program)

        assert await engine.gate.can_access_program(patient.id, program.id) is True

    @pytest.mark.asyncio
    async def test_not_enrolled(self, engine, patient) -> None:
        program = engine.catalog.add_program()

        assert await engine.gate.can_access_program(patient.id, program.id) is False

    @pytest.mark.asyncio
    async def test_dropped_enrollment_denies(self, engine, patient) -> None:
        program = engine.catalog.add_program()
        enroll(engine, patient, program, EnrollmentStatus.DROPPED)

        assert await engine.gate.can_access_program(patient.id, program.id) is False

    @pytest.mark.asyncio
    async def test_completed_enrollment_keeps_access(self, engine, patient) -> None:
        program = engine.catalog.add_program()
        enroll(engine, patient, program, EnrollmentStatus.COMPLETED)

        assert await engine.gate.can_access_program(patient.id, program.id) is True


class TestResolveEffectiveCategory:
    """Tests for resolve_effective_category."""

    @pytest.mark.asyncio
    async def test_all_uses_assignment(self, engine, patient) -> None:
        category = engine.catalog.add_category()
        await engine.categories.save_patient_category(
            PatientCategory(patient_id=patient.id, category_id=category.id)
        )

        result = await engine.gate.resolve_effective_category(patient.id, "all")

        assert result == category.id

    @pytest.mark.asyncio
    async def test_all_without_assignment(self, engine, patient) -> None:
        assert await engine.gate.resolve_effective_category(patient.id, "all") is None

    @pytest.mark.asyncio
    async def test_explicit_category_used_as_is(self, engine, patient) -> None:
        category_id = uuid4()

        result = await engine.gate.resolve_effective_category(
            patient.id, str(category_id)
        )

        assert result == category_id

    @pytest.mark.asyncio
    async def test_invalid_category(self, engine, patient) -> None:
        with pytest.raises(InvalidCategoryError) as exc_info:
            await engine.gate.resolve_effective_category(patient.id, "everything")
        assert exc_info.value.kind is ErrorKind.INVALID_INPUT


class TestGetCategoryPrograms:
    """Tests for get_category_programs."""

    @pytest.mark.asyncio
    async def test_only_enrolled_active_programs(self, engine, patient) -> None:
        # Arrange
        category = engine.catalog.add_category()
        enrolled = engine.catalog.add_program(category, title="A")
        engine.catalog.add_program(category, title="B")
        retired = engine.catalog.add_program(category, title="C", is_active=False)
        enroll(engine, patient, enrolled)
        enroll(engine, patient, retired)
        await engine.categories.save_patient_category(
            PatientCategory(patient_id=patient.id, category_id=category.id)
        )

        # Act
        pairs = await engine.gate.get_category_programs(patient)

        # Assert
        assert [program.id for program, _ in pairs] == [enrolled.id]

    @pytest.mark.asyncio
    async def test_no_category_is_empty(self, engine, patient) -> None:
        program = engine.catalog.add_program(engine.catalog.add_category())
        enroll(engine, patient, program)

        assert await engine.gate.get_category_programs(patient) == []

    @pytest.mark.asyncio
    async def test_requires_patient(self, engine, admin) -> None:
        with pytest.raises(UnauthorizedError):
            await engine.gate.get_category_programs(admin)

    @pytest.mark.asyncio
    async def test_requires_principal(self, engine) -> None:
        with pytest.raises(UnauthenticatedError):
            await engine.gate.get_category_programs(None)


class TestFilterProgramsByEnrollment:
    """Tests for filter_programs_by_enrollment."""

    @pytest.mark.asyncio
    async def test_pairs_program_with_enrollment(self, engine, patient) -> None:
        first = engine.catalog.add_program(title="First")
        second = engine.catalog.add_program(title="Second")
        enrollment = enroll(engine, patient, second)

        pairs = await engine.gate.filter_programs_by_enrollment(
            patient.id, [first, second]
        )

        assert len(pairs) == 1
        assert pairs[0][0] is second
        assert pairs[0][1].id == enrollment.id

    @pytest.mark.asyncio
    async def test_empty_input(self, engine, patient) -> None:
        assert await engine.gate.filter_programs_by_enrollment(patient.id, []) == []


class TestRequireAccess:
    """Tests for the single-resource checks."""

    @pytest.mark.asyncio
    async def test_program_not_found(self, engine, patient) -> None:
        with pytest.raises(ProgramNotFoundError):
            await engine.gate.require_program_access(patient, uuid4())

    @pytest.mark.asyncio
    async def test_program_not_enrolled(self, engine, patient) -> None:
        program = engine.catalog.add_program()

        with pytest.raises(NotEnrolledError) as exc_info:
            await engine.gate.require_program_access(patient, program.id)

        assert exc_info.value.kind is ErrorKind.UNAUTHORIZED
        assert exc_info.value.code == "not_enrolled"

    @pytest.mark.asyncio
    async def test_module_access_returns_enrollment(self, engine, patient) -> None:
        program = engine.catalog.add_program()
        module = engine.catalog.add_module(program)
        enrollment = enroll(engine, patient, program)

        found, found_enrollment = await engine.gate.require_module_access(
            patient, module.id
        )

        assert found is module
        assert found_enrollment.id == enrollment.id

    @pytest.mark.asyncio
    async def test_module_not_found(self, engine, patient) -> None:
        with pytest.raises(LearningModuleNotFoundError):
            await engine.gate.require_module_access(patient, uuid4())

    @pytest.mark.asyncio
    async def test_module_of_dropped_enrollment(self, engine, patient) -> None:
        program = engine.catalog.add_program()
        module = engine.catalog.add_module(program)
        enroll(engine, patient, program, EnrollmentStatus.DROPPED)

        with pytest.raises(NotEnrolledError):
            await engine.gate.require_module_access(patient, module.id)

    @pytest.mark.asyncio
    async def test_assessment_not_found(self, engine, patient) -> None:
        with pytest.raises(AssessmentNotFoundError):
            await engine.gate.require_assessment_access(patient, uuid4())

    @pytest.mark.asyncio
    async def test_assessment_of_other_program(self, engine, patient) -> None:
        program = engine.catalog.add_program()
        other = engine.catalog.add_program()
        assessment = engine.catalog.add_assessment(engine.catalog.add_module(program))
        enroll(engine, patient, other)

        with pytest.raises(NotEnrolledError):
            await engine.gate.require_assessment_access(patient, assessment.id)

    @pytest.mark.asyncio
    async def test_admin_is_rejected(self, engine, admin) -> None:
        program = engine.catalog.add_program()

        with pytest.raises(UnauthorizedError):
            await engine.gate.require_program_access(admin, program.id)
