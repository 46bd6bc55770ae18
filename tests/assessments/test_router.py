"""Tests for assessment endpoints."""

from uuid import uuid4

import pytest

from rehabtrack.progress.models import Enrollment, EnrollmentStatus


@pytest.fixture
def assessment(engine, patient):
    program = engine.catalog.add_program(engine.catalog.add_category())
    engine.progress.add_enrollment(
        Enrollment(
            patient_id=patient.id,
            program_id=program.id,
            status=EnrollmentStatus.IN_PROGRESS.value,
        )
    )
    return engine.catalog.add_assessment(engine.catalog.add_module(program))


class TestAssessmentEndpoints:
    """Tests for /v1/assessments."""

    def test_get_assessment_hides_answers(
        self, client, engine, assessment, patient_headers
    ) -> None:
        engine.catalog.add_choice_question(assessment, points=5)

        response = client.get(f"/v1/assessments/{assessment.id}", headers=patient_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total_points"] == 5
        option = data["questions"][0]["options"][0]
        assert set(option) == {"id", "option_text", "sequence_number"}

    def test_submit_attempt(self, client, engine, assessment, patient_headers) -> None:
        # Arrange
        question = engine.catalog.add_choice_question(assessment, points=5)
        engine.catalog.add_choice_question(assessment, points=5)
        payload = {
            "answers": [
                {
                    "question_id": str(question.id),
                    "selected_option_id": str(question.correct_options[0].id),
                }
            ]
        }

        # Act
        response = client.post(
            f"/v1/assessments/{assessment.id}/attempts",
            json=payload,
            headers=patient_headers,
        )

        # Assert
        assert response.status_code == 201
        data = response.json()
        assert data["score"] == 50
        assert data["passed"] is False
        assert data["responses"][0]["is_correct"] is True

        fetched = client.get(
            f"/v1/assessments/attempts/{data['id']}", headers=patient_headers
        )
        assert fetched.status_code == 200
        assert fetched.json()["score"] == 50

    def test_submit_empty_answers(
        self, client, engine, assessment, patient_headers
    ) -> None:
        response = client.post(
            f"/v1/assessments/{assessment.id}/attempts",
            json={"answers": []},
            headers=patient_headers,
        )

        assert response.status_code == 422
        assert response.json()["kind"] == "invalid_input"
        assert engine.attempts.writes == []

    def test_submit_not_enrolled(self, client, engine, patient_headers) -> None:
        other = engine.catalog.add_assessment(
            engine.catalog.add_module(engine.catalog.add_program())
        )
        question = engine.catalog.add_choice_question(other)

        response = client.post(
            f"/v1/assessments/{other.id}/attempts",
            json={"answers": [{"question_id": str(question.id)}]},
            headers=patient_headers,
        )

        assert response.status_code == 403
        assert response.json()["kind"] == "unauthorized"

    def test_unknown_attempt(self, client, patient_headers) -> None:
        response = client.get(
            f"/v1/assessments/attempts/{uuid4()}", headers=patient_headers
        )

        assert response.status_code == 404

    def test_list_assessments(self, client, patient_headers) -> None:
        response = client.get("/v1/assessments", headers=patient_headers)

        assert response.status_code == 200
        assert response.json() == {"available": [], "completed": []}


class TestAssessmentAuthErrors:
    """Auth and availability failures carry an error kind."""

    def test_missing_token(self, client) -> None:
        response = client.get("/v1/assessments")

        assert response.status_code == 401
        assert response.json()["kind"] == "unauthenticated"
        assert response.json()["message"] == "Not authenticated"

    def test_token_without_subject(self, client) -> None:
        from jose import jwt

        from rehabtrack.config import get_settings

        settings = get_settings()
        token = jwt.encode(
            {"role": "patient", "type": "access"},
            settings.auth_secret_key,
            algorithm=settings.auth_algorithm,
        )

        response = client.get(
            "/v1/assessments", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json()["kind"] == "unauthenticated"

    def test_admin_rejected(self, client, admin_headers) -> None:
        response = client.get("/v1/assessments", headers=admin_headers)

        assert response.status_code == 403
        assert response.json()["kind"] == "unauthorized"
        assert response.json()["message"] == "Insufficient permissions"

    def test_grader_unavailable(self, app, client, patient_headers) -> None:
        app.state.assessment_grader = None

        response = client.get("/v1/assessments", headers=patient_headers)

        assert response.status_code == 503
        assert response.json()["kind"] == "dependency_failure"
