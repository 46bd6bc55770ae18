"""Tests for patient progress and admin enrollment endpoints."""

from uuid import uuid4

from rehabtrack.access.models import PatientCategory
from rehabtrack.progress.models import Enrollment, EnrollmentStatus


def seed_enrolled_program(engine, patient, status=EnrollmentStatus.IN_PROGRESS):
    category = engine.catalog.add_category()
    program = engine.catalog.add_program(category, title="Back care", duration_days=28)
    engine.categories.assignments[patient.id] = PatientCategory(
        patient_id=patient.id, category_id=category.id
    )
    enrollment = engine.progress.add_enrollment(
        Enrollment(patient_id=patient.id, program_id=program.id, status=status.value)
    )
    return category, program, enrollment


class TestAuthentication:
    """Tests for authentication and role checks."""

    def test_missing_token(self, client) -> None:
        response = client.get("/v1/programs")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["kind"] == "unauthenticated"
        assert response.json()["message"] == "Not authenticated"

    def test_invalid_token(self, client) -> None:
        response = client.get(
            "/v1/programs", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401
        assert response.json()["kind"] == "unauthenticated"

    def test_admin_cannot_use_patient_routes(self, client, admin_headers) -> None:
        response = client.get("/v1/programs", headers=admin_headers)

        assert response.status_code == 403
        assert response.json()["kind"] == "unauthorized"

    def test_patient_cannot_use_admin_routes(
        self, client, patient, patient_headers
    ) -> None:
        response = client.get(
            f"/v1/admin/patients/{patient.id}/enrollments", headers=patient_headers
        )

        assert response.status_code == 403
        assert response.json()["kind"] == "unauthorized"


class TestProgramEndpoints:
    """Tests for /v1/programs."""

    def test_list_programs(self, client, engine, patient, patient_headers) -> None:
        _, program, enrollment = seed_enrolled_program(engine, patient)

        response = client.get("/v1/programs", headers=patient_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == str(program.id)
        assert data["items"][0]["enrollment"]["id"] == str(enrollment.id)

    def test_list_programs_without_category(self, client, patient_headers) -> None:
        response = client.get("/v1/programs", headers=patient_headers)

        assert response.status_code == 200
        assert response.json() == {"items": [], "total": 0}

    def test_invalid_category(self, client, patient_headers) -> None:
        response = client.get(
            "/v1/programs", params={"category": "bogus"}, headers=patient_headers
        )

        assert response.status_code == 422
        assert response.json()["kind"] == "invalid_input"

    def test_modules_not_enrolled(self, client, engine, patient_headers) -> None:
        program = engine.catalog.add_program()

        response = client.get(
            f"/v1/programs/{program.id}/modules", headers=patient_headers
        )

        assert response.status_code == 403
        assert response.json()["kind"] == "unauthorized"

    def test_modules_unknown_program(self, client, patient_headers) -> None:
        response = client.get(f"/v1/programs/{uuid4()}/modules", headers=patient_headers)

        assert response.status_code == 404
        assert response.json()["kind"] == "not_found"


class TestModuleEndpoints:
    """Tests for /v1/modules and /v1/progress."""

    def test_complete_and_progress(
        self, client, engine, patient, patient_headers
    ) -> None:
        # Arrange
        _, program, enrollment = seed_enrolled_program(engine, patient)
        first = engine.catalog.add_module(program, 1)
        engine.catalog.add_module(program, 2)

        # Act
        complete = client.post(
            f"/v1/modules/{first.id}/complete", headers=patient_headers
        )
        progress = client.get(
            f"/v1/progress/programs/{program.id}", headers=patient_headers
        )

        # Assert
        assert complete.status_code == 200
        assert complete.json()["status"] == "completed"
        data = progress.json()
        assert data["required_total"] == 2
        assert data["required_completed"] == 1
        assert float(data["progress_percent"]) == 50.0
        assert data["enrollment"]["status"] == "in_progress"

    def test_access_and_time(self, client, engine, patient, patient_headers) -> None:
        _, program, _ = seed_enrolled_program(engine, patient)
        module = engine.catalog.add_module(program)

        access = client.post(f"/v1/modules/{module.id}/access", headers=patient_headers)
        timed = client.post(
            f"/v1/modules/{module.id}/time",
            json={"seconds": 45},
            headers=patient_headers,
        )

        assert access.status_code == 200
        assert access.json()["status"] == "in_progress"
        assert timed.json()["time_spent_seconds"] == 45

    def test_negative_time_rejected(
        self, client, engine, patient, patient_headers
    ) -> None:
        _, program, _ = seed_enrolled_program(engine, patient)
        module = engine.catalog.add_module(program)

        response = client.post(
            f"/v1/modules/{module.id}/time",
            json={"seconds": -1},
            headers=patient_headers,
        )

        assert response.status_code == 422
        assert engine.progress.writes == []

    def test_dropped_enrollment_forbidden(
        self, client, engine, patient, patient_headers
    ) -> None:
        _, program, _ = seed_enrolled_program(engine, patient, EnrollmentStatus.DROPPED)
        module = engine.catalog.add_module(program)

        response = client.get(f"/v1/modules/{module.id}/content", headers=patient_headers)

        assert response.status_code == 403
        assert engine.progress.writes == []


class TestAdminEndpoints:
    """Tests for /v1/admin."""

    def test_assign_category(self, client, engine, patient, admin_headers) -> None:
        category = engine.catalog.add_category()
        engine.catalog.add_program(category)

        response = client.put(
            f"/v1/admin/patients/{patient.id}/category",
            json={"category_id": str(category.id)},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["category_id"] == str(category.id)
        assert data["enrolled_programs"] == 1

    def test_assign_category_unknown_patient(
        self, client, engine, admin_headers
    ) -> None:
        category = engine.catalog.add_category()

        response = client.put(
            f"/v1/admin/patients/{uuid4()}/category",
            json={"category_id": str(category.id)},
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_enroll_and_drop(self, client, engine, patient, admin_headers) -> None:
        program = engine.catalog.add_program()

        created = client.post(
            "/v1/admin/enrollments",
            json={"patient_id": str(patient.id), "program_id": str(program.id)},
            headers=admin_headers,
        )
        enrollment_id = created.json()["id"]
        dropped = client.post(
            f"/v1/admin/enrollments/{enrollment_id}/drop", headers=admin_headers
        )
        listed = client.get(
            f"/v1/admin/patients/{patient.id}/enrollments", headers=admin_headers
        )

        assert created.status_code == 201
        assert created.json()["status"] == "assigned"
        assert dropped.json()["status"] == "dropped"
        assert listed.json() == {"items": [], "total": 0}
