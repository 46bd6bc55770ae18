"""Shared fixtures.

Settings are pinned to the testing environment before the application is
imported; the app is created without running its lifespan, so no database
connection is attempted and services are injected per test.
"""

import os
import tempfile
from collections.abc import Iterator
from uuid import uuid4

import pytest


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="rehabtrack-logs-"))
os.environ.setdefault("AUTH_SECRET_KEY", "test-secret-key-with-at-least-32-characters")

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from rehabtrack.auth.models import User  # noqa: E402
from rehabtrack.auth.permissions import UserRole  # noqa: E402
from rehabtrack.auth.schemas import Principal  # noqa: E402
from rehabtrack.auth.security import create_access_token  # noqa: E402
from tests.fakes import build_engine  # noqa: E402


@pytest.fixture
def engine():
    """Gate, tracker, admin service and grader over in-memory repositories."""
    return build_engine()


@pytest.fixture
def patient(engine) -> Principal:
    """Registered patient principal."""
    user = engine.users.add(
        User(id=uuid4(), email="patient@test.com", role=UserRole.PATIENT.value)
    )
    return Principal(id=user.id, role=user.role, email=user.email)


@pytest.fixture
def admin() -> Principal:
    return Principal(id=uuid4(), role=UserRole.ADMIN.value, email="admin@test.com")


@pytest.fixture
def app(engine) -> FastAPI:
    """Application with the in-memory engine published on app.state."""
    from rehabtrack.main import create_app

    application = create_app()
    application.state.access_gate = engine.gate
    application.state.progress_service = engine.tracker
    application.state.enrollment_service = engine.enrollments
    application.state.assessment_grader = engine.grader
    application.state.mood_service = engine.mood
    return application


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Test client (lifespan not started)."""
    yield TestClient(app)


def auth_headers(principal: Principal) -> dict[str, str]:
    token = create_access_token(principal.id, principal.role, principal.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def patient_headers(patient: Principal) -> dict[str, str]:
    return auth_headers(patient)


@pytest.fixture
def admin_headers(admin: Principal) -> dict[str, str]:
    return auth_headers(admin)
