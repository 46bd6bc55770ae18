"""RehabTrack API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rehabtrack.access.repository import CategoryRepository
from rehabtrack.access.service import AccessGate
from rehabtrack.assessments.repository import AttemptRepository
from rehabtrack.assessments.router import router as assessments_router
from rehabtrack.assessments.service import AssessmentGrader
from rehabtrack.auth.repository import UserRepository
from rehabtrack.catalog.repository import CatalogRepository
from rehabtrack.config import get_settings
from rehabtrack.core.context import get_request_id
from rehabtrack.core.database.async_cassandra import (
    init_async_cassandra,
    shutdown_async_cassandra,
)
from rehabtrack.core.errors import EngineError, ErrorKind
from rehabtrack.core.http import handle_engine_error
from rehabtrack.core.logging import configure_structlog, get_logger
from rehabtrack.core.middleware import RequestContextMiddleware
from rehabtrack.health import router as health_router
from rehabtrack.mood.repository import MoodRepository
from rehabtrack.mood.router import router as mood_router
from rehabtrack.mood.service import MoodService
from rehabtrack.progress.admin_router import enrollments_router as admin_enrollments_router
from rehabtrack.progress.admin_router import patients_router as admin_patients_router
from rehabtrack.progress.enrollment_service import EnrollmentService
from rehabtrack.progress.repository import ProgressRepository
from rehabtrack.progress.router import modules_router, programs_router
from rehabtrack.progress.router import router as progress_router
from rehabtrack.progress.service import ProgressService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


# Application state for dependency injection
class AppState:
    """Application state container."""

    cassandra_session: Any = None
    access_gate: AccessGate | None = None
    progress_service: ProgressService | None = None
    enrollment_service: EnrollmentService | None = None
    assessment_grader: AssessmentGrader | None = None
    mood_service: MoodService | None = None


app_state = AppState()


def wire_services(app: FastAPI, session: Any, keyspace: str) -> None:
    """Build repositories and services on a session and publish them on app.state."""
    users = UserRepository(session, keyspace)
    catalog = CatalogRepository(session, keyspace)
    categories = CategoryRepository(session, keyspace)
    progress = ProgressRepository(session, keyspace)
    attempts = AttemptRepository(session, keyspace)

    app_state.access_gate = AccessGate(catalog, categories, progress)
    app_state.progress_service = ProgressService(catalog, progress, app_state.access_gate)
    app_state.enrollment_service = EnrollmentService(
        users, catalog, categories, progress
    )
    app_state.assessment_grader = AssessmentGrader(
        catalog, attempts, app_state.access_gate
    )
    app_state.mood_service = MoodService(MoodRepository(session, keyspace))

    app.state.access_gate = app_state.access_gate
    app.state.progress_service = app_state.progress_service
    app.state.enrollment_service = app_state.enrollment_service
    app.state.assessment_grader = app_state.assessment_grader
    app.state.mood_service = app_state.mood_service


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Initialize Cassandra (async)
    try:
        app_state.cassandra_session = await init_async_cassandra()
        logger.info("cassandra_initialized")

        wire_services(app, app_state.cassandra_session, settings.cassandra_keyspace)
        logger.info("engine_services_initialized")
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await shutdown_async_cassandra()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # Never let Starlette render stack traces; handlers below log details instead
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Rehabilitation treatment progress and assessment API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
        slow_request_ms=settings.log_slow_request_ms,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    def _error_response(
        request: Request,
        status_code: int,
        message: str,
        kind: ErrorKind | str | None,
        headers: dict[str, str] | None = None,
        **extra: Any,
    ) -> ORJSONResponse:
        """Render the error body shared by every handler."""
        return ORJSONResponse(
            status_code=status_code,
            headers=headers,
            content={
                "error": True,
                "kind": kind.value if isinstance(kind, ErrorKind) else kind,
                "message": message,
                "status_code": status_code,
                "request_id": _get_request_id_safe(request),
                **extra,
            },
        )

    @app.exception_handler(EngineError)
    async def engine_error_handler(request: Request, exc: EngineError) -> ORJSONResponse:
        """Render engine errors that escaped a router."""
        http_exc = handle_engine_error(exc)
        logger.warning(
            "engine_error",
            kind=exc.kind.value,
            code=exc.code,
            detail=exc.message,
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request, http_exc.status_code, exc.message, exc.kind, http_exc.headers
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Render HTTP errors; plain 5xx details are never exposed."""
        kind = getattr(exc, "kind", None)
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            kind=kind.value if kind else None,
            path=request.url.path,
            method=request.method,
        )
        hide_detail = kind is None and exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
        return _error_response(
            request,
            exc.status_code,
            "Internal server error" if hide_detail else str(exc.detail),
            kind,
            exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Reject malformed requests before any service runs."""
        errors = exc.errors()
        logger.warning(
            "validation_error",
            errors=errors,
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation error",
            ErrorKind.INVALID_INPUT,
            details=[
                {
                    "field": ".".join(str(loc) for loc in err.get("loc", [])),
                    "message": err.get("msg", "Invalid value"),
                }
                for err in errors
            ],
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler; details are logged internally, never returned."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred. Please try again later.",
            None,
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(programs_router)
    app.include_router(modules_router)
    app.include_router(progress_router)
    app.include_router(assessments_router)
    app.include_router(mood_router)
    app.include_router(admin_patients_router)
    app.include_router(admin_enrollments_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "RehabTrack API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
