"""Request middleware for context management and request logging."""

import re
import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from rehabtrack.core.context import clear_context, set_request_id, set_trace_id


logger = structlog.get_logger(__name__)

# Incoming IDs end up in every log line; anything else is replaced
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def _safe_header_id(value: str | None) -> str | None:
    if value and _SAFE_ID.match(value):
        return value
    return None


def trace_id_from_traceparent(traceparent: str | None) -> str | None:
    """Trace ID of a W3C ``traceparent`` header (version-trace-parent-flags)."""
    if not traceparent:
        return None
    parts = traceparent.split("-")
    if len(parts) != 4 or len(parts[1]) != 32:
        return None
    return parts[1]


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds request/trace IDs to the log context and times each request.

    Both IDs are echoed back on the response. Requests slower than
    ``slow_request_ms`` are logged as warnings even on excluded paths.
    """

    REQUEST_ID_HEADER = "X-Request-ID"
    TRACE_ID_HEADER = "X-Trace-ID"
    TRACEPARENT_HEADER = "traceparent"
    RESPONSE_TIME_HEADER = "X-Response-Time-Ms"

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        exclude_paths: list[str] | None = None,
        slow_request_ms: float | None = None,
    ) -> None:
        super().__init__(app)
        self.log_requests = log_requests
        self.exclude_paths = exclude_paths or []
        self.slow_request_ms = slow_request_ms

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start_time = time.perf_counter()

        request_id = set_request_id(
            _safe_header_id(request.headers.get(self.REQUEST_ID_HEADER))
        )
        trace_id = _safe_header_id(
            request.headers.get(self.TRACE_ID_HEADER)
        ) or trace_id_from_traceparent(request.headers.get(self.TRACEPARENT_HEADER))
        if trace_id:
            set_trace_id(trace_id)
        request.state.request_id = request_id

        should_log = (
            self.log_requests
            and request.method != "OPTIONS"
            and not self._should_exclude(request.url.path)
        )
        if should_log:
            logger.info("request_started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                duration_ms=self._elapsed_ms(start_time),
            )
            clear_context()
            raise

        duration_ms = self._elapsed_ms(start_time)
        is_slow = self.slow_request_ms is not None and duration_ms >= self.slow_request_ms

        if should_log or is_slow:
            log_method = (
                logger.warning
                if is_slow or response.status_code >= 400
                else logger.info
            )
            log_method(
                "request_slow" if is_slow else "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
            )

        response.headers[self.REQUEST_ID_HEADER] = request_id
        response.headers[self.RESPONSE_TIME_HEADER] = str(duration_ms)
        if trace_id:
            response.headers[self.TRACE_ID_HEADER] = trace_id
        clear_context()
        return response

    def _should_exclude(self, path: str) -> bool:
        return any(path.startswith(excluded) for excluded in self.exclude_paths)

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * 1000, 2)
