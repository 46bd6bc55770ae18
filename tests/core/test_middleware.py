"""Tests for the request context middleware."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from rehabtrack.core.context import get_context
from rehabtrack.core.middleware import RequestContextMiddleware, trace_id_from_traceparent


TRACE = "4bf92f3577b34da6a3ce929d0e0e4736"


def build_client(**kwargs) -> TestClient:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware, **kwargs)

    @app.get("/context")
    async def context() -> dict:
        return get_context()

    return TestClient(app)


class TestTraceparent:
    """Tests for trace_id_from_traceparent."""

    def test_valid_header(self) -> None:
        header = f"00-{TRACE}-00f067aa0ba902b7-01"
        assert trace_id_from_traceparent(header) == TRACE

    def test_malformed_header(self) -> None:
        assert trace_id_from_traceparent("garbage") is None
        assert trace_id_from_traceparent("00-short-00f067aa0ba902b7-01") is None
        assert trace_id_from_traceparent(None) is None


class TestRequestContextMiddleware:
    """Tests for request and trace ID propagation."""

    def test_generates_request_id(self) -> None:
        response = build_client().get("/context")

        request_id = response.headers["X-Request-ID"]
        assert request_id
        assert response.json()["request_id"] == request_id
        assert float(response.headers["X-Response-Time-Ms"]) >= 0

    def test_unsafe_request_id_replaced(self) -> None:
        response = build_client().get(
            "/context", headers={"X-Request-ID": "bad id with spaces"}
        )

        assert response.headers["X-Request-ID"] != "bad id with spaces"

    def test_trace_id_from_traceparent(self) -> None:
        response = build_client().get(
            "/context", headers={"traceparent": f"00-{TRACE}-00f067aa0ba902b7-01"}
        )

        assert response.json()["trace_id"] == TRACE
        assert response.headers["X-Trace-ID"] == TRACE
