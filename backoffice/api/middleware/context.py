"""Request context middleware for observability."""

import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar

import structlog
from fastapi import Request, Response
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware

from backoffice.api.models.context import RequestContext
from backoffice.observability.logging import get_logger
from backoffice.observability.metrics import REQUEST_COUNT, REQUEST_LATENCY

logger = get_logger(__name__)

_request_context: ContextVar[RequestContext | None] = ContextVar("request_context", default=None)


def get_request_context() -> RequestContext | None:
    """Return the RequestContext of the current request, if any."""
    return _request_context.get()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds request identifiers to every log line and records request metrics."""

    async def dispatch(  # type: ignore[override]
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        span_context = trace.get_current_span().get_span_context()
        trace_id = format(span_context.trace_id, "032x") if span_context.is_valid else ""
        span_id = format(span_context.span_id, "016x") if span_context.is_valid else ""

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        context = RequestContext(
            trace_id=trace_id or request_id,
            span_id=span_id,
            request_id=request_id,
        )
        token = _request_context.set(context)
        request.state.request_context = context

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            trace_id=context.trace_id,
            request_id=context.request_id,
        )

        start = time.perf_counter()
        logger.debug("request_started", method=request.method, path=request.url.path)
        try:
            response = await call_next(request)  # type: ignore[misc]
        finally:
            _request_context.reset(token)

        route = request.scope.get("route")
        route_path = getattr(route, "path", "unmatched")
        REQUEST_COUNT.labels(
            method=request.method, route=route_path, status=str(response.status_code)
        ).inc()
        REQUEST_LATENCY.labels(method=request.method, route=route_path).observe(
            time.perf_counter() - start
        )

        logger.debug(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )

        response.headers["X-Request-ID"] = context.request_id
        if trace_id:
            response.headers["X-Trace-ID"] = trace_id
        return response  # type: ignore[no-any-return]


def update_request_context(*, user_id: str | None = None) -> None:
    """Attach the authenticated user to the current request context and logs."""
    current = get_request_context()
    if current is None:
        return
    if user_id:
        current.user_id = user_id
        structlog.contextvars.bind_contextvars(user_id=user_id)
