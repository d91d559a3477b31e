"""API middleware: correlation ID, request metadata, access log."""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from rentdesk.core.context import correlation_id_ctx
from rentdesk.core.request_meta import RequestMeta
from rentdesk.security.impersonation import ImpersonationRequest

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Generate or preserve correlation ID; attach to request.state, response header, and logging context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        correlation_id_ctx.set(correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach client IP / user agent and the (unverified) impersonation request to request.state."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request.state.meta = RequestMeta.from_headers(request.headers)
        request.state.impersonation = ImpersonationRequest.from_query(request.query_params)
        request.state.user_id = None
        request.state.company_id = None
        return await call_next(request)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """After response: one structured line per request (path, method, status, user, company)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        meta = getattr(request.state, "meta", None)
        logger.info(
            "request_audit",
            extra={
                "correlation_id": getattr(request.state, "correlation_id", None),
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "user_id": getattr(request.state, "user_id", None),
                "company_id": getattr(request.state, "company_id", None),
                "ip": meta.ip if meta else None,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response
