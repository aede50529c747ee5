"""
HTTP observability middleware.

Routes: all

Dependencies: starlette, ragsync.observability
System role: Correlation ID propagation and access logging for the API
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ragsync.observability.correlation import set_correlation_id
from ragsync.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Adopt or generate a correlation ID and echo it on the response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access log with timing.

    Must run inside CorrelationMiddleware so records carry the request's ID.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        route = f"{request.method} {request.url.path}"

        try:
            response = await call_next(request)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:dispatch - {route} failed",
                e,
                method=request.method,
                path=request.url.path,
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        log_with_context(
            logger,
            level,
            f"{__name__}:dispatch - {route} {response.status_code}",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response
