"""API middleware: request logging and error handling.

# Starlette middleware runs last-added-first, so in create_app():
#
#     app.add_middleware(ErrorHandlingMiddleware)
#     app.add_middleware(RequestLoggingMiddleware)   # outermost
#
# RequestLoggingMiddleware therefore logs the status code that
# ErrorHandlingMiddleware produced.
"""

from __future__ import annotations

import time

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import CycloneError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code and duration."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            _logger.debug(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=response.status_code if response else 500,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn ``CycloneError`` into a JSON :class:`ErrorResponse`; details stay in the log."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except CycloneError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
            )
            body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
            return JSONResponse(status_code=500, content=body.model_dump())
