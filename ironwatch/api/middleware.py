"""API middleware: request logging and error handling.

Starlette middleware is a stack (last added, first executed).  In
``main.py``::

    app.add_middleware(ErrorHandlingMiddleware)    # inner
    app.add_middleware(RequestLoggingMiddleware)   # outermost

so RequestLoggingMiddleware sees the final status code, including the
JSON error bodies produced by ErrorHandlingMiddleware.
"""

from __future__ import annotations

import time

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from ironwatch.api.schemas import ErrorResponse
from ironwatch.utils.errors import (
    ChatDeliveryError,
    FetchError,
    IronwatchError,
    ParseError,
)
from ironwatch.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Failures of an upstream service (listing site, chat API) surface as 502.
_UPSTREAM_ERRORS = (FetchError, ParseError, ChatDeliveryError)


def status_code_for(exc: IronwatchError) -> int:
    return 502 if isinstance(exc, _UPSTREAM_ERRORS) else 500


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``IronwatchError`` subclasses and return structured JSON errors.

    The client sees only the error class name and message; the provider
    name and path go to the server log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except IronwatchError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
            )
            return JSONResponse(
                status_code=status_code_for(exc),
                content=body.model_dump(),
            )
