"""ironwatch API layer: routes, schemas and middleware."""

from ironwatch.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from ironwatch.api.routes import router
from ironwatch.api.schemas import (
    ErrorResponse,
    HealthResponse,
    LineWebhookRequest,
    TeamArticlesResponse,
    TeamListResponse,
    TeamStatusResponse,
    WebhookResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "router",
    "ErrorResponse",
    "HealthResponse",
    "LineWebhookRequest",
    "TeamArticlesResponse",
    "TeamListResponse",
    "TeamStatusResponse",
    "WebhookResponse",
]
