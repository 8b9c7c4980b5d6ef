"""Pydantic request/response schemas for the ironwatch HTTP API.

Request schemas end with "Request", response schemas with "Response".
FastAPI uses them for validation, serialization and the OpenAPI docs.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ironwatch.models.article import Article, MemberStatus


class ErrorResponse(BaseModel):
    """Sanitized error body returned for application errors."""

    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    store: str
    chat_enabled: bool


class TeamListResponse(BaseModel):
    """Known team IDs (teams with at least one subscribed receiver)."""

    team_ids: list[str] = Field(default_factory=list)


class TeamArticlesResponse(BaseModel):
    """Result of a fetch-merge-write cycle."""

    team_id: str
    force: bool
    count: int
    articles: list[Article] = Field(default_factory=list)


class TeamStatusResponse(BaseModel):
    team_id: str
    day: int
    per_member: list[MemberStatus] = Field(default_factory=list)
    message: str


class LineWebhookRequest(BaseModel):
    """LINE webhook body.  Events are kept as raw dicts; only ``check``
    commands are interpreted by :class:`ChatCommandService`."""

    destination: str | None = None
    events: list[dict[str, Any]] = Field(default_factory=list)


class WebhookResponse(BaseModel):
    handled: int = 0
