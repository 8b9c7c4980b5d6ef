"""FastAPI routes for ironwatch.

Endpoint                     Method  Description
─────────────────────────────────────────────────────────────────────
/                            GET     Known team IDs
/health                      GET     Liveness + configured backends
/teams/{team_id}             GET     Fetch-merge-write cycle (?force=0|1)
/teams/{team_id}/status      GET     Per-member counts for the team
/callback                    POST    LINE webhook (``check <teamId>``)

Services are resolved from ``app.state`` (populated in ``main.build_services``)
through ``Depends`` helpers and ``Annotated`` aliases, so tests can mount
the router on a bare app with fakes on its state.
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from pydantic import ValidationError

from ironwatch import __version__
from ironwatch.api.schemas import (
    ErrorResponse,
    HealthResponse,
    LineWebhookRequest,
    TeamArticlesResponse,
    TeamListResponse,
    TeamStatusResponse,
    WebhookResponse,
)
from ironwatch.config.settings import Settings
from ironwatch.interfaces.article_store import IArticleStore
from ironwatch.providers.chat.line_provider import verify_signature
from ironwatch.services.chat_commands import ChatCommandService
from ironwatch.services.team_status import TeamStatusService, format_status_message
from ironwatch.services.team_sync import TeamArticleSync
from ironwatch.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter()

_TEAM_ID_PATTERN = r"^\d+$"


# ---------------------------------------------------------------------------
# Dependency injection helpers: resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _get_store(request: Request) -> IArticleStore:
    return request.app.state.store


def _get_team_sync(request: Request) -> TeamArticleSync:
    return request.app.state.team_sync


def _get_status_service(request: Request) -> TeamStatusService:
    return request.app.state.status_service


def _get_chat_commands(request: Request) -> ChatCommandService:
    return request.app.state.chat_commands


SettingsDep = Annotated[Settings, Depends(_get_settings)]
StoreDep = Annotated[IArticleStore, Depends(_get_store)]
TeamSyncDep = Annotated[TeamArticleSync, Depends(_get_team_sync)]
StatusServiceDep = Annotated[TeamStatusService, Depends(_get_status_service)]
ChatCommandsDep = Annotated[ChatCommandService, Depends(_get_chat_commands)]
TeamIdPath = Annotated[str, Path(pattern=_TEAM_ID_PATTERN, description="Numeric team ID")]


# ---------------------------------------------------------------------------
# Team endpoints
# ---------------------------------------------------------------------------


@router.get("/", response_model=TeamListResponse, summary="List known teams")
async def list_teams(store: StoreDep) -> TeamListResponse:
    """Return the IDs of teams with at least one subscribed receiver."""
    return TeamListResponse(team_ids=await store.list_team_ids())


@router.get(
    "/teams/{team_id}",
    response_model=TeamArticlesResponse,
    responses={502: {"model": ErrorResponse}},
    summary="Fetch, merge and cache a team's articles",
)
async def get_team_articles(
    team_id: TeamIdPath,
    team_sync: TeamSyncDep,
    force: bool = Query(default=False, description="Walk every page, ignoring the cache"),
) -> TeamArticlesResponse:
    """Run one fetch-merge-write cycle and return the merged article set."""
    articles = await team_sync.sync(team_id, force=force)
    return TeamArticlesResponse(
        team_id=team_id,
        force=force,
        count=len(articles),
        articles=articles,
    )


@router.get(
    "/teams/{team_id}/status",
    response_model=TeamStatusResponse,
    responses={502: {"model": ErrorResponse}},
    summary="Per-member article counts",
)
async def get_team_status(
    team_id: TeamIdPath,
    status_service: StatusServiceDep,
    settings: SettingsDep,
) -> TeamStatusResponse:
    status = await status_service.build_status(team_id)
    return TeamStatusResponse(
        team_id=status.team_id,
        day=status.day,
        per_member=status.per_member,
        message=format_status_message(status, settings.team_url(team_id)),
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(store: StoreDep, settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        version=__version__,
        store=store.get_provider_name(),
        chat_enabled=settings.chat_enabled(),
    )


# ---------------------------------------------------------------------------
# LINE webhook
# ---------------------------------------------------------------------------


@router.post(
    "/callback",
    response_model=WebhookResponse,
    responses={400: {"model": ErrorResponse}},
    summary="LINE webhook",
)
async def line_callback(
    request: Request,
    chat_commands: ChatCommandsDep,
    settings: SettingsDep,
) -> WebhookResponse:
    """Handle ``check <teamId>`` commands from LINE.

    When ``LINE_CHANNEL_SECRET`` is configured the ``X-Line-Signature``
    header must match the body.
    """
    body = await request.body()
    if settings.line_channel_secret:
        signature = request.headers.get("X-Line-Signature", "")
        if not verify_signature(settings.line_channel_secret, body, signature):
            _logger.warning("webhook_signature_invalid", path=str(request.url.path))
            raise HTTPException(status_code=400, detail="Invalid signature")

    try:
        payload = LineWebhookRequest.model_validate_json(body or b"{}")
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Malformed webhook body") from exc

    handled = await chat_commands.handle_events(payload.events)
    return WebhookResponse(handled=handled)
