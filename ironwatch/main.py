"""ironwatch FastAPI application entry point.

Wires providers and services together via constructor injection.  Loads
configuration from ``.env`` and ``config/config.yaml``, configures
structured logging, and exposes the app for uvicorn.

``build_services`` is also used by the CLI, which runs one-shot commands
outside the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from ironwatch import __version__
from ironwatch.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from ironwatch.api.routes import router
from ironwatch.config.loader import load_config
from ironwatch.config.settings import Settings
from ironwatch.interfaces.article_store import IArticleStore
from ironwatch.interfaces.chat_provider import IChatProvider
from ironwatch.providers.chat.line_provider import LineMessagingProvider
from ironwatch.providers.scraper.ithome_scraper import IThomeTeamScraper
from ironwatch.providers.store.memory_store import MemoryArticleStore
from ironwatch.providers.store.sqlite_store import SQLiteArticleStore
from ironwatch.services.article_fetcher import IncrementalArticleFetcher
from ironwatch.services.broadcast import StatusBroadcastService
from ironwatch.services.cache_writer import ArticleCacheWriter
from ironwatch.services.chat_commands import ChatCommandService
from ironwatch.services.team_status import TeamStatusService
from ironwatch.services.team_sync import TeamArticleSync
from ironwatch.utils.concurrency import TeamLockRegistry
from ironwatch.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_store(config: dict[str, Any]) -> IArticleStore:
    """Return the article store selected by ``store.backend``."""
    if config["store"]["backend"] == "memory":
        return MemoryArticleStore()
    return SQLiteArticleStore(db_path=config["store"]["db_path"])


def _build_chat_provider(app_settings: Settings, http_client: httpx.AsyncClient) -> IChatProvider | None:
    """Return the LINE provider, or ``None`` when no access token is set."""
    if not app_settings.chat_enabled():
        return None
    return LineMessagingProvider(
        http_client=http_client,
        channel_access_token=app_settings.line_channel_access_token,
        base_url=app_settings.line_api_base_url,
    )


# ---------------------------------------------------------------------------
# DI assembly
# ---------------------------------------------------------------------------


def build_services(
    app_settings: Settings,
    config: dict[str, Any] | None = None,
    http_client: httpx.AsyncClient | None = None,
    store: IArticleStore | None = None,
) -> dict[str, Any]:
    """Construct every provider and service instance.

    Returns a flat dict of named components; the web app stores them on
    ``app.state`` and the CLI uses them directly.  The caller owns
    ``http_client`` and must close it.
    """
    config = config or load_config(settings=app_settings)
    http_client = http_client or httpx.AsyncClient()

    scraper_cfg = config["scraper"]
    fetch_cfg = config["fetch"]

    scraper = IThomeTeamScraper(
        http_client=http_client,
        url_template=scraper_cfg["team_url_template"],
        timeout=float(scraper_cfg["timeout"]),
        max_retries=int(scraper_cfg["max_retries"]),
        retry_backoff=float(scraper_cfg["retry_backoff"]),
    )
    store = store or _build_store(config)
    chat = _build_chat_provider(app_settings, http_client)

    fetcher = IncrementalArticleFetcher(
        scraper=scraper,
        store=store,
        max_pages=int(fetch_cfg["max_pages"]),
    )
    writer = ArticleCacheWriter(store=store)
    team_sync = TeamArticleSync(
        fetcher=fetcher,
        writer=writer,
        locks=TeamLockRegistry(),
        walk_timeout=float(fetch_cfg["walk_timeout"]),
    )
    status_service = TeamStatusService(scraper=scraper, team_sync=team_sync)
    chat_commands = ChatCommandService(
        status_service=status_service,
        store=store,
        chat=chat,
        team_url=app_settings.team_url,
    )
    broadcaster = (
        StatusBroadcastService(
            status_service=status_service,
            store=store,
            chat=chat,
            team_url=app_settings.team_url,
        )
        if chat is not None
        else None
    )

    return {
        "settings": app_settings,
        "config": config,
        "http_client": http_client,
        "scraper": scraper,
        "store": store,
        "chat": chat,
        "fetcher": fetcher,
        "writer": writer,
        "team_sync": team_sync,
        "status_service": status_service,
        "chat_commands": chat_commands,
        "broadcaster": broadcaster,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = build_services(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["store"].initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        store=components["store"].get_provider_name(),
        chat_enabled=components["chat"] is not None,
    )

    yield

    await components["store"].close()
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="ironwatch API",
        version=__version__,
        description=(
            "Tracks iThome Ironman team article submissions: incrementally "
            "scrapes team listings, caches seen articles and reports "
            "per-member counts over LINE."
        ),
        lifespan=_lifespan,
    )

    # Last added = first executed.
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)

    application.include_router(router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# Server entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "ironwatch.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
