"""Shared pytest fixtures for the ironwatch test suite."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from ironwatch.config.settings import Settings
from ironwatch.interfaces.page_scraper import IPageScraper
from ironwatch.models.article import Article
from ironwatch.providers.store.memory_store import MemoryArticleStore
from ironwatch.utils.errors import FetchError
from ironwatch.utils.logging import configure_logging

# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_article(article_id: str, author: str = "Alice", day: int = 1, title: str | None = None) -> Article:
    """Build an article with a link derived from its ID."""
    return Article(
        id=article_id,
        author=author,
        title=title or f"Article {article_id}",
        link=f"https://ithelp.ithome.com.tw/articles/{article_id}",
        day=day,
    )


def make_settings(**overrides) -> Settings:
    """Build a Settings instance with safe test defaults."""
    defaults = {
        "line_channel_access_token": "",
        "line_channel_secret": "",
        "team_url_template": "https://ironman.example/team/{team_id}",
        "store_backend": "memory",
        "article_db_path": "data/test-articles.db",
        "app_env": "test",
    }
    defaults.update(overrides)
    return Settings(**defaults)


def listing_item(article_id: str, author: str, title: str, day: int | str) -> str:
    """One ``.ir-list`` entry in the team page markup."""
    return f"""
    <div class="ir-list">
      <div class="ir-list__group">
        <div class="ir-list__group-topic">
          DAY <span class="ir-list__group-topic-num"> {day} </span>
        </div>
      </div>
      <h3 class="ir-list__title">
        <a href="https://ithelp.ithome.com.tw/articles/{article_id}">{title}</a>
      </h3>
      <div class="ir-list__info">
        <div class="ir-list__user"><span class="ir-list__name">{author}</span></div>
      </div>
    </div>"""


def team_page_html(items: list[str] | None = None, day: int | None = 4, members: list[str] | None = None) -> str:
    """A minimal team page: day counter, roster and article list."""
    day_html = f'<div class="team-dashboard__day"> {day} </div>' if day is not None else ""
    members_html = "".join(
        f'<div class="team-leader-info"><span class="team-leader-info__name">{m}</span></div>'
        for m in (members or [])
    )
    return f"""<html><body>
    <div class="team-dashboard">{day_html}</div>
    <div class="team-members">{members_html}</div>
    <div class="team-article">{''.join(items or [])}</div>
    </body></html>"""


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakePageScraper(IPageScraper):
    """Scripted listing: ``pages[0]`` is page 1; anything past the end is empty.

    Records every ``fetch_page`` call.  ``fail_on_page`` raises
    :class:`FetchError` for that page; ``endless`` serves a fresh article on
    every page; ``delay`` sleeps inside each page fetch.
    """

    def __init__(
        self,
        pages: list[list[Article]] | None = None,
        day: int = 5,
        members: list[str] | None = None,
        fail_on_page: int | None = None,
        endless: bool = False,
        delay: float = 0.0,
    ) -> None:
        self.pages = pages or []
        self.day = day
        self.members = members if members is not None else ["Alice", "Bob"]
        self.fail_on_page = fail_on_page
        self.endless = endless
        self.delay = delay
        self.calls: list[tuple[str, int]] = []
        self.active = 0
        self.max_active = 0

    async def fetch_page(self, team_id: str, page: int) -> list[Article]:
        self.calls.append((team_id, page))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            if self.fail_on_page == page:
                raise FetchError(message=f"page {page} unreachable", provider_name="fake")
            if self.endless:
                return [make_article(f"endless-{page}")]
            if page <= len(self.pages):
                return list(self.pages[page - 1])
            return []
        finally:
            self.active -= 1

    async def fetch_current_day(self, team_id: str) -> int:
        return self.day

    async def fetch_members(self, team_id: str) -> list[str]:
        return list(self.members)

    def get_provider_name(self) -> str:
        return "fake"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def store() -> MemoryArticleStore:
    return MemoryArticleStore()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def restore_logging():
    """Reinstall the server logging setup after a test that switches to CLI logging.

    Request it ahead of ``capsys`` so the root handler is rebuilt on the real
    stream, not on a capture buffer that is about to close.
    """
    yield
    configure_logging()
