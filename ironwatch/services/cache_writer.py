"""Writes a freshly merged article set back into the article store."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from ironwatch.interfaces.article_store import IArticleStore
from ironwatch.models.article import Article
from ironwatch.utils.logging import get_logger


class ArticleCacheWriter:
    """Upserts every article of a team, keyed by ``(team_id, article.id)``.

    Safe to call repeatedly with the same data: each write is a per-key
    upsert, so a second call leaves the store unchanged.
    """

    def __init__(self, store: IArticleStore) -> None:
        self._store = store
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def write(self, team_id: str, articles: Iterable[Article]) -> int:
        """Persist *articles* for *team_id* and return how many were written."""
        written = 0
        for article in articles:
            await self._store.put_article(team_id, article)
            written += 1
        self._logger.info("team_articles_written", team_id=team_id, count=written)
        return written
