"""Fetch-merge-write cycle for one team, serialized per team.

Both the HTTP ``/teams/{team_id}`` endpoint and the status aggregator go
through :meth:`TeamArticleSync.sync`, so the cache is always updated with
whatever the walk returned.  Concurrent calls for the same team wait on the
team's lock; the whole cycle runs under an overall deadline.
"""

from __future__ import annotations

import structlog

from ironwatch.models.article import Article
from ironwatch.services.article_fetcher import IncrementalArticleFetcher
from ironwatch.services.cache_writer import ArticleCacheWriter
from ironwatch.utils.concurrency import TeamLockRegistry, with_deadline
from ironwatch.utils.logging import get_logger


class TeamArticleSync:
    """Runs ``fetch_team_articles`` then ``write`` while holding the team lock.

    Parameters
    ----------
    fetcher:
        The incremental fetch-merge engine.
    writer:
        Cache writer persisting the merged result.
    locks:
        Registry of per-team locks; share one instance per process.
    walk_timeout:
        Seconds allowed for the fetch and write together; ``None`` disables.
    """

    def __init__(
        self,
        fetcher: IncrementalArticleFetcher,
        writer: ArticleCacheWriter,
        locks: TeamLockRegistry | None = None,
        walk_timeout: float | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._writer = writer
        self._locks = locks or TeamLockRegistry()
        self._walk_timeout = walk_timeout
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def sync(self, team_id: str, force: bool = False) -> list[Article]:
        """Fetch, merge and persist the team's articles; return the merged set."""
        async with self._locks.hold(team_id):
            return await with_deadline(
                self._cycle(team_id, force),
                self._walk_timeout,
                what=f"Article sync for team {team_id}",
            )

    async def _cycle(self, team_id: str, force: bool) -> list[Article]:
        articles = await self._fetcher.fetch_team_articles(team_id, force=force)
        await self._writer.write(team_id, articles)
        self._logger.info("team_synced", team_id=team_id, force=force, articles=len(articles))
        return articles
