"""Incremental fetch-and-merge of a team's paginated article listing.

The team listing is append-mostly: new articles show up near the front of
page 1 and push older ones toward later pages.  Walking every page on each
status check would re-download the whole listing, so the walk stops as soon
as a page contains an article that is already cached.  At that point every
cached article not seen on the current page is assumed to still be valid and
is merged in from the store instead of being rediscovered page by page.

Walk, page by page starting at 1:

1. Fetch the page.  An empty page ends the walk; unless ``force`` is set,
   cached articles not yet part of the result are merged in first, so an
   emptied listing never drops what the cache already holds.
2. Unless ``force`` is set:
   a. read the team's cached article IDs;
   b. merge in each cached article that is not on this page and not
      already part of the result;
   c. if any cached ID *is* on this page, the walk has reached known
      content and stops here.
3. Otherwise move on to the next page.

``force=True`` skips steps 2a-2c and rebuilds the full set from the live
site.  A team with no cache entries behaves like ``force=True``.

The walk is a bounded loop: at most ``max_pages`` page requests, after
which :class:`PaginationLimitError` is raised rather than returning a
partial set.  Scraper errors propagate unchanged.
"""

from __future__ import annotations

import structlog

from ironwatch.interfaces.article_store import IArticleStore
from ironwatch.interfaces.page_scraper import IPageScraper
from ironwatch.models.article import Article
from ironwatch.utils.errors import PaginationLimitError
from ironwatch.utils.logging import get_logger

_DEFAULT_MAX_PAGES = 100


class IncrementalArticleFetcher:
    """Walks a team listing and merges it with the article cache.

    Parameters
    ----------
    scraper:
        Source of listing pages.
    store:
        Article cache consulted for early termination and merged entries.
    max_pages:
        Maximum page requests per walk, including the terminating empty page.
    """

    def __init__(
        self,
        scraper: IPageScraper,
        store: IArticleStore,
        max_pages: int = _DEFAULT_MAX_PAGES,
    ) -> None:
        if max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {max_pages}")
        self._scraper = scraper
        self._store = store
        self._max_pages = max_pages
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def max_pages(self) -> int:
        return self._max_pages

    async def fetch_team_articles(self, team_id: str, force: bool = False) -> list[Article]:
        """Return the merged, deduplicated article set for *team_id*.

        Articles appear in walk order (page 1 first), followed by articles
        merged in from the cache.  When an ID appears more than once the
        first occurrence is kept.
        """
        merged: dict[str, Article] = {}
        from_cache = 0

        for page in range(1, self._max_pages + 1):
            articles = await self._scraper.fetch_page(team_id, page)
            self._logger.info(
                "page_fetched",
                team_id=team_id,
                page=page,
                force=force,
                articles=len(articles),
            )

            if not articles:
                if not force:
                    _, added = await self._merge_cached(team_id, set(), merged)
                    from_cache += added
                self._log_done(team_id, page, merged, from_cache, reason="listing_exhausted")
                return list(merged.values())

            for article in articles:
                merged.setdefault(article.id, article)

            if force:
                continue

            overlap, added = await self._merge_cached(team_id, {article.id for article in articles}, merged)
            from_cache += added

            if overlap:
                self._logger.info("cache_overlap_found", team_id=team_id, page=page)
                self._log_done(team_id, page, merged, from_cache, reason="cache_overlap")
                return list(merged.values())

        self._logger.error(
            "pagination_limit_exceeded",
            team_id=team_id,
            max_pages=self._max_pages,
            collected=len(merged),
        )
        raise PaginationLimitError(
            message=f"Team {team_id} listing did not end within {self._max_pages} pages",
            provider_name=self._scraper.get_provider_name(),
        )

    async def _merge_cached(
        self,
        team_id: str,
        page_ids: set[str],
        merged: dict[str, Article],
    ) -> tuple[bool, int]:
        """Merge cached articles missing from *page_ids* and *merged* into *merged*.

        Returns whether any cached ID is on the page, and how many were merged.
        """
        overlap = False
        added = 0
        # Sorted so the merged tail is deterministic for a given cache.
        for cached_id in sorted(await self._store.list_article_ids(team_id)):
            if cached_id in page_ids:
                overlap = True
            elif cached_id not in merged:
                merged[cached_id] = await self._store.get_article(team_id, cached_id)
                added += 1
        return overlap, added

    def _log_done(
        self,
        team_id: str,
        pages: int,
        merged: dict[str, Article],
        from_cache: int,
        reason: str,
    ) -> None:
        self._logger.info(
            "team_walk_complete",
            team_id=team_id,
            pages_requested=pages,
            articles=len(merged),
            from_cache=from_cache,
            reason=reason,
        )
