"""Abstract base class for team listing scrapers.

Defines the contract for reading a team's remotely hosted, paginated article
listing and its header metadata.  The concrete scraper owns the markup
details; the fetch-merge engine and the status aggregator only see
:class:`~ironwatch.models.article.Article` records.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ironwatch.models.article import Article


class IPageScraper(ABC):
    """Contract for services that read one team listing page at a time."""

    @abstractmethod
    async def fetch_page(self, team_id: str, page: int) -> list[Article]:
        """Fetch page *page* (1-indexed) of the team's article listing.

        Parameters
        ----------
        team_id:
            Team identifier as used in the site's URL scheme.
        page:
            1-indexed page number.

        Returns
        -------
        list[Article]
            Articles in the order the site presents them.  An empty list
            means *page* is past the last page of the listing.

        Raises
        ------
        ironwatch.utils.errors.FetchError
            If the page cannot be retrieved.  A failure is never reported
            as an empty page.
        ironwatch.utils.errors.ParseError
            If the page does not have the expected structure.
        """

    @abstractmethod
    async def fetch_current_day(self, team_id: str) -> int:
        """Return the team's current challenge day from the listing header."""

    @abstractmethod
    async def fetch_members(self, team_id: str) -> list[str]:
        """Return member display names in roster order."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this scraper, e.g. ``"ithome"``."""
