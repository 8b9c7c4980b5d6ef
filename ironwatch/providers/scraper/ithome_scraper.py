"""iThome Ironman team listing scraper.

Implements :class:`IPageScraper` by fetching the team signup page with an
injected ``httpx.AsyncClient`` and parsing it with BeautifulSoup.  One URL
serves both the paginated article list (``?page=N``) and the header with the
day counter and the member roster.

Timeouts, connection errors, 429 and 5xx responses are retried with linear
backoff; any other non-200 status fails immediately.  Exhausted retries
raise :class:`FetchError`.  A page whose markup lacks a required element
raises :class:`ParseError` instead of yielding a half-filled article.
"""

from __future__ import annotations

import asyncio

import httpx
from bs4 import BeautifulSoup, Tag

from ironwatch.interfaces.page_scraper import IPageScraper
from ironwatch.models.article import Article
from ironwatch.utils.errors import FetchError, ParseError
from ironwatch.utils.logging import get_logger

_DEFAULT_URL_TEMPLATE = "https://ithelp.ithome.com.tw/2021ironman/signup/team/{team_id}"
_DEFAULT_TIMEOUT = 10.0
_MAX_RETRIES = 3
_RETRY_BACKOFF = 1.0  # seconds, multiplied by the attempt number
_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; ironwatch/0.1; +https://github.com/ironwatch)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

# -- Selectors --
_ARTICLE_ITEM = ".team-article .ir-list"
_ARTICLE_LINK = ".ir-list__title a"
_ARTICLE_AUTHOR = ".ir-list__info .ir-list__user span.ir-list__name"
_ARTICLE_DAY = ".ir-list__group .ir-list__group-topic span.ir-list__group-topic-num"
_DAY_COUNTER = ".team-dashboard__day"
_MEMBER_NAME = ".team-leader-info__name"


class IThomeTeamScraper(IPageScraper):
    """Scraper for ``ithelp.ithome.com.tw`` Ironman team pages.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.  When omitted the scraper creates and
        owns one (closed by :meth:`aclose`).
    url_template:
        Team page URL with a ``{team_id}`` placeholder.
    timeout:
        Seconds allowed for each individual request.
    max_retries:
        Attempts per request before giving up.
    retry_backoff:
        Base delay in seconds between attempts (``attempt * retry_backoff``).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        url_template: str = _DEFAULT_URL_TEMPLATE,
        timeout: float = _DEFAULT_TIMEOUT,
        max_retries: int = _MAX_RETRIES,
        retry_backoff: float = _RETRY_BACKOFF,
    ) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            headers=_DEFAULT_HEADERS,
            follow_redirects=True,
        )
        self._url_template = url_template
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._retry_backoff = retry_backoff
        self._logger = get_logger(__name__)

    async def aclose(self) -> None:
        """Close the HTTP client if this scraper created it."""
        if self._owns_client:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def team_url(self, team_id: str) -> str:
        return self._url_template.format(team_id=team_id)

    async def _get_html(self, url: str, params: dict[str, int] | None = None) -> str:
        """GET *url* with retry; return the response body."""
        last_error = ""
        for attempt in range(1, self._max_retries + 1):
            try:
                response = await self._http.get(
                    url,
                    params=params,
                    headers=_DEFAULT_HEADERS,
                    timeout=self._timeout,
                    follow_redirects=True,
                )
            except httpx.TimeoutException as exc:
                last_error = f"Timeout fetching {url}: {exc}"
            except httpx.HTTPError as exc:
                last_error = f"HTTP error fetching {url}: {exc}"
            else:
                if response.status_code == 200:
                    return response.text
                if response.status_code not in _RETRYABLE_STATUS:
                    raise FetchError(
                        message=f"HTTP {response.status_code} for {url}",
                        provider_name=self.get_provider_name(),
                    )
                last_error = f"HTTP {response.status_code} for {url}"

            self._logger.warning(
                "listing_request_failed",
                url=url,
                params=params,
                attempt=attempt,
                error=last_error,
            )
            if attempt < self._max_retries:
                await asyncio.sleep(self._retry_backoff * attempt)

        raise FetchError(
            message=f"{last_error} (after {self._max_retries} attempts)",
            provider_name=self.get_provider_name(),
        )

    def _parse_article(self, item: Tag, team_id: str, page: int) -> Article:
        """Build one :class:`Article` from an ``.ir-list`` element."""
        link_el = item.select_one(_ARTICLE_LINK)
        href = link_el.get("href") if link_el is not None else None
        if not href or not isinstance(href, str):
            raise ParseError(
                message=f"Article without link on team {team_id} page {page}",
                provider_name=self.get_provider_name(),
            )

        article_id = href.rstrip("/").split("/")[-1]
        if not article_id:
            raise ParseError(
                message=f"Cannot derive article ID from {href!r}",
                provider_name=self.get_provider_name(),
            )

        author_el = item.select_one(_ARTICLE_AUTHOR)
        if author_el is None:
            raise ParseError(
                message=f"Article {article_id} has no author element",
                provider_name=self.get_provider_name(),
            )

        day_el = item.select_one(_ARTICLE_DAY)
        day = self._parse_int(day_el.get_text() if day_el is not None else None)
        if day is None:
            raise ParseError(
                message=f"Article {article_id} has no readable day number",
                provider_name=self.get_provider_name(),
            )

        return Article(
            id=article_id,
            # Names are compared verbatim against the roster, so keep raw text.
            author=author_el.get_text(),
            title=link_el.get_text(strip=True),
            link=href,
            day=day,
        )

    @staticmethod
    def _parse_int(value: str | None) -> int | None:
        """Parse an integer from *value*, returning ``None`` on failure."""
        try:
            return int(value.strip())
        except (ValueError, AttributeError):
            return None

    # ------------------------------------------------------------------
    # IPageScraper implementation
    # ------------------------------------------------------------------

    async def fetch_page(self, team_id: str, page: int) -> list[Article]:
        """Fetch and parse one page of the team's article listing."""
        html = await self._get_html(self.team_url(team_id), params={"page": page})
        soup = BeautifulSoup(html, "html.parser")
        articles = [self._parse_article(item, team_id, page) for item in soup.select(_ARTICLE_ITEM)]
        self._logger.debug("listing_page_parsed", team_id=team_id, page=page, articles=len(articles))
        return articles

    async def fetch_current_day(self, team_id: str) -> int:
        """Return the dashboard day counter plus one (the day in progress)."""
        html = await self._get_html(self.team_url(team_id))
        soup = BeautifulSoup(html, "html.parser")
        counter = soup.select_one(_DAY_COUNTER)
        value = self._parse_int(counter.get_text() if counter is not None else None)
        if value is None:
            raise ParseError(
                message=f"Team {team_id} page has no readable day counter",
                provider_name=self.get_provider_name(),
            )
        return value + 1

    async def fetch_members(self, team_id: str) -> list[str]:
        """Return roster names in page order."""
        html = await self._get_html(self.team_url(team_id))
        soup = BeautifulSoup(html, "html.parser")
        return [el.get_text() for el in soup.select(_MEMBER_NAME)]

    def get_provider_name(self) -> str:
        return "ithome"
