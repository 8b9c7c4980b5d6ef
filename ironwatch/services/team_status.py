"""Per-member article counts for a team.

Combines three live reads (current day, roster, merged article set) into a
:class:`TeamStatus`.  Any failing read aborts the whole aggregation; a
partial status is never produced.

Authors are matched against roster names by exact string equality.  The
site renders both from the same account name, so no whitespace or case
normalization is applied.
"""

from __future__ import annotations

from collections import Counter

import structlog

from ironwatch.interfaces.page_scraper import IPageScraper
from ironwatch.models.article import Article, MemberStatus, TeamStatus
from ironwatch.services.team_sync import TeamArticleSync
from ironwatch.utils.logging import get_logger

_DIVIDER = "-------------------"


def count_by_member(members: list[str], articles: list[Article]) -> list[MemberStatus]:
    """Count *articles* per member, in roster order."""
    per_author = Counter(article.author for article in articles)
    return [MemberStatus(member=member, count=per_author.get(member, 0)) for member in members]


def format_status_message(status: TeamStatus, team_url: str) -> str:
    """Render *status* as the plain-text chat message."""
    lines = [f"# {status.day}", _DIVIDER]
    lines.extend(f"{entry.member}: {entry.count}" for entry in status.per_member)
    return "\n".join(lines) + f"\n\nTeam link:\n{team_url}"


class TeamStatusService:
    """Builds :class:`TeamStatus` snapshots for a team."""

    def __init__(self, scraper: IPageScraper, team_sync: TeamArticleSync) -> None:
        self._scraper = scraper
        self._team_sync = team_sync
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def build_status(self, team_id: str) -> TeamStatus:
        """Return the current day and per-member article counts for *team_id*."""
        day = await self._scraper.fetch_current_day(team_id)
        members = await self._scraper.fetch_members(team_id)
        articles = await self._team_sync.sync(team_id, force=False)

        status = TeamStatus(
            team_id=team_id,
            day=day,
            per_member=count_by_member(members, articles),
        )
        self._logger.info(
            "team_status_built",
            team_id=team_id,
            day=day,
            members=len(members),
            articles=len(articles),
        )
        return status
