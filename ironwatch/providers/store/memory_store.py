"""In-memory article store.

Dict-backed and process-local: suitable for tests and throwaway runs
(``STORE_BACKEND=memory``).  Records are kept in the same flattened string
form as the SQLite backend so both behave identically.
"""

from __future__ import annotations

import structlog

from ironwatch.interfaces.article_store import IArticleStore
from ironwatch.models.article import Article
from ironwatch.providers.store import keys
from ironwatch.utils.errors import ArticleNotFoundError

logger = structlog.get_logger(logger_name=__name__)


class MemoryArticleStore(IArticleStore):
    """Article store backed by plain dictionaries."""

    def __init__(self) -> None:
        self._hashes: dict[str, dict[str, str]] = {}
        self._sets: dict[str, set[str]] = {}

    async def list_article_ids(self, team_id: str) -> set[str]:
        prefix = keys.article_prefix(team_id)
        return {keys.article_id_from_key(k) for k in self._hashes if k.startswith(prefix)}

    async def get_article(self, team_id: str, article_id: str) -> Article:
        record = self._hashes.get(keys.article_key(team_id, article_id))
        if record is None:
            raise ArticleNotFoundError(
                message=f"No cached article {article_id} for team {team_id}",
                provider_name=self.get_provider_name(),
            )
        return Article.from_record(record)

    async def put_article(self, team_id: str, article: Article) -> None:
        self._hashes[keys.article_key(team_id, article.id)] = article.to_record()
        logger.debug("article_put", team_id=team_id, article_id=article.id)

    async def add_receiver(self, team_id: str, receiver_id: str) -> None:
        self._sets.setdefault(keys.receivers_key(team_id), set()).add(receiver_id)

    async def list_receivers(self, team_id: str) -> set[str]:
        return set(self._sets.get(keys.receivers_key(team_id), set()))

    async def list_team_ids(self) -> list[str]:
        team_ids = {
            team_id
            for key, members in self._sets.items()
            if members and (team_id := keys.team_id_from_receivers_key(key)) is not None
        }
        return keys.sort_team_ids(team_ids)

    def get_provider_name(self) -> str:
        return "memory"
