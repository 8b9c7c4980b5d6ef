"""Abstract base class for the persisted article cache.

The store maps ``(team_id, article_id)`` to an article record and also keeps
the per-team set of chat receivers subscribed to status updates.  Both
implementations follow the same key layout (see
:mod:`ironwatch.providers.store.keys`).  Entries are never expired or
deleted by ironwatch.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ironwatch.models.article import Article


class IArticleStore(ABC):
    """Contract for article cache backends.

    All operations are async so network-backed stores do not block the
    event loop.
    """

    async def initialize(self) -> None:  # noqa: B027
        """Prepare the backend (create tables, open files).  Default: no-op."""

    async def close(self) -> None:  # noqa: B027
        """Release backend resources.  Default: no-op."""

    @abstractmethod
    async def list_article_ids(self, team_id: str) -> set[str]:
        """Return every article ID currently cached for *team_id*."""

    @abstractmethod
    async def get_article(self, team_id: str, article_id: str) -> Article:
        """Return the cached article.

        Raises
        ------
        ironwatch.utils.errors.ArticleNotFoundError
            If no record exists for ``(team_id, article_id)``.
        """

    @abstractmethod
    async def put_article(self, team_id: str, article: Article) -> None:
        """Upsert *article* under ``(team_id, article.id)``.  Idempotent."""

    @abstractmethod
    async def add_receiver(self, team_id: str, receiver_id: str) -> None:
        """Subscribe *receiver_id* (chat user, group or room) to *team_id*."""

    @abstractmethod
    async def list_receivers(self, team_id: str) -> set[str]:
        """Return the receivers subscribed to *team_id*."""

    @abstractmethod
    async def list_team_ids(self) -> list[str]:
        """Return IDs of teams with at least one subscribed receiver."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"sqlite"``."""
