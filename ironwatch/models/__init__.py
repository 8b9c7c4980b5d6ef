"""ironwatch domain models; re-exports all public model classes."""

from __future__ import annotations

from ironwatch.models.article import Article, MemberStatus, TeamStatus

__all__ = [
    "Article",
    "MemberStatus",
    "TeamStatus",
]
