"""Pydantic v2 models for team articles and team status.

All models use frozen config (immutable).  An article is never updated once
observed; new information only ever adds articles to a team's set.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Article(BaseModel):
    """A single published submission by a team member."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Site-assigned article ID, unique within a team.")
    author: str = Field(description="Display name of the submitting member.")
    title: str = Field(description="Article title.")
    link: str = Field(description="URL (absolute or site-relative) of the article.")
    day: int = Field(description="Challenge day the article is attributed to.")

    def to_record(self) -> dict[str, str]:
        """Flatten to the field-by-field string record kept in the store."""
        return {
            "id": self.id,
            "author": self.author,
            "title": self.title,
            "link": self.link,
            "day": str(self.day),
        }

    @classmethod
    def from_record(cls, record: dict[str, str]) -> Article:
        """Rebuild an article from a stored record (``day`` is coerced to int)."""
        return cls.model_validate(record)


class MemberStatus(BaseModel):
    """Published-article count for one roster member."""

    model_config = ConfigDict(frozen=True)

    member: str
    count: int = Field(ge=0)


class TeamStatus(BaseModel):
    """Per-member article counts for a team on the current challenge day."""

    model_config = ConfigDict(frozen=True)

    team_id: str
    day: int
    per_member: list[MemberStatus] = Field(
        default_factory=list,
        description="Counts in roster order.",
    )

    def as_pairs(self) -> list[tuple[str, int]]:
        return [(m.member, m.count) for m in self.per_member]
