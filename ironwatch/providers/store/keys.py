"""Key layout shared by every article store backend.

    teams:{teamId}:articles:{articleId}   hash-like article record
    teams:{teamId}:receivers              set of subscribed chat receivers
"""

from __future__ import annotations

_SEP = ":"


def article_key(team_id: str, article_id: str) -> str:
    return f"teams:{team_id}:articles:{article_id}"


def article_prefix(team_id: str) -> str:
    return f"teams:{team_id}:articles:"


def receivers_key(team_id: str) -> str:
    return f"teams:{team_id}:receivers"


def article_id_from_key(key: str) -> str:
    """Return the article ID (last segment) of an article key."""
    return key.split(_SEP)[-1]


def team_id_from_receivers_key(key: str) -> str | None:
    """Return the team ID of a receivers key, or ``None`` if *key* is not one."""
    parts = key.split(_SEP)
    if len(parts) != 3 or parts[0] != "teams" or parts[2] != "receivers" or not parts[1]:
        return None
    return parts[1]


def sort_team_ids(team_ids: set[str] | list[str]) -> list[str]:
    """Sort team IDs numerically when they are digits, lexically otherwise."""
    return sorted(team_ids, key=lambda t: (0, int(t), "") if t.isdigit() else (1, 0, t))
