"""SQLite-backed article store.

Persists article records and receiver sets to a local SQLite database at
``data/articles.db`` using ``aiosqlite`` for async I/O.  Two generic tables
hold the key layout from :mod:`ironwatch.providers.store.keys`:

- ``records``: one row per ``teams:{teamId}:articles:{articleId}`` key, the
  article fields stored as a JSON object of strings;
- ``set_members``: one row per (set key, member).
"""

from __future__ import annotations

import json
from pathlib import Path

import aiosqlite
import structlog

from ironwatch.interfaces.article_store import IArticleStore
from ironwatch.models.article import Article
from ironwatch.providers.store import keys
from ironwatch.utils.errors import ArticleNotFoundError, StoreError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/articles.db")

_CREATE_TABLES_SQL = [
    """\
CREATE TABLE IF NOT EXISTS records (
    key         TEXT    PRIMARY KEY,
    value       TEXT    NOT NULL,
    created_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
""",
    """\
CREATE TABLE IF NOT EXISTS set_members (
    key         TEXT    NOT NULL,
    member      TEXT    NOT NULL,
    added_at    TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    PRIMARY KEY (key, member)
);
""",
]

# Upsert keeps the original created_at so repeated writes stay idempotent.
_UPSERT_RECORD_SQL = """\
INSERT INTO records (key, value)
VALUES (?, ?)
ON CONFLICT(key) DO UPDATE SET value = excluded.value;
"""

_ADD_MEMBER_SQL = "INSERT OR IGNORE INTO set_members (key, member) VALUES (?, ?);"


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteArticleStore(IArticleStore):
    """SQLite-backed article cache and receiver registry."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the tables if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                for sql in _CREATE_TABLES_SQL:
                    await db.execute(sql)
                await db.commit()
        except aiosqlite.Error as exc:
            raise StoreError(
                message=f"Cannot initialize {self._db_path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("article_store_initialized", path=str(self._db_path))

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------

    async def list_article_ids(self, team_id: str) -> set[str]:
        pattern = _escape_like(keys.article_prefix(team_id)) + "%"
        rows = await self._fetchall(
            "SELECT key FROM records WHERE key LIKE ? ESCAPE '\\'",
            (pattern,),
        )
        return {keys.article_id_from_key(row[0]) for row in rows}

    async def get_article(self, team_id: str, article_id: str) -> Article:
        rows = await self._fetchall(
            "SELECT value FROM records WHERE key = ?",
            (keys.article_key(team_id, article_id),),
        )
        if not rows:
            raise ArticleNotFoundError(
                message=f"No cached article {article_id} for team {team_id}",
                provider_name=self.get_provider_name(),
            )
        try:
            return Article.from_record(json.loads(rows[0][0]))
        except (json.JSONDecodeError, ValueError) as exc:
            raise StoreError(
                message=f"Corrupt record for article {article_id} of team {team_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def put_article(self, team_id: str, article: Article) -> None:
        value = json.dumps(article.to_record(), ensure_ascii=False, sort_keys=True)
        await self._execute(_UPSERT_RECORD_SQL, (keys.article_key(team_id, article.id), value))

    # ------------------------------------------------------------------
    # Receivers
    # ------------------------------------------------------------------

    async def add_receiver(self, team_id: str, receiver_id: str) -> None:
        await self._execute(_ADD_MEMBER_SQL, (keys.receivers_key(team_id), receiver_id))
        logger.info("receiver_added", team_id=team_id, receiver_id=receiver_id)

    async def list_receivers(self, team_id: str) -> set[str]:
        rows = await self._fetchall(
            "SELECT member FROM set_members WHERE key = ?",
            (keys.receivers_key(team_id),),
        )
        return {row[0] for row in rows}

    async def list_team_ids(self) -> list[str]:
        rows = await self._fetchall(
            "SELECT DISTINCT key FROM set_members WHERE key LIKE 'teams:%:receivers'",
            (),
        )
        team_ids = {
            team_id
            for row in rows
            if (team_id := keys.team_id_from_receivers_key(row[0])) is not None
        }
        return keys.sort_team_ids(team_ids)

    def get_provider_name(self) -> str:
        return "sqlite"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _execute(self, sql: str, params: tuple) -> None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(sql, params)
                await db.commit()
        except aiosqlite.Error as exc:
            raise StoreError(message=str(exc), provider_name=self.get_provider_name()) from exc

    async def _fetchall(self, sql: str, params: tuple) -> list[tuple]:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(sql, params)
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreError(message=str(exc), provider_name=self.get_provider_name()) from exc
        return [tuple(r) for r in rows]
