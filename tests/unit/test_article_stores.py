"""Unit tests for the article store backends and their shared key layout.

Every contract test runs against both MemoryArticleStore and
SQLiteArticleStore (backed by a file under ``tmp_path``).
"""

from __future__ import annotations

from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio

from conftest import make_article
from ironwatch.interfaces.article_store import IArticleStore
from ironwatch.providers.store import keys
from ironwatch.providers.store.memory_store import MemoryArticleStore
from ironwatch.providers.store.sqlite_store import SQLiteArticleStore
from ironwatch.utils.errors import ArticleNotFoundError, StoreError


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def any_store(request, tmp_path: Path) -> IArticleStore:
    if request.param == "memory":
        backend: IArticleStore = MemoryArticleStore()
    else:
        backend = SQLiteArticleStore(db_path=tmp_path / "articles.db")
    await backend.initialize()
    yield backend
    await backend.close()


# ======================================================================
# Store contract
# ======================================================================


class TestArticleStoreContract:
    @pytest.mark.asyncio
    async def test_unknown_team_has_no_ids(self, any_store: IArticleStore) -> None:
        assert await any_store.list_article_ids("7") == set()

    @pytest.mark.asyncio
    async def test_put_then_get(self, any_store: IArticleStore) -> None:
        article = make_article("10255", author="Alice", day=12, title="Day 12: 收尾")
        await any_store.put_article("7", article)

        assert await any_store.list_article_ids("7") == {"10255"}
        assert await any_store.get_article("7", "10255") == article

    @pytest.mark.asyncio
    async def test_put_is_an_upsert(self, any_store: IArticleStore) -> None:
        await any_store.put_article("7", make_article("1", title="old"))
        await any_store.put_article("7", make_article("1", title="new"))

        assert await any_store.list_article_ids("7") == {"1"}
        assert (await any_store.get_article("7", "1")).title == "new"

    @pytest.mark.asyncio
    async def test_missing_article_raises(self, any_store: IArticleStore) -> None:
        with pytest.raises(ArticleNotFoundError):
            await any_store.get_article("7", "nope")

    @pytest.mark.asyncio
    async def test_team_prefixes_do_not_collide(self, any_store: IArticleStore) -> None:
        await any_store.put_article("1", make_article("a"))
        await any_store.put_article("12", make_article("b"))

        assert await any_store.list_article_ids("1") == {"a"}
        assert await any_store.list_article_ids("12") == {"b"}

    @pytest.mark.asyncio
    async def test_receivers_are_a_set(self, any_store: IArticleStore) -> None:
        await any_store.add_receiver("7", "Cgroup")
        await any_store.add_receiver("7", "Cgroup")
        await any_store.add_receiver("7", "Uuser")

        assert await any_store.list_receivers("7") == {"Cgroup", "Uuser"}
        assert await any_store.list_receivers("8") == set()

    @pytest.mark.asyncio
    async def test_team_ids_come_from_receivers_sorted_numerically(self, any_store: IArticleStore) -> None:
        for team_id in ("12", "3", "100"):
            await any_store.add_receiver(team_id, "U1")
        await any_store.put_article("55", make_article("1"))

        assert await any_store.list_team_ids() == ["3", "12", "100"]


# ======================================================================
# SQLite specifics
# ======================================================================


class TestSQLiteArticleStore:
    @pytest.mark.asyncio
    async def test_initialize_creates_parent_directory(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "dir" / "articles.db"
        await SQLiteArticleStore(db_path=db_path).initialize()
        assert db_path.exists()

    @pytest.mark.asyncio
    async def test_data_survives_a_new_instance(self, tmp_path: Path) -> None:
        db_path = tmp_path / "articles.db"
        first = SQLiteArticleStore(db_path=db_path)
        await first.initialize()
        await first.put_article("7", make_article("1"))

        second = SQLiteArticleStore(db_path=db_path)
        await second.initialize()
        assert await second.list_article_ids("7") == {"1"}

    @pytest.mark.asyncio
    async def test_like_wildcards_in_team_id_are_literal(self, tmp_path: Path) -> None:
        store = SQLiteArticleStore(db_path=tmp_path / "articles.db")
        await store.initialize()
        await store.put_article("1_", make_article("x"))
        await store.put_article("12", make_article("y"))

        assert await store.list_article_ids("1_") == {"x"}

    @pytest.mark.asyncio
    async def test_corrupt_record_raises_store_error(self, tmp_path: Path) -> None:
        db_path = tmp_path / "articles.db"
        store = SQLiteArticleStore(db_path=db_path)
        await store.initialize()
        async with aiosqlite.connect(str(db_path)) as db:
            await db.execute(
                "INSERT INTO records (key, value) VALUES (?, ?)",
                (keys.article_key("7", "1"), "{not json"),
            )
            await db.commit()

        with pytest.raises(StoreError, match="Corrupt record"):
            await store.get_article("7", "1")

    @pytest.mark.asyncio
    async def test_uninitialized_database_raises_store_error(self, tmp_path: Path) -> None:
        store = SQLiteArticleStore(db_path=tmp_path / "never-initialized.db")
        with pytest.raises(StoreError):
            await store.list_article_ids("7")

    def test_provider_names(self, tmp_path: Path) -> None:
        assert SQLiteArticleStore(db_path=tmp_path / "a.db").get_provider_name() == "sqlite"
        assert MemoryArticleStore().get_provider_name() == "memory"


# ======================================================================
# Key layout
# ======================================================================


class TestKeys:
    def test_article_key(self) -> None:
        assert keys.article_key("7", "10255") == "teams:7:articles:10255"
        assert keys.article_id_from_key("teams:7:articles:10255") == "10255"

    def test_receivers_key_round_trip(self) -> None:
        assert keys.receivers_key("7") == "teams:7:receivers"
        assert keys.team_id_from_receivers_key("teams:7:receivers") == "7"

    @pytest.mark.parametrize(
        "key",
        ["teams:7:articles:1", "teams::receivers", "users:7:receivers", "teams:7:receivers:x"],
    )
    def test_non_receivers_keys_are_rejected(self, key: str) -> None:
        assert keys.team_id_from_receivers_key(key) is None

    def test_sort_team_ids(self) -> None:
        assert keys.sort_team_ids({"20", "3", "abc", "100"}) == ["3", "20", "100", "abc"]
