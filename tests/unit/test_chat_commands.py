"""Unit tests for the ``check <teamId>`` chat command handling."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import FakePageScraper, make_article
from ironwatch.interfaces.chat_provider import IChatProvider
from ironwatch.models.article import TeamStatus
from ironwatch.providers.store.memory_store import MemoryArticleStore
from ironwatch.services.article_fetcher import IncrementalArticleFetcher
from ironwatch.services.cache_writer import ArticleCacheWriter
from ironwatch.services.chat_commands import (
    FAILURE_REPLY,
    MISSING_TEAM_ID_REPLY,
    ChatCommandService,
    is_check_command,
    parse_team_id,
    source_id,
)
from ironwatch.services.team_status import TeamStatusService
from ironwatch.services.team_sync import TeamArticleSync
from ironwatch.utils.errors import ChatDeliveryError


def _team_url(team_id: str) -> str:
    return f"https://ironman.example/team/{team_id}"


def _text_event(text: str, source: dict | None = None, reply_token: str = "rt-1") -> dict:
    return {
        "type": "message",
        "replyToken": reply_token,
        "source": source or {"type": "user", "userId": "U1"},
        "message": {"type": "text", "id": "m1", "text": text},
    }


def _mock_chat() -> MagicMock:
    chat = MagicMock(spec=IChatProvider)
    chat.reply_text = AsyncMock()
    chat.push_text = AsyncMock()
    return chat


def _service(scraper: FakePageScraper, store: MemoryArticleStore, chat) -> ChatCommandService:
    sync = TeamArticleSync(IncrementalArticleFetcher(scraper, store), ArticleCacheWriter(store))
    return ChatCommandService(
        status_service=TeamStatusService(scraper, sync),
        store=store,
        chat=chat,
        team_url=_team_url,
    )


# ======================================================================
# Parsing helpers
# ======================================================================


class TestParseTeamId:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("check 4212", "4212"),
            ("check   4212  ", "4212"),
            ("check team 4212", "4212"),
            ("check 007", "7"),
        ],
    )
    def test_valid(self, text: str, expected: str) -> None:
        assert parse_team_id(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["check", "check ", "check abc", "check 0", "check -3", "check 4212x", "check ²", "check ①", "check ４２"],
    )
    def test_invalid(self, text: str) -> None:
        assert parse_team_id(text) is None


class TestEventHelpers:
    def test_source_id_prefers_group_then_room_then_user(self) -> None:
        assert source_id({"type": "group", "groupId": "C1", "userId": "U1"}) == "C1"
        assert source_id({"type": "room", "roomId": "R1", "userId": "U1"}) == "R1"
        assert source_id({"type": "user", "userId": "U1"}) == "U1"
        assert source_id({}) is None

    def test_is_check_command(self) -> None:
        assert is_check_command(_text_event("check 1")) is True
        assert is_check_command(_text_event("hello")) is False
        assert is_check_command({"type": "follow"}) is False
        assert is_check_command({"type": "message", "message": {"type": "sticker"}}) is False


# ======================================================================
# ChatCommandService
# ======================================================================


class TestChatCommandService:
    @pytest.mark.asyncio
    async def test_check_replies_with_status(self, store: MemoryArticleStore) -> None:
        scraper = FakePageScraper(
            pages=[[make_article("1", "Alice"), make_article("2", "Bob"), make_article("3", "Alice")]],
            day=5,
            members=["Alice", "Bob"],
        )
        chat = _mock_chat()

        handled = await _service(scraper, store, chat).handle_events([_text_event("check 7")])

        assert handled == 1
        chat.reply_text.assert_awaited_once_with(
            "rt-1",
            "# 5\n-------------------\nAlice: 2\nBob: 1\n\nTeam link:\nhttps://ironman.example/team/7",
        )

    @pytest.mark.asyncio
    async def test_check_subscribes_the_sender(self, store: MemoryArticleStore) -> None:
        chat = _mock_chat()
        event = _text_event("check 7", source={"type": "group", "groupId": "Cabc", "userId": "U1"})

        await _service(FakePageScraper(), store, chat).handle_events([event])

        assert await store.list_receivers("7") == {"Cabc"}
        assert await store.list_team_ids() == ["7"]

    @pytest.mark.asyncio
    async def test_missing_team_id_reply(self, store: MemoryArticleStore) -> None:
        scraper = FakePageScraper()
        chat = _mock_chat()

        handled = await _service(scraper, store, chat).handle_events([_text_event("check")])

        assert handled == 1
        chat.reply_text.assert_awaited_once_with("rt-1", MISSING_TEAM_ID_REPLY)
        assert scraper.calls == []

    @pytest.mark.asyncio
    async def test_failure_gets_generic_reply(self, store: MemoryArticleStore) -> None:
        chat = _mock_chat()
        scraper = FakePageScraper(pages=[[make_article("1")]], fail_on_page=1)

        await _service(scraper, store, chat).handle_events([_text_event("check 7")])

        chat.reply_text.assert_awaited_once_with("rt-1", FAILURE_REPLY)

    @pytest.mark.asyncio
    async def test_non_command_events_are_ignored(self, store: MemoryArticleStore) -> None:
        chat = _mock_chat()
        events = [_text_event("hello there"), {"type": "follow", "replyToken": "rt-2"}]

        handled = await _service(FakePageScraper(), store, chat).handle_events(events)

        assert handled == 0
        chat.reply_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_each_command_gets_its_own_reply(self, store: MemoryArticleStore) -> None:
        chat = _mock_chat()
        events = [_text_event("check 7", reply_token="a"), _text_event("check", reply_token="b")]

        handled = await _service(FakePageScraper(), store, chat).handle_events(events)

        assert handled == 2
        assert [c.args[0] for c in chat.reply_text.await_args_list] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_non_ascii_digit_does_not_break_the_batch(self, store: MemoryArticleStore) -> None:
        chat = _mock_chat()
        scraper = FakePageScraper(pages=[[make_article("1", "Alice")]], day=2, members=["Alice"])
        events = [_text_event("check ²", reply_token="a"), _text_event("check 7", reply_token="b")]

        handled = await _service(scraper, store, chat).handle_events(events)

        assert handled == 2
        replies = [c.args for c in chat.reply_text.await_args_list]
        assert replies[0] == ("a", MISSING_TEAM_ID_REPLY)
        assert replies[1][0] == "b"
        assert replies[1][1].startswith("# 2\n-------------------\nAlice: 1\n")

    @pytest.mark.asyncio
    async def test_unexpected_error_gets_generic_reply_and_batch_continues(self, store: MemoryArticleStore) -> None:
        chat = _mock_chat()
        status_service = MagicMock(spec=TeamStatusService)
        status_service.build_status = AsyncMock(
            side_effect=[RuntimeError("boom"), TeamStatus(team_id="8", day=1, per_member=[])]
        )
        service = ChatCommandService(status_service=status_service, store=store, chat=chat, team_url=_team_url)
        events = [_text_event("check 7", reply_token="a"), _text_event("check 8", reply_token="b")]

        handled = await service.handle_events(events)

        assert handled == 2
        replies = [c.args for c in chat.reply_text.await_args_list]
        assert replies[0] == ("a", FAILURE_REPLY)
        assert replies[1][0] == "b"
        assert replies[1][1] != FAILURE_REPLY

    @pytest.mark.asyncio
    async def test_reply_failure_is_not_raised(self, store: MemoryArticleStore) -> None:
        chat = _mock_chat()
        chat.reply_text.side_effect = ChatDeliveryError(message="HTTP 400", provider_name="line")

        handled = await _service(FakePageScraper(), store, chat).handle_events([_text_event("check 7")])

        assert handled == 1

    @pytest.mark.asyncio
    async def test_without_chat_provider_still_builds_status(self, store: MemoryArticleStore) -> None:
        scraper = FakePageScraper(pages=[[make_article("1")]])

        handled = await _service(scraper, store, None).handle_events([_text_event("check 7")])

        assert handled == 1
        assert await store.list_article_ids("7") == {"1"}
