"""Handles inbound chat webhook events.

Only one command is understood: a text message starting with ``check``
whose last whitespace-separated token is a positive integer team ID, e.g.
``check 4212``.  For each such message the sender (group, room or user) is
subscribed to the team's receivers set, the team status is built and the
formatted status is sent back as a reply.

This is the error boundary of the chat path: any failure while handling a
command is logged with its cause and answered with a generic message, and
the remaining events of the batch are still processed.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

import structlog

from ironwatch.interfaces.article_store import IArticleStore
from ironwatch.interfaces.chat_provider import IChatProvider
from ironwatch.services.team_status import TeamStatusService, format_status_message
from ironwatch.utils.errors import ChatDeliveryError, IronwatchError
from ironwatch.utils.logging import get_logger

COMMAND_PREFIX = "check"
MISSING_TEAM_ID_REPLY = "Could not find a team ID in that command."
FAILURE_REPLY = "Something went wrong..."

# ASCII digits only; str.isdigit() also matches "²" and "①".
_TEAM_ID_RE = re.compile(r"[0-9]+")


def parse_team_id(text: str) -> str | None:
    """Return the team ID of a ``check <teamId>`` command, or ``None``."""
    tokens = text.split()
    if len(tokens) < 2:
        return None
    token = tokens[-1]
    if not _TEAM_ID_RE.fullmatch(token) or int(token) <= 0:
        return None
    return str(int(token))


def source_id(source: dict[str, Any]) -> str | None:
    """Pick the receiver ID of an event source: group, then room, then user."""
    source_type = source.get("type")
    if source_type == "group":
        return source.get("groupId")
    if source_type == "room":
        return source.get("roomId")
    return source.get("userId")


def is_check_command(event: dict[str, Any]) -> bool:
    message = event.get("message") or {}
    return (
        event.get("type") == "message"
        and message.get("type") == "text"
        and str(message.get("text", "")).startswith(COMMAND_PREFIX)
    )


class ChatCommandService:
    """Dispatches ``check`` commands from chat webhook events.

    Parameters
    ----------
    status_service:
        Builds the team status for a command.
    store:
        Holds the per-team receivers registry.
    chat:
        Sends replies.  ``None`` when no chat credentials are configured; the
        reply text is then only logged.
    team_url:
        Maps a team ID to its public listing URL for the reply footer.
    """

    def __init__(
        self,
        status_service: TeamStatusService,
        store: IArticleStore,
        chat: IChatProvider | None,
        team_url: Callable[[str], str],
    ) -> None:
        self._status_service = status_service
        self._store = store
        self._chat = chat
        self._team_url = team_url
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def handle_events(self, events: list[dict[str, Any]]) -> int:
        """Process every event and return how many ``check`` commands were handled."""
        handled = 0
        for event in events:
            self._logger.debug("chat_event_received", event_type=event.get("type"))
            if not is_check_command(event):
                continue
            await self._handle_check(event)
            handled += 1
        return handled

    async def _handle_check(self, event: dict[str, Any]) -> None:
        reply_token = event.get("replyToken", "")
        text = str(event["message"]["text"])
        team_id = parse_team_id(text)
        if team_id is None:
            self._logger.info("check_command_without_team_id", text=text)
            await self._reply(reply_token, MISSING_TEAM_ID_REPLY)
            return

        try:
            receiver = source_id(event.get("source") or {})
            if receiver:
                await self._store.add_receiver(team_id, receiver)
            status = await self._status_service.build_status(team_id)
        except IronwatchError as exc:
            self._logger.error(
                "check_command_failed",
                team_id=team_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            await self._reply(reply_token, FAILURE_REPLY)
            return
        except Exception as exc:
            # One bad event must not cost the rest of the batch their replies.
            self._logger.exception(
                "check_command_crashed",
                team_id=team_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            await self._reply(reply_token, FAILURE_REPLY)
            return

        await self._reply(reply_token, format_status_message(status, self._team_url(team_id)))

    async def _reply(self, reply_token: str, text: str) -> None:
        if self._chat is None:
            self._logger.info("chat_disabled_reply", text=text)
            return
        try:
            await self._chat.reply_text(reply_token, text)
        except ChatDeliveryError as exc:
            # The reply token is single-use; nothing left to answer with.
            self._logger.error("chat_reply_failed", error=str(exc))
