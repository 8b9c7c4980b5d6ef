"""Pushes the current status of every known team to its receivers.

Meant to be run periodically (cron, scheduler) through
``python -m ironwatch.cli broadcast``.  Teams are processed one at a time;
a team whose status cannot be built is skipped and reported, the remaining
teams still get their update.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog
from pydantic import BaseModel, ConfigDict, Field

from ironwatch.interfaces.article_store import IArticleStore
from ironwatch.interfaces.chat_provider import IChatProvider
from ironwatch.services.team_status import TeamStatusService, format_status_message
from ironwatch.utils.errors import ChatDeliveryError, IronwatchError
from ironwatch.utils.logging import get_logger


class BroadcastReport(BaseModel):
    """Outcome of one broadcast run."""

    model_config = ConfigDict(frozen=True)

    teams: int = 0
    messages_sent: int = 0
    failed_teams: list[str] = Field(default_factory=list)
    failed_deliveries: int = 0


class StatusBroadcastService:
    """Sends each subscribed receiver the latest status of its team."""

    def __init__(
        self,
        status_service: TeamStatusService,
        store: IArticleStore,
        chat: IChatProvider,
        team_url: Callable[[str], str],
    ) -> None:
        self._status_service = status_service
        self._store = store
        self._chat = chat
        self._team_url = team_url
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def broadcast_all(self) -> BroadcastReport:
        team_ids = await self._store.list_team_ids()
        sent = 0
        failed_deliveries = 0
        failed_teams: list[str] = []

        for team_id in team_ids:
            try:
                status = await self._status_service.build_status(team_id)
            except IronwatchError as exc:
                self._logger.error("broadcast_status_failed", team_id=team_id, error=str(exc))
                failed_teams.append(team_id)
                continue

            text = format_status_message(status, self._team_url(team_id))
            for receiver in sorted(await self._store.list_receivers(team_id)):
                try:
                    await self._chat.push_text(receiver, text)
                    sent += 1
                except ChatDeliveryError as exc:
                    self._logger.error(
                        "broadcast_push_failed",
                        team_id=team_id,
                        receiver=receiver,
                        error=str(exc),
                    )
                    failed_deliveries += 1

        report = BroadcastReport(
            teams=len(team_ids),
            messages_sent=sent,
            failed_teams=failed_teams,
            failed_deliveries=failed_deliveries,
        )
        self._logger.info("broadcast_complete", **report.model_dump())
        return report
