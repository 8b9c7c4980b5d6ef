"""Business services: fetch-merge engine, cache writer, status, chat commands."""

from ironwatch.services.article_fetcher import IncrementalArticleFetcher
from ironwatch.services.broadcast import BroadcastReport, StatusBroadcastService
from ironwatch.services.cache_writer import ArticleCacheWriter
from ironwatch.services.chat_commands import ChatCommandService
from ironwatch.services.team_status import TeamStatusService, format_status_message
from ironwatch.services.team_sync import TeamArticleSync

__all__ = [
    "ArticleCacheWriter",
    "BroadcastReport",
    "ChatCommandService",
    "IncrementalArticleFetcher",
    "StatusBroadcastService",
    "TeamArticleSync",
    "TeamStatusService",
    "format_status_message",
]
