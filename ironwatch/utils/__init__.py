"""Utility modules for ironwatch.

- **errors** -- Closed exception hierarchy rooted at IronwatchError; each
  boundary (remote listing, store, chat) raises its own subclass.
- **concurrency** -- per-team ``asyncio.Lock`` registry and a deadline
  helper for the fetch-merge-write cycle.
- **logging** -- structlog setup: coloured console or JSON for the server,
  plain stderr output for the CLI.
"""

from ironwatch.utils.concurrency import TeamLockRegistry, with_deadline
from ironwatch.utils.errors import (
    ArticleNotFoundError,
    ChatDeliveryError,
    ConfigurationError,
    FetchError,
    IronwatchError,
    PaginationLimitError,
    ParseError,
    StoreError,
)
from ironwatch.utils.logging import configure_cli_logging, configure_logging, get_logger

__all__ = [
    "ArticleNotFoundError",
    "ChatDeliveryError",
    "ConfigurationError",
    "FetchError",
    "IronwatchError",
    "PaginationLimitError",
    "ParseError",
    "StoreError",
    "TeamLockRegistry",
    "configure_cli_logging",
    "configure_logging",
    "get_logger",
    "with_deadline",
]
