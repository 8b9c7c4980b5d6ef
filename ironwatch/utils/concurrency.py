"""Per-team mutual exclusion for the fetch-merge-write cycle.

Two overlapping ``check`` commands for the same team would otherwise walk
the listing twice and interleave their cache writes.  ``TeamLockRegistry``
hands out one ``asyncio.Lock`` per team ID so the cycle runs single-flight
per team, while different teams still proceed independently.

``with_deadline`` wraps an awaitable in ``asyncio.wait_for`` and converts
the timeout into a :class:`FetchError` so an unresponsive remote site
cannot stall a request forever.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Awaitable, TypeVar

import structlog

from ironwatch.utils.errors import FetchError
from ironwatch.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


class TeamLockRegistry:
    """Lazily created ``asyncio.Lock`` objects keyed by team ID."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, team_id: str) -> asyncio.Lock:
        """Return the lock for *team_id*, creating it on first use."""
        lock = self._locks.get(team_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[team_id] = lock
        return lock

    def is_locked(self, team_id: str) -> bool:
        lock = self._locks.get(team_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, team_id: str) -> AsyncIterator[None]:
        """Hold the team's lock for the duration of the ``async with`` block."""
        lock = self.get(team_id)
        if lock.locked():
            _logger.info("team_lock_wait", team_id=team_id)
        async with lock:
            yield


async def with_deadline(
    awaitable: Awaitable[_T],
    timeout: float | None,
    what: str,
) -> _T:
    """Await *awaitable*, raising :class:`FetchError` after *timeout* seconds.

    ``timeout=None`` disables the deadline.
    """
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        _logger.warning("deadline_exceeded", what=what, timeout_s=timeout)
        raise FetchError(message=f"{what} exceeded {timeout:.1f}s") from exc
