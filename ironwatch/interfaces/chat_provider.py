"""Abstract base class for chat messaging providers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class IChatProvider(ABC):
    """Contract for sending text messages back to chat users."""

    @abstractmethod
    async def reply_text(self, reply_token: str, text: str) -> None:
        """Answer an inbound event identified by *reply_token*.

        Raises
        ------
        ironwatch.utils.errors.ChatDeliveryError
            If the message could not be delivered.
        """

    @abstractmethod
    async def push_text(self, to: str, text: str) -> None:
        """Send *text* unprompted to a user, group or room ID."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"line"``."""
