"""Chat providers."""

from ironwatch.providers.chat.line_provider import LineMessagingProvider, verify_signature

__all__ = ["LineMessagingProvider", "verify_signature"]
