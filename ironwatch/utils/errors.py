"""Custom exception hierarchy for ironwatch.

All application exceptions inherit from :class:`IronwatchError`, which
carries an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "ithome", "sqlite", "line") caused the failure.

The hierarchy is closed and organized by boundary:

    IronwatchError  (base -- catch-all for any ironwatch error)
    +-- FetchError               (remote listing unreachable / HTTP failure)
    |   +-- PaginationLimitError (walk exceeded its page budget)
    +-- ParseError               (listing markup has an unexpected shape)
    +-- ArticleNotFoundError     (listed cache entry missing on read)
    +-- StoreError               (storage backend failure)
    +-- ChatDeliveryError        (chat API reply / push failed)
    +-- ConfigurationError       (startup / missing config)

The fetch-merge engine and the status aggregator never catch these; the
webhook handler, the HTTP middleware and the CLI convert them at the edge.
"""


class IronwatchError(Exception):
    """Base exception for all ironwatch errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which collaborator triggered the error.
    ``__str__`` prefixes the provider name in brackets, e.g.
    ``[ithome] HTTP 503 for https://...``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Remote listing errors
# ---------------------------------------------------------------------------

class FetchError(IronwatchError):
    """Raised when a listing page cannot be retrieved (network, HTTP status, timeout).

    A fetch failure is never interpreted as the end of the listing.
    """

    def __init__(
        self,
        message: str = "Failed to fetch listing page",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PaginationLimitError(FetchError):
    """Raised when a walk requests more pages than its configured budget."""

    def __init__(
        self,
        message: str = "Pagination limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ParseError(IronwatchError):
    """Raised when a fetched page does not match the expected markup."""

    def __init__(
        self,
        message: str = "Unexpected page structure",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Storage errors
# ---------------------------------------------------------------------------

class ArticleNotFoundError(IronwatchError):
    """Raised when a cached article ID is listed but its record is absent."""

    def __init__(
        self,
        message: str = "Cached article not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreError(IronwatchError):
    """Raised when the article store backend fails (I/O, corrupt record)."""

    def __init__(
        self,
        message: str = "Article store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Chat / configuration errors
# ---------------------------------------------------------------------------

class ChatDeliveryError(IronwatchError):
    """Raised when a reply or push message cannot be delivered."""

    def __init__(
        self,
        message: str = "Chat message delivery failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(IronwatchError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
