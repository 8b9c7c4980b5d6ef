"""LINE Messaging API chat provider.

Sends text replies to webhook events and push messages to subscribed users,
groups and rooms through ``api.line.me`` with an injected
``httpx.AsyncClient``.  Also verifies the ``X-Line-Signature`` header of
inbound webhook bodies.
"""

from __future__ import annotations

import base64
import hashlib
import hmac

import httpx

from ironwatch.interfaces.chat_provider import IChatProvider
from ironwatch.utils.errors import ChatDeliveryError
from ironwatch.utils.logging import get_logger

_DEFAULT_BASE_URL = "https://api.line.me"
_REPLY_PATH = "/v2/bot/message/reply"
_PUSH_PATH = "/v2/bot/message/push"
_DEFAULT_TIMEOUT = 10.0
# LINE rejects text messages longer than this.
_MAX_TEXT_LENGTH = 5000


def verify_signature(channel_secret: str, body: bytes, signature: str) -> bool:
    """Return ``True`` if *signature* is the base64 HMAC-SHA256 of *body*.

    Uses a constant-time comparison.
    """
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode("ascii")
    return hmac.compare_digest(expected, signature or "")


class LineMessagingProvider(IChatProvider):
    """Chat provider for the LINE Messaging API.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``.
    channel_access_token:
        Long-lived channel access token from the LINE developer console.
    base_url:
        API root; overridden in tests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        channel_access_token: str,
        base_url: str = _DEFAULT_BASE_URL,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._token = channel_access_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._logger = get_logger(__name__)

    async def _post(self, path: str, payload: dict) -> None:
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }
        url = f"{self._base_url}{path}"
        try:
            response = await self._http.post(url, json=payload, headers=headers, timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise ChatDeliveryError(
                message=f"Request to {path} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code != 200:
            # LINE puts the reason in {"message": ...}; keep it for the logs.
            self._logger.error(
                "line_api_error",
                path=path,
                status=response.status_code,
                body=response.text[:500],
            )
            raise ChatDeliveryError(
                message=f"HTTP {response.status_code} from {path}",
                provider_name=self.get_provider_name(),
            )

    @staticmethod
    def _text_message(text: str) -> dict[str, str]:
        return {"type": "text", "text": text[:_MAX_TEXT_LENGTH]}

    # ------------------------------------------------------------------
    # IChatProvider implementation
    # ------------------------------------------------------------------

    async def reply_text(self, reply_token: str, text: str) -> None:
        await self._post(
            _REPLY_PATH,
            {"replyToken": reply_token, "messages": [self._text_message(text)]},
        )
        self._logger.info("line_reply_sent", length=len(text))

    async def push_text(self, to: str, text: str) -> None:
        await self._post(
            _PUSH_PATH,
            {"to": to, "messages": [self._text_message(text)]},
        )
        self._logger.info("line_push_sent", to=to, length=len(text))

    def get_provider_name(self) -> str:
        return "line"
