"""Async HTTP client for the LINE Messaging API reply endpoint."""

from __future__ import annotations

import base64
from collections.abc import Sequence
from dataclasses import dataclass
import hashlib
import hmac

import httpx

from stickerbot.schemas.line import ReplyRequest, TextMessage

REPLY_PATH = "/v2/bot/message/reply"
SIGNATURE_HEADER = "X-Line-Signature"


class LineClientError(RuntimeError):
    """Base exception raised for LINE API client failures."""


class LineTimeoutError(LineClientError):
    """Raised when a request exceeded the configured timeout."""

    def __init__(self, message: str = "LINE request timed out") -> None:
        super().__init__(message)


class LineHTTPStatusError(LineClientError):
    """Raised when the LINE API returned an unexpected status code."""

    def __init__(self, status_code: int, message: str, *, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def compute_signature(channel_secret: str, body: bytes) -> str:
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(channel_secret: str, body: bytes, signature: str | None) -> bool:
    """Check the ``X-Line-Signature`` header against the raw request *body*."""

    if not signature:
        return False
    expected = compute_signature(channel_secret, body)
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("ascii", "ignore"))


@dataclass(slots=True)
class LineMessagingClient:
    """HTTPX based client for replying to webhook events."""

    channel_token: str
    base_url: str = "https://api.line.me"
    transport: httpx.AsyncBaseTransport | None = None
    timeout_ms: int = 10_000

    async def reply(self, reply_token: str, messages: Sequence[str]) -> None:
        """Reply to the event identified by *reply_token* with text *messages*."""

        payload = ReplyRequest(
            reply_token=reply_token,
            messages=[TextMessage(text=text) for text in messages],
        )
        await self._request("POST", REPLY_PATH, json=payload.model_dump(by_alias=True))

    async def _request(self, method: str, path: str, *, json: object) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self.channel_token}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url.rstrip("/"),
                timeout=self._build_timeout(self.timeout_ms),
                headers=headers,
                transport=self.transport,
            ) as client:
                response = await client.request(method, path, json=json)
        except httpx.TimeoutException as exc:
            raise LineTimeoutError() from exc
        except httpx.HTTPError as exc:
            raise LineClientError(f"LINE request failed: {exc}") from exc

        if response.is_success:
            return response
        raise LineHTTPStatusError(
            response.status_code,
            "LINE rejected the request",
            body=response.text[:200],
        )

    @staticmethod
    def _build_timeout(timeout_ms: int) -> httpx.Timeout:
        timeout_seconds = max(timeout_ms, 100) / 1000
        return httpx.Timeout(timeout_seconds, connect=min(timeout_seconds, 5.0))


__all__ = [
    "LineClientError",
    "LineHTTPStatusError",
    "LineMessagingClient",
    "LineTimeoutError",
    "SIGNATURE_HEADER",
    "compute_signature",
    "verify_signature",
]
