"""Async HTTP transport for the remote chat service."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from .exceptions import ChatbotError, ChatbotProtocolError, ChatbotTransportError

LOGGER = logging.getLogger(__name__)


class ExchangePayload(BaseModel):
    """Request body for one exchange; built fresh for every send."""

    model_config = ConfigDict(frozen=True)

    message: str
    session_id: str
    file_content: str | None = None
    file_mime_type: str | None = None


class ChatReply(BaseModel):
    """Response body returned by the chat service."""

    response: str
    session_id: str | None = None


@dataclass(frozen=True)
class ExchangeResult:
    """Bot reply plus the session id the service considers authoritative."""

    response_text: str
    session_id: str


class ChatTransport:
    """Send a single exchange to ``POST {base_url}{chat_path}``.

    No retries are attempted; callers decide what a failure means.
    """

    def __init__(
        self,
        base_url: str,
        chat_path: str = "/chat",
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.chat_path = chat_path if chat_path.startswith("/") else f"/{chat_path}"
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.chat_path}"

    async def __aenter__(self) -> ChatTransport:
        return self

    async def __aexit__(self, *_exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client when this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def send(self, payload: ExchangePayload) -> ExchangeResult:
        """Post ``payload`` and parse the service reply.

        Raises:
            ChatbotTransportError: network failure or non-2xx status.
            ChatbotProtocolError: body is not JSON or lacks ``response``.
        """
        LOGGER.info(
            "transport.request",
            extra={
                "event": "transport.request",
                "url": self.url,
                "session_id": payload.session_id,
                "has_file": payload.file_content is not None,
            },
        )
        try:
            response = await self._client.post(
                self.url,
                json=payload.model_dump(),
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            reply = ChatReply.model_validate(response.json())
        except Exception as exc:  # noqa: BLE001 - mapped onto domain errors below.
            mapped = self._map_exception(exc)
            LOGGER.warning(
                "transport.failed",
                extra={
                    "event": "transport.failed",
                    "url": self.url,
                    "error_type": type(mapped).__name__,
                    "reason": str(exc),
                },
            )
            raise mapped from exc

        session_id = (reply.session_id or "").strip() or payload.session_id
        LOGGER.info(
            "transport.response",
            extra={
                "event": "transport.response",
                "status_code": response.status_code,
                "session_id": session_id,
            },
        )
        return ExchangeResult(response_text=reply.response, session_id=session_id)

    def _map_exception(self, exc: Exception) -> ChatbotError:
        if isinstance(exc, ChatbotError):
            return exc
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            return ChatbotTransportError(
                f"Chat service at {self.url} returned HTTP {status}.",
                status_code=status,
            )
        if isinstance(exc, httpx.RequestError):
            return ChatbotTransportError(
                f"Unable to reach chat service at {self.url}: {exc}"
            )
        if isinstance(exc, (json.JSONDecodeError, UnicodeDecodeError, ValidationError)):
            return ChatbotProtocolError(
                f"Unexpected response from chat service at {self.url}."
            )
        return ChatbotTransportError(
            f"Request to chat service at {self.url} failed: {exc}"
        )
