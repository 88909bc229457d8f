"""Outbound side of the chat transport."""

import logging
from typing import Any, Protocol

import httpx

from ..config import settings
from ..schemas.chat import OutboundMessage

logger = logging.getLogger(__name__)


class ChatDeliveryError(Exception):
    """The chat relay did not accept a message."""


class ChatClient(Protocol):
    """Anything that can send text to a conversation."""

    async def send_text(self, conversation_id: int, text: str) -> None: ...


class RelayChatClient:
    """Delivers messages through an HTTP chat relay (POST {base_url}/messages)."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"User-Agent": "octobell"}
        token = token if token is not None else settings.chat_relay_token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=base_url or settings.chat_relay_url,
            headers=headers,
            timeout=timeout if timeout is not None else settings.chat_send_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "RelayChatClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def send_text(self, conversation_id: int, text: str) -> None:
        message = OutboundMessage(conversation_id=conversation_id, text=text)
        try:
            response = await self._client.post("/messages", json=message.model_dump())
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ChatDeliveryError(
                f"Relay rejected message for conversation {conversation_id}: {e}"
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()
