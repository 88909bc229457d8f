"""Fan webhook events out to subscribed conversations."""

import asyncio
import logging
from dataclasses import dataclass, field

from ..config import settings
from ..schemas.github_webhooks import WebhookEvent
from .chat_client import ChatClient
from .registry import RegistryError, SubscriberRegistry

logger = logging.getLogger(__name__)


class RouterError(Exception):
    """Subscribers for an event could not be determined."""


@dataclass
class DeliveryReport:
    """Outcome of routing one event."""

    delivered: set[int] = field(default_factory=set)
    failed: dict[int, str] = field(default_factory=dict)

    @property
    def recipients(self) -> set[int]:
        return self.delivered | set(self.failed)


def render_event_message(event: WebhookEvent) -> str:
    """Human-readable notification text for an event."""
    action = event.action.value.replace("_", " ")
    return f"User {event.sender.login} {action} {event.noun} {event.subject.title}"


class EventRouter:
    """Looks up subscribers for an event and delivers one message to each."""

    def __init__(
        self,
        registry: SubscriberRegistry,
        chat: ChatClient,
        send_timeout: float | None = None,
    ):
        self.registry = registry
        self.chat = chat
        self.send_timeout = (
            send_timeout if send_timeout is not None else settings.chat_send_timeout_seconds
        )

    async def route(self, event: WebhookEvent) -> DeliveryReport:
        """
        Deliver `event` to every subscribed conversation.

        Each conversation gets a single attempt. Failed sends are logged and
        reported, never raised; only a registry failure raises RouterError.
        """
        key = event.subscription_key
        try:
            subscribers = await self.registry.get_subscribers(
                key.repository_id, key.family, key.action
            )
        except RegistryError as e:
            raise RouterError(f"Could not load subscribers for {key.topic}: {e}") from e

        report = DeliveryReport()
        if not subscribers:
            logger.debug(f"No subscribers for {key.topic} on repository {key.repository_id}")
            return report

        text = render_event_message(event)
        conversations = sorted(subscribers)
        results = await asyncio.gather(
            *(self._send(conversation_id, text) for conversation_id in conversations),
            return_exceptions=True,
        )

        for conversation_id, result in zip(conversations, results):
            if isinstance(result, BaseException):
                reason = str(result) or type(result).__name__
                logger.warning(f"Delivery to conversation {conversation_id} failed: {reason}")
                report.failed[conversation_id] = reason
            else:
                report.delivered.add(conversation_id)

        logger.info(
            f"Routed {key.topic} for repository {key.repository_id}: "
            f"{len(report.delivered)} delivered, {len(report.failed)} failed"
        )
        return report

    async def _send(self, conversation_id: int, text: str) -> None:
        await asyncio.wait_for(
            self.chat.send_text(conversation_id, text),
            timeout=self.send_timeout,
        )
