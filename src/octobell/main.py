"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api.router import router
from .config import settings
from .database import async_engine, async_session_factory, init_db
from .schemas.chat import InboundMessage
from .schemas.github_webhooks import WebhookEvent
from .services.chat_client import RelayChatClient
from .services.command_handler import CommandHandler
from .services.event_router import EventRouter
from .services.registry import SubscriberRegistry
from .tasks.worker import QueueWorker
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    await init_db()

    chat = RelayChatClient()
    registry = SubscriberRegistry(async_session_factory)
    event_worker: QueueWorker[WebhookEvent] = QueueWorker(
        "webhook-events", EventRouter(registry, chat).route
    )
    command_worker: QueueWorker[InboundMessage] = QueueWorker(
        "chat-commands", CommandHandler(registry, chat).handle
    )
    app.state.registry = registry
    app.state.event_worker = event_worker
    app.state.command_worker = command_worker

    event_worker.start()
    command_worker.start()
    logger.info(f"Listening for webhooks, hooks will call {settings.webhook_callback_url}")
    yield

    # Shutdown
    await event_worker.stop()
    await command_worker.stop()
    await chat.aclose()
    await async_engine.dispose()


app = FastAPI(
    title="Octobell",
    description="GitHub issue and pull request notifications for chat conversations",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routes
app.include_router(router)


def run() -> None:
    import uvicorn

    uvicorn.run(
        "octobell.main:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
