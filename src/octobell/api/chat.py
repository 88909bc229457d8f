"""Inbound chat messages posted by the chat relay."""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from ..schemas.chat import InboundMessage
from ..tasks.worker import QueueWorker, WorkerClosedError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def get_command_worker(request: Request) -> QueueWorker[InboundMessage]:
    """Dependency returning the worker that executes chat commands."""
    return request.app.state.command_worker


@router.post("/messages", status_code=status.HTTP_202_ACCEPTED)
async def receive_message(
    message: InboundMessage,
    worker: QueueWorker[InboundMessage] = Depends(get_command_worker),
) -> Response:
    """Queue a message for command handling."""
    try:
        await worker.submit(message)
    except WorkerClosedError:
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    logger.debug(f"Queued message from conversation {message.conversation_id}")
    return Response(status_code=status.HTTP_202_ACCEPTED)
