"""GitHub webhook receiver."""

import logging

from fastapi import APIRouter, Depends, Header, Request, Response, status

from ..schemas.github_webhooks import WebhookEvent
from ..services.webhook_decoder import DecodeError, decode_webhook
from ..tasks.worker import QueueWorker, WorkerClosedError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks"])


def get_event_worker(request: Request) -> QueueWorker[WebhookEvent]:
    """Dependency returning the worker that routes webhook events."""
    return request.app.state.event_worker


@router.post("/receive", status_code=status.HTTP_202_ACCEPTED)
async def receive_webhook(
    request: Request,
    x_github_event: str | None = Header(None, alias="X-GitHub-Event"),
    worker: QueueWorker[WebhookEvent] = Depends(get_event_worker),
) -> Response:
    """
    Accept a GitHub delivery for issues or pull_request.

    The response only confirms receipt: undecodable deliveries are logged and
    acknowledged, and routing happens after the response is sent.
    """
    if not worker.accepting:
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    body = await request.body()
    try:
        event = decode_webhook(x_github_event, body)
    except DecodeError as e:
        logger.warning(f"Dropping webhook delivery: {e}")
        return Response(status_code=status.HTTP_202_ACCEPTED)

    try:
        await worker.submit(event)
    except WorkerClosedError:
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    logger.info(
        f"Queued {x_github_event}/{event.action.value} for {event.repository.name} "
        f"(id={event.repository.id}, sender={event.sender.login})"
    )
    return Response(status_code=status.HTTP_202_ACCEPTED)
