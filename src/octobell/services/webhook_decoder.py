"""Decode raw GitHub webhook deliveries into typed events."""

from pydantic import BaseModel, ValidationError

from ..schemas.github_webhooks import IssueEvent, PullRequestEvent, WebhookEvent


class DecodeError(Exception):
    """A webhook delivery could not be turned into an event."""


class MissingHeaderError(DecodeError):
    def __init__(self) -> None:
        super().__init__("Missing header `X-GitHub-Event`")


class UnrecognizedEventError(DecodeError):
    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"Event type `{event_type}` is not covered")


class PayloadDecodeError(DecodeError):
    def __init__(self, event_type: str, error: ValidationError):
        self.event_type = event_type
        self.error = error
        super().__init__(
            f"Unable to parse `{event_type}` payload: {error.error_count()} validation error(s)"
        )


EVENT_MODELS: dict[str, type[BaseModel]] = {
    "issues": IssueEvent,
    "pull_request": PullRequestEvent,
}


def decode_webhook(event_type: str | None, body: bytes | str) -> WebhookEvent:
    """
    Pick the event model named by the X-GitHub-Event header and validate the body.

    Raises MissingHeaderError, UnrecognizedEventError or PayloadDecodeError.
    """
    if event_type is None:
        raise MissingHeaderError()

    model = EVENT_MODELS.get(event_type)
    if model is None:
        raise UnrecognizedEventError(event_type)

    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        raise PayloadDecodeError(event_type, e) from e
