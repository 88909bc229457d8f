"""Pydantic schemas and value types."""

from .chat import InboundMessage, OutboundMessage
from .github_webhooks import (
    GitHubRepository,
    GitHubUser,
    Issue,
    IssueEvent,
    PullRequest,
    PullRequestEvent,
    WebhookEvent,
)
from .subscriptions import (
    ACTIONS_BY_FAMILY,
    Action,
    EventFamily,
    IssueAction,
    PullRequestAction,
    SubscriptionKey,
    topic_for,
)

__all__ = [
    "ACTIONS_BY_FAMILY",
    "Action",
    "EventFamily",
    "GitHubRepository",
    "GitHubUser",
    "InboundMessage",
    "Issue",
    "IssueAction",
    "IssueEvent",
    "OutboundMessage",
    "PullRequest",
    "PullRequestAction",
    "PullRequestEvent",
    "SubscriptionKey",
    "WebhookEvent",
    "topic_for",
]
