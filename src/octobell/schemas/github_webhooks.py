"""Pydantic models for GitHub webhook payloads."""

from typing import ClassVar

from pydantic import BaseModel, Field

from .subscriptions import MAX_ID, EventFamily, IssueAction, PullRequestAction, SubscriptionKey


class GitHubUser(BaseModel):
    """GitHub user or organization."""

    login: str


class GitHubRepository(BaseModel):
    """Repository reference carried by every webhook."""

    id: int = Field(ge=0, le=MAX_ID)
    name: str
    url: str
    html_url: str | None = None
    full_name: str | None = None


class Issue(BaseModel):
    """Issue details."""

    id: int
    title: str
    url: str
    html_url: str | None = None
    number: int | None = None


class PullRequest(BaseModel):
    """Pull request details."""

    id: int
    title: str
    url: str
    html_url: str | None = None
    number: int | None = None


class IssueEvent(BaseModel):
    """Webhook payload for issues events."""

    family: ClassVar[EventFamily] = EventFamily.ISSUE
    noun: ClassVar[str] = "issue"

    action: IssueAction
    sender: GitHubUser
    repository: GitHubRepository
    issue: Issue

    @property
    def subject(self) -> Issue:
        return self.issue

    @property
    def subscription_key(self) -> SubscriptionKey:
        return SubscriptionKey(self.repository.id, self.family, self.action)


class PullRequestEvent(BaseModel):
    """Webhook payload for pull_request events."""

    family: ClassVar[EventFamily] = EventFamily.PULL_REQUEST
    noun: ClassVar[str] = "PR"

    action: PullRequestAction
    sender: GitHubUser
    repository: GitHubRepository
    pull_request: PullRequest

    @property
    def subject(self) -> PullRequest:
        return self.pull_request

    @property
    def subscription_key(self) -> SubscriptionKey:
        return SubscriptionKey(self.repository.id, self.family, self.action)


WebhookEvent = IssueEvent | PullRequestEvent
