"""Tests for event fan-out."""

import asyncio
import json

import pytest

from octobell.schemas.subscriptions import (
    EventFamily,
    IssueAction,
    PullRequestAction,
    SubscriptionKey,
)
from octobell.services.event_router import EventRouter, RouterError, render_event_message
from octobell.services.registry import StorageError
from octobell.services.webhook_decoder import decode_webhook


@pytest.fixture
def issue_event(load_fixture):
    def _make(action: str = "opened", repository_id: int = 42, title: str = "Crash on start"):
        payload = load_fixture("issue_opened")
        payload["action"] = action
        payload["repository"]["id"] = repository_id
        payload["issue"]["title"] = title
        return decode_webhook("issues", json.dumps(payload))

    return _make


@pytest.fixture
def pr_event(load_fixture):
    def _make(action: str = "opened", repository_id: int = 42):
        payload = load_fixture("pr_opened")
        payload["action"] = action
        payload["repository"]["id"] = repository_id
        return decode_webhook("pull_request", json.dumps(payload))

    return _make


@pytest.fixture
async def repo_42(registry, make_repository):
    await registry.add_repository(make_repository(42))


def test_render_issue_message(issue_event):
    assert render_event_message(issue_event()) == "User Septias opened issue Crash on start"


def test_render_pr_message(pr_event):
    message = render_event_message(pr_event("review_requested"))

    assert message == "User Septias review requested PR PR 2"


async def test_subscriber_receives_exactly_one_message(registry, chat, repo_42, issue_event):
    await registry.add_subscriber(SubscriptionKey(42, EventFamily.ISSUE, IssueAction.OPENED), 1)
    router = EventRouter(registry, chat)

    report = await router.route(issue_event())

    assert report.delivered == {1}
    assert report.failed == {}
    messages = chat.messages_for(1)
    assert len(messages) == 1
    assert "Septias" in messages[0]
    assert "Crash on start" in messages[0]
    assert chat.messages_for(2) == []


async def test_no_subscribers_is_noop(registry, chat, repo_42, issue_event):
    router = EventRouter(registry, chat)

    report = await router.route(issue_event("closed"))

    assert report.recipients == set()
    assert chat.sent == []


async def test_only_matching_topic_is_notified(registry, chat, repo_42, issue_event, pr_event):
    await registry.add_subscriber(SubscriptionKey(42, EventFamily.ISSUE, IssueAction.CLOSED), 1)
    await registry.add_subscriber(
        SubscriptionKey(42, EventFamily.PULL_REQUEST, PullRequestAction.CLOSED), 2
    )
    router = EventRouter(registry, chat)

    await router.route(pr_event("closed"))

    assert chat.messages_for(1) == []
    assert chat.messages_for(2) == ["User Septias closed PR PR 2"]


async def test_other_repository_not_notified(registry, chat, repo_42, issue_event):
    await registry.add_subscriber(SubscriptionKey(42, EventFamily.ISSUE, IssueAction.OPENED), 1)
    router = EventRouter(registry, chat)

    await router.route(issue_event(repository_id=43))

    assert chat.sent == []


async def test_partial_failure_still_delivers(registry, chat, repo_42, issue_event):
    key = SubscriptionKey(42, EventFamily.ISSUE, IssueAction.OPENED)
    await registry.add_subscriber(key, 1)
    await registry.add_subscriber(key, 2)
    chat.failing.add(1)
    router = EventRouter(registry, chat)

    report = await router.route(issue_event())

    assert report.delivered == {2}
    assert set(report.failed) == {1}
    assert len(chat.messages_for(2)) == 1


async def test_slow_conversation_times_out(registry, repo_42, issue_event):
    key = SubscriptionKey(42, EventFamily.ISSUE, IssueAction.OPENED)
    await registry.add_subscriber(key, 1)
    await registry.add_subscriber(key, 2)
    delivered = []

    class SlowChat:
        async def send_text(self, conversation_id: int, text: str) -> None:
            if conversation_id == 1:
                await asyncio.sleep(10)
            delivered.append(conversation_id)

    router = EventRouter(registry, SlowChat(), send_timeout=0.05)

    report = await router.route(issue_event())

    assert delivered == [2]
    assert report.failed == {1: "TimeoutError"}


async def test_registry_failure_raises_router_error(chat, issue_event):
    class BrokenRegistry:
        async def get_subscribers(self, repository_id, family, action):
            raise StorageError("database is locked")

    router = EventRouter(BrokenRegistry(), chat)

    with pytest.raises(RouterError):
        await router.route(issue_event())
