"""Tests for the subscriber registry."""

import asyncio

import pytest
from sqlalchemy import func, select

from octobell.models import Subscription
from octobell.schemas.subscriptions import (
    EventFamily,
    IssueAction,
    PullRequestAction,
    SubscriptionKey,
)
from octobell.services.registry import ConflictError, NotFoundError, StorageError

ISSUE_OPENED = SubscriptionKey(42, EventFamily.ISSUE, IssueAction.OPENED)
PR_CLOSED = SubscriptionKey(42, EventFamily.PULL_REQUEST, PullRequestAction.CLOSED)


@pytest.fixture
async def repo_42(registry, make_repository):
    repository = make_repository(42)
    await registry.add_repository(repository)
    return repository


async def test_add_subscriber_is_idempotent(registry, repo_42, session_factory):
    await registry.add_subscriber(ISSUE_OPENED, 1)
    await registry.add_subscriber(ISSUE_OPENED, 1)

    assert await registry.get_subscribers(42, EventFamily.ISSUE, IssueAction.OPENED) == {1}

    async with session_factory() as session:
        count = await session.scalar(select(func.count()).select_from(Subscription))
    assert count == 1


async def test_subscribers_are_scoped_by_topic(registry, repo_42):
    await registry.add_subscriber(ISSUE_OPENED, 1)
    await registry.add_subscriber(ISSUE_OPENED, 2)
    await registry.add_subscriber(PR_CLOSED, 3)

    assert await registry.get_subscribers(42, EventFamily.ISSUE, IssueAction.OPENED) == {1, 2}
    assert await registry.get_subscribers(
        42, EventFamily.PULL_REQUEST, PullRequestAction.CLOSED
    ) == {3}
    # Same action name, other family
    assert await registry.get_subscribers(
        42, EventFamily.PULL_REQUEST, PullRequestAction.OPENED
    ) == set()


async def test_get_subscribers_for_unknown_key(registry):
    assert await registry.get_subscribers(999, EventFamily.ISSUE, IssueAction.CLOSED) == set()


async def test_oversized_ids_are_storage_errors(registry):
    """Test ids the driver cannot bind surface as StorageError."""
    with pytest.raises(StorageError):
        await registry.get_subscribers(2**70, EventFamily.ISSUE, IssueAction.OPENED)
    with pytest.raises(StorageError):
        await registry.add_subscriber(SubscriptionKey(2**70, EventFamily.ISSUE, IssueAction.OPENED), 1)


async def test_remove_subscriber(registry, repo_42):
    await registry.add_subscriber(ISSUE_OPENED, 1)
    await registry.add_subscriber(ISSUE_OPENED, 2)

    await registry.remove_subscriber(ISSUE_OPENED, 1)

    assert await registry.get_subscribers(42, EventFamily.ISSUE, IssueAction.OPENED) == {2}


async def test_remove_absent_subscriber_is_noop(registry, repo_42):
    await registry.remove_subscriber(ISSUE_OPENED, 7)
    await registry.remove_subscriber(
        SubscriptionKey(5, EventFamily.ISSUE, IssueAction.OPENED), 7
    )

    assert await registry.get_subscribers(42, EventFamily.ISSUE, IssueAction.OPENED) == set()


async def test_subscribe_to_unknown_repository_rejected(registry):
    with pytest.raises(NotFoundError):
        await registry.add_subscriber(ISSUE_OPENED, 1)


async def test_repository_ids_follow_add_and_remove(registry, make_repository):
    for repository_id in (1, 558781383, 2**40):
        await registry.add_repository(make_repository(repository_id))
        assert repository_id in await registry.list_repository_ids()

        await registry.remove_repository(repository_id)
        assert repository_id not in await registry.list_repository_ids()


async def test_add_repository_conflict(registry, repo_42, make_repository):
    with pytest.raises(ConflictError):
        await registry.add_repository(make_repository(42, owner="other", name="clone"))

    stored = await registry.get_repository(42)
    assert stored.full_name == "octo/bell"


async def test_get_repository(registry, repo_42):
    stored = await registry.get_repository(42)

    assert stored.owner == "octo"
    assert stored.name == "bell"
    assert stored.url == "https://github.com/octo/bell"
    assert stored.webhook_id == 1042


async def test_get_missing_repository(registry):
    with pytest.raises(NotFoundError):
        await registry.get_repository(1)


async def test_remove_missing_repository(registry):
    with pytest.raises(NotFoundError):
        await registry.remove_repository(1)


async def test_remove_repository_cascades_subscriptions(registry, repo_42, make_repository):
    await registry.add_subscriber(ISSUE_OPENED, 1)
    await registry.add_subscriber(PR_CLOSED, 2)

    await registry.remove_repository(42)
    # Re-adding the same id must not resurrect old subscribers
    await registry.add_repository(make_repository(42))

    assert await registry.get_subscribers(42, EventFamily.ISSUE, IssueAction.OPENED) == set()
    assert await registry.list_conversation_subscriptions(1) == []


async def test_list_repositories_sorted(registry, make_repository):
    await registry.add_repository(make_repository(2, owner="zeta", name="a"))
    await registry.add_repository(make_repository(1, owner="alpha", name="b"))

    names = [r.full_name for r in await registry.list_repositories()]
    assert names == ["alpha/b", "zeta/a"]


async def test_list_conversation_subscriptions(registry, repo_42):
    await registry.add_subscriber(PR_CLOSED, 1)
    await registry.add_subscriber(ISSUE_OPENED, 1)
    await registry.add_subscriber(ISSUE_OPENED, 2)

    assert await registry.list_conversation_subscriptions(1) == [ISSUE_OPENED, PR_CLOSED]


async def test_concurrent_subscribes_do_not_lose_updates(registry, repo_42):
    await asyncio.gather(
        *(registry.add_subscriber(ISSUE_OPENED, conversation) for conversation in range(20)),
        *(registry.add_subscriber(ISSUE_OPENED, 3) for _ in range(5)),
    )

    assert await registry.get_subscribers(
        42, EventFamily.ISSUE, IssueAction.OPENED
    ) == set(range(20))


def test_subscription_key_rejects_mismatched_action():
    with pytest.raises(ValueError):
        SubscriptionKey(1, EventFamily.ISSUE, PullRequestAction.SYNCHRONIZE)


def test_subscription_key_topic_round_trip():
    key = SubscriptionKey(3, EventFamily.PULL_REQUEST, PullRequestAction.REVIEW_REQUEST_REMOVED)

    assert key.topic == "pr_review_request_removed"
    assert SubscriptionKey.from_topic(3, key.topic) == key
