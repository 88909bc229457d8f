"""Persistent mapping of subscription topics to conversations."""

import asyncio
import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models import Repository, Subscription
from ..schemas.subscriptions import Action, EventFamily, SubscriptionKey, topic_for

logger = logging.getLogger(__name__)

# Drivers raise OverflowError for ints wider than the id columns
STORAGE_ERRORS = (SQLAlchemyError, OverflowError)


class RegistryError(Exception):
    """Base class for registry failures."""


class ConflictError(RegistryError):
    """The record already exists."""


class NotFoundError(RegistryError):
    """The record does not exist."""


class StorageError(RegistryError):
    """The underlying database failed."""


class SubscriberRegistry:
    """
    Source of truth for repositories and their subscribers.

    One instance is shared by every task. Writes go through a single lock and
    commit before returning; each read runs in its own session.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._write_lock = asyncio.Lock()

    async def add_subscriber(self, key: SubscriptionKey, conversation_id: int) -> None:
        """Subscribe a conversation to a topic. Subscribing twice is a no-op."""
        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    if await session.get(Repository, key.repository_id) is None:
                        raise NotFoundError(
                            f"Repository {key.repository_id} is not registered"
                        )
                    if await self._find_subscription(session, key, conversation_id):
                        return
                    session.add(
                        Subscription(
                            repository_id=key.repository_id,
                            topic=key.topic,
                            conversation_id=conversation_id,
                        )
                    )
                    await session.commit()
            except STORAGE_ERRORS as e:
                raise StorageError(f"Failed to add subscriber: {e}") from e
        logger.info(f"Conversation {conversation_id} subscribed to {key.topic} of {key.repository_id}")

    async def remove_subscriber(self, key: SubscriptionKey, conversation_id: int) -> None:
        """Unsubscribe a conversation. Removing a non-member is a no-op."""
        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    await session.execute(
                        delete(Subscription).where(
                            Subscription.repository_id == key.repository_id,
                            Subscription.topic == key.topic,
                            Subscription.conversation_id == conversation_id,
                        )
                    )
                    await session.commit()
            except STORAGE_ERRORS as e:
                raise StorageError(f"Failed to remove subscriber: {e}") from e

    async def get_subscribers(
        self,
        repository_id: int,
        family: EventFamily,
        action: Action,
    ) -> set[int]:
        """Conversations subscribed to a topic; empty if nobody ever subscribed."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Subscription.conversation_id).where(
                        Subscription.repository_id == repository_id,
                        Subscription.topic == topic_for(family, action),
                    )
                )
                return set(result.scalars().all())
        except STORAGE_ERRORS as e:
            raise StorageError(f"Failed to load subscribers: {e}") from e

    async def list_conversation_subscriptions(
        self, conversation_id: int
    ) -> list[SubscriptionKey]:
        """All topics a conversation listens to, ordered by repository and topic."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Subscription.repository_id, Subscription.topic)
                    .where(Subscription.conversation_id == conversation_id)
                    .order_by(Subscription.repository_id, Subscription.topic)
                )
                rows = result.all()
        except STORAGE_ERRORS as e:
            raise StorageError(f"Failed to load subscriptions: {e}") from e

        keys = []
        for repository_id, topic in rows:
            try:
                keys.append(SubscriptionKey.from_topic(repository_id, topic))
            except ValueError:
                logger.warning(f"Skipping unknown topic {topic!r} for repository {repository_id}")
        return keys

    async def add_repository(self, repository: Repository) -> None:
        """Register a repository. Raises ConflictError if the id is taken."""
        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    if await session.get(Repository, repository.id) is not None:
                        raise ConflictError(
                            f"Repository {repository.full_name} is already registered "
                            f"(id {repository.id})"
                        )
                    session.add(repository)
                    await session.commit()
            except IntegrityError as e:
                raise ConflictError(
                    f"Repository {repository.full_name} is already registered (id {repository.id})"
                ) from e
            except STORAGE_ERRORS as e:
                raise StorageError(f"Failed to add repository: {e}") from e
        logger.info(f"Registered repository {repository.full_name} (id={repository.id})")

    async def remove_repository(self, repository_id: int) -> None:
        """Remove a repository together with all of its subscriptions."""
        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    repository = await session.get(Repository, repository_id)
                    if repository is None:
                        raise NotFoundError(f"Repository {repository_id} is not registered")
                    # Explicit so SQLite without foreign key enforcement cascades too
                    await session.execute(
                        delete(Subscription).where(
                            Subscription.repository_id == repository_id
                        )
                    )
                    await session.delete(repository)
                    await session.commit()
            except STORAGE_ERRORS as e:
                raise StorageError(f"Failed to remove repository: {e}") from e
        logger.info(f"Removed repository {repository_id}")

    async def list_repository_ids(self) -> set[int]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(Repository.id))
                return set(result.scalars().all())
        except STORAGE_ERRORS as e:
            raise StorageError(f"Failed to list repositories: {e}") from e

    async def list_repositories(self) -> list[Repository]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Repository).order_by(Repository.owner, Repository.name)
                )
                return list(result.scalars().all())
        except STORAGE_ERRORS as e:
            raise StorageError(f"Failed to list repositories: {e}") from e

    async def get_repository(self, repository_id: int) -> Repository:
        try:
            async with self._session_factory() as session:
                repository = await session.get(Repository, repository_id)
        except STORAGE_ERRORS as e:
            raise StorageError(f"Failed to load repository: {e}") from e
        if repository is None:
            raise NotFoundError(f"Repository {repository_id} is not registered")
        return repository

    @staticmethod
    async def _find_subscription(
        session: AsyncSession,
        key: SubscriptionKey,
        conversation_id: int,
    ) -> Subscription | None:
        result = await session.execute(
            select(Subscription).where(
                Subscription.repository_id == key.repository_id,
                Subscription.topic == key.topic,
                Subscription.conversation_id == conversation_id,
            )
        )
        return result.scalar_one_or_none()
