"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from octobell.models import Base, Repository
from octobell.services.chat_client import ChatDeliveryError
from octobell.services.registry import SubscriberRegistry

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class RecordingChat:
    """ChatClient that records messages and fails for selected conversations."""

    def __init__(self):
        self.sent: list[tuple[int, str]] = []
        self.failing: set[int] = set()

    async def send_text(self, conversation_id: int, text: str) -> None:
        if conversation_id in self.failing:
            raise ChatDeliveryError(f"relay refused conversation {conversation_id}")
        self.sent.append((conversation_id, text))

    def messages_for(self, conversation_id: int) -> list[str]:
        return [text for cid, text in self.sent if cid == conversation_id]


@pytest.fixture
async def db_engine():
    """Create a test database engine."""
    # Use in-memory SQLite shared across sessions
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def registry(session_factory):
    return SubscriberRegistry(session_factory)


@pytest.fixture
def chat():
    return RecordingChat()


@pytest.fixture
def make_repository():
    """Build an unsaved Repository row."""

    def _make(repository_id: int = 42, owner: str = "octo", name: str = "bell") -> Repository:
        return Repository(
            id=repository_id,
            owner=owner,
            name=name,
            url=f"https://github.com/{owner}/{name}",
            webhook_id=1000 + repository_id,
        )

    return _make


@pytest.fixture
def load_fixture():
    """Load a webhook payload from tests/fixtures as a dict."""

    def _load(name: str) -> dict:
        return json.loads((FIXTURES_DIR / f"{name}.json").read_text())

    return _load
