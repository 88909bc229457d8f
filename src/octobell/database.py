"""Database connection, session management and schema migrations."""

import logging
from collections.abc import AsyncGenerator

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import settings

logger = logging.getLogger(__name__)

# Create async engine
async_engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
)

# Session factory
async_session_factory = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI to get a database session."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def _upgrade_to_head(connection: Connection) -> None:
    config = Config()
    config.set_main_option("script_location", "octobell:migrations")
    config.attributes["connection"] = connection
    command.upgrade(config, "head")


async def init_db(engine: AsyncEngine = async_engine) -> None:
    """Bring the schema up to the latest revision (called on startup, failure is fatal)."""
    async with engine.begin() as conn:
        await conn.run_sync(_upgrade_to_head)
    logger.info("Database schema is up to date")
