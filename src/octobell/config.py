"""Application configuration using Pydantic settings."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database - SQLAlchemy (aiosqlite or asyncpg)
    database_url: str = Field(
        "sqlite+aiosqlite:///./octobell.db",
        description="SQLAlchemy connection string (sqlite+aiosqlite:// or postgresql+asyncpg://)",
    )

    # Server
    host: str = Field("0.0.0.0")
    port: int = Field(8080)
    log_level: str = Field("INFO")
    public_url: str = Field(
        "http://127.0.0.1:8080",
        description="Address GitHub can reach this service on; hooks post to {public_url}/receive",
    )

    # GitHub REST
    github_api_url: str = Field("https://api.github.com")
    github_timeout_seconds: float = Field(
        30.0,
        description="Timeout for hook create/remove and repository lookups",
    )

    # Chat relay
    chat_relay_url: str = Field(
        "http://127.0.0.1:9000",
        description="Base URL of the chat relay that delivers outbound messages",
    )
    chat_relay_token: str | None = Field(
        None,
        description="Bearer token sent to the chat relay, if it requires one",
    )
    chat_send_timeout_seconds: float = Field(
        10.0,
        description="Upper bound for a single outbound chat message",
    )

    # Commands
    command_prefix: str = Field(
        "gh",
        description="Keyword a chat message must start with to be treated as a command",
    )

    # Queues
    queue_max_size: int = Field(
        100,
        description="Pending items per queue before producers are suspended",
    )
    shutdown_drain_seconds: float = Field(
        5.0,
        description="How long shutdown waits for queued work before abandoning it",
    )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def webhook_callback_url(self) -> str:
        """URL registered on GitHub hooks."""
        return f"{self.public_url.rstrip('/')}/receive"


settings = Settings()
