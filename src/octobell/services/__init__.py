"""Business logic services."""

from .chat_client import ChatClient, ChatDeliveryError, RelayChatClient
from .command_handler import CommandHandler
from .commands import (
    Command,
    Help,
    InvalidArgumentError,
    ParseError,
    RepositoryAdd,
    RepositoryList,
    RepositoryRemove,
    Subscribe,
    UnknownCommandError,
    Unsubscribe,
    extract_command_tokens,
    get_help_message,
    parse_command,
)
from .event_router import DeliveryReport, EventRouter, RouterError, render_event_message
from .github_client import GitHubAPIError, GitHubClient, RepositoryMetadata
from .registry import (
    ConflictError,
    NotFoundError,
    RegistryError,
    StorageError,
    SubscriberRegistry,
)
from .webhook_decoder import (
    DecodeError,
    MissingHeaderError,
    PayloadDecodeError,
    UnrecognizedEventError,
    decode_webhook,
)

__all__ = [
    "ChatClient",
    "ChatDeliveryError",
    "Command",
    "CommandHandler",
    "ConflictError",
    "DecodeError",
    "DeliveryReport",
    "EventRouter",
    "GitHubAPIError",
    "GitHubClient",
    "Help",
    "InvalidArgumentError",
    "MissingHeaderError",
    "NotFoundError",
    "ParseError",
    "PayloadDecodeError",
    "RegistryError",
    "RelayChatClient",
    "RepositoryAdd",
    "RepositoryList",
    "RepositoryMetadata",
    "RepositoryRemove",
    "RouterError",
    "StorageError",
    "Subscribe",
    "SubscriberRegistry",
    "UnknownCommandError",
    "UnrecognizedEventError",
    "Unsubscribe",
    "decode_webhook",
    "extract_command_tokens",
    "get_help_message",
    "parse_command",
    "render_event_message",
]
