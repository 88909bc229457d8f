"""Execute chat commands and reply to the sender."""

import asyncio
import logging
from collections.abc import Callable

from ..config import settings
from ..models import Repository
from ..schemas.chat import InboundMessage
from ..schemas.subscriptions import SubscriptionKey
from .chat_client import ChatClient
from .commands import (
    Command,
    Help,
    ParseError,
    RepositoryAdd,
    RepositoryList,
    RepositoryRemove,
    Subscribe,
    Unsubscribe,
    extract_command_tokens,
    get_help_message,
    parse_command,
)
from .github_client import GitHubAPIError, GitHubClient
from .registry import ConflictError, NotFoundError, StorageError, SubscriberRegistry

logger = logging.getLogger(__name__)

STORAGE_FAILURE_REPLY = "Something went wrong while saving your request, please try again later."


def _describe(key: SubscriptionKey) -> str:
    return f"{key.family.value} {key.action.value} events of repository {key.repository_id}"


class CommandHandler:
    """Turns inbound chat messages into registry changes and GitHub calls."""

    def __init__(
        self,
        registry: SubscriberRegistry,
        chat: ChatClient,
        github_client_factory: Callable[[str], GitHubClient] = GitHubClient,
        prefix: str | None = None,
        callback_url: str | None = None,
        send_timeout: float | None = None,
    ):
        self.registry = registry
        self.chat = chat
        self.github_client_factory = github_client_factory
        self.prefix = prefix or settings.command_prefix
        self.callback_url = callback_url or settings.webhook_callback_url
        self.send_timeout = (
            send_timeout if send_timeout is not None else settings.chat_send_timeout_seconds
        )

    async def handle(self, message: InboundMessage) -> None:
        """Process one inbound message and send the reply, if any."""
        reply = await self.respond(message)
        if reply is None:
            return
        try:
            await asyncio.wait_for(
                self.chat.send_text(message.conversation_id, reply),
                timeout=self.send_timeout,
            )
        except Exception as e:
            logger.warning(
                f"Could not reply to conversation {message.conversation_id}: "
                f"{str(e) or type(e).__name__}"
            )

    async def respond(self, message: InboundMessage) -> str | None:
        """Compute the reply text for a message; None means stay silent."""
        tokens = extract_command_tokens(message.text, self.prefix)
        if tokens is None:
            # Groups are noisy, only nudge people in direct chats
            if message.is_group:
                return None
            return f"Commands must start with `{self.prefix}`. Try `{self.prefix} help`."

        try:
            command = parse_command(tokens)
        except ParseError as e:
            return f"{e}\n\n{get_help_message(self.prefix)}"

        try:
            return await self.execute(command, message.conversation_id)
        except (ConflictError, NotFoundError) as e:
            return str(e)
        except GitHubAPIError as e:
            return f"GitHub request failed: {e}"
        except StorageError:
            logger.exception(f"Storage failure while handling {type(command).__name__}")
            return STORAGE_FAILURE_REPLY

    async def execute(self, command: Command, conversation_id: int) -> str:
        """Run a parsed command on behalf of a conversation."""
        match command:
            case Subscribe():
                await self.registry.add_subscriber(command.key, conversation_id)
                return f"Subscribed to {_describe(command.key)}."

            case Unsubscribe():
                await self.registry.remove_subscriber(command.key, conversation_id)
                return f"Unsubscribed from {_describe(command.key)}."

            case RepositoryAdd():
                return await self._add_repository(command)

            case RepositoryRemove():
                return await self._remove_repository(command)

            case RepositoryList():
                return await self._list_repositories(conversation_id)

            case Help():
                return get_help_message(self.prefix)

            case _:
                raise TypeError(f"Unhandled command {command!r}")

    async def _add_repository(self, command: RepositoryAdd) -> str:
        async with self.github_client_factory(command.api_key) as gh:
            metadata = await gh.fetch_repository(command.owner, command.name)
            if metadata.id in await self.registry.list_repository_ids():
                raise ConflictError(
                    f"Repository {command.owner}/{command.name} is already registered "
                    f"(id {metadata.id})"
                )

            hook_id = await gh.create_hook(command.owner, command.name, self.callback_url)
            repository = Repository(
                id=metadata.id,
                owner=metadata.owner.login,
                name=metadata.name,
                url=metadata.html_url or metadata.url,
                webhook_id=hook_id,
            )
            try:
                await self.registry.add_repository(repository)
            except (ConflictError, StorageError):
                # Don't leave an orphaned hook behind
                try:
                    await gh.remove_hook(command.owner, command.name, hook_id)
                except GitHubAPIError as e:
                    logger.warning(
                        f"Could not roll back hook {hook_id} on "
                        f"{command.owner}/{command.name}: {e}"
                    )
                raise

        return (
            f"Added repository {repository.full_name} (id {repository.id}). "
            f"Subscribe with `{self.prefix} subscribe {repository.id} issue opened`."
        )

    async def _remove_repository(self, command: RepositoryRemove) -> str:
        repository = await self.registry.get_repository(command.repository_id)
        async with self.github_client_factory(command.api_key) as gh:
            try:
                await gh.remove_hook(repository.owner, repository.name, repository.webhook_id)
            except GitHubAPIError as e:
                if e.status_code != 404:
                    raise
                logger.warning(
                    f"Hook {repository.webhook_id} on {repository.full_name} is already gone"
                )
        await self.registry.remove_repository(repository.id)
        return f"Removed repository {repository.full_name} (id {repository.id})."

    async def _list_repositories(self, conversation_id: int) -> str:
        repositories = await self.registry.list_repositories()
        if not repositories:
            return f"No repositories registered yet. Add one with `{self.prefix} repositories add`."

        lines = ["Repositories:"]
        lines.extend(f"{r.id}: {r.full_name} ({r.url})" for r in repositories)

        subscriptions = await self.registry.list_conversation_subscriptions(conversation_id)
        if subscriptions:
            lines.append("")
            lines.append("Your subscriptions:")
            lines.extend(
                f"{key.repository_id}: {key.family.value} {key.action.value}"
                for key in subscriptions
            )
        return "\n".join(lines)
