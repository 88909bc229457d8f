"""Parse bot commands from chat messages."""

from collections.abc import Sequence
from dataclasses import dataclass

from ..schemas.subscriptions import (
    ACTIONS_BY_FAMILY,
    MAX_ID,
    Action,
    EventFamily,
    SubscriptionKey,
)


class ParseError(ValueError):
    """A chat command could not be parsed."""


class UnknownCommandError(ParseError):
    """The command word is not part of the grammar."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Unknown command `{token}`")


class InvalidArgumentError(ParseError):
    """A command argument is missing, surplus or malformed."""

    def __init__(self, message: str, token: str | None = None):
        self.token = token
        super().__init__(message)


@dataclass(frozen=True)
class Subscribe:
    repository_id: int
    family: EventFamily
    action: Action

    @property
    def key(self) -> SubscriptionKey:
        return SubscriptionKey(self.repository_id, self.family, self.action)


@dataclass(frozen=True)
class Unsubscribe:
    repository_id: int
    family: EventFamily
    action: Action

    @property
    def key(self) -> SubscriptionKey:
        return SubscriptionKey(self.repository_id, self.family, self.action)


@dataclass(frozen=True)
class RepositoryAdd:
    owner: str
    name: str
    api_key: str


@dataclass(frozen=True)
class RepositoryRemove:
    repository_id: int
    api_key: str


@dataclass(frozen=True)
class RepositoryList:
    pass


@dataclass(frozen=True)
class Help:
    pass


Command = Subscribe | Unsubscribe | RepositoryAdd | RepositoryRemove | RepositoryList | Help

_FAMILY_TOKENS = {family.value: family for family in EventFamily}


def extract_command_tokens(text: str, prefix: str) -> list[str] | None:
    """
    Split a chat message into command tokens.

    The message must start with `prefix` (case-insensitive). Returns the tokens
    after the prefix, or None if the message is not addressed to the bot.
    """
    tokens = text.split()
    if not tokens or tokens[0].lower() != prefix.lower():
        return None
    return tokens[1:]


def parse_command(tokens: Sequence[str]) -> Command:
    """
    Parse command tokens (trigger keyword already stripped).

    Grammar:
    - subscribe <repo_id> (issue <issue_action> | pr <pr_action>)
    - unsubscribe <repo_id> (issue <issue_action> | pr <pr_action>)
    - repositories list
    - repositories add <owner> <repo_name> <api_key>
    - repositories remove <repo_id> <api_key>
    - help

    Raises UnknownCommandError or InvalidArgumentError.
    """
    if not tokens:
        return Help()

    head, args = tokens[0], list(tokens[1:])

    match head:
        case "subscribe" | "unsubscribe":
            _expect_count(head, args, 3, "<repo_id> (issue|pr) <action>")
            repository_id = _parse_repository_id(args[0])
            family, action = _parse_topic(args[1], args[2])
            if head == "subscribe":
                return Subscribe(repository_id, family, action)
            return Unsubscribe(repository_id, family, action)

        case "repositories":
            if not args:
                raise InvalidArgumentError(
                    "Missing subcommand for `repositories` (list, add, remove)"
                )
            return _parse_repositories(args[0], args[1:])

        case "help":
            _expect_count(head, args, 0, "")
            return Help()

        case _:
            raise UnknownCommandError(head)


def _parse_repositories(sub: str, args: list[str]) -> Command:
    match sub:
        case "list":
            _expect_count("repositories list", args, 0, "")
            return RepositoryList()
        case "add":
            _expect_count("repositories add", args, 3, "<owner> <repo_name> <api_key>")
            return RepositoryAdd(owner=args[0], name=args[1], api_key=args[2])
        case "remove":
            _expect_count("repositories remove", args, 2, "<repo_id> <api_key>")
            return RepositoryRemove(
                repository_id=_parse_repository_id(args[0]),
                api_key=args[1],
            )
        case _:
            raise UnknownCommandError(f"repositories {sub}")


def _expect_count(command: str, args: list[str], count: int, usage: str) -> None:
    if len(args) == count:
        return
    if len(args) < count:
        raise InvalidArgumentError(f"Missing arguments, usage: `{command} {usage}`".rstrip())
    surplus = args[count]
    raise InvalidArgumentError(f"Unexpected argument `{surplus}` for `{command}`", surplus)


def _parse_repository_id(token: str) -> int:
    # isdigit() rejects signs, so negative ids never get through
    if not token.isascii() or not token.isdigit():
        raise InvalidArgumentError(
            f"Repository id must be a non-negative integer, got `{token}`", token
        )
    repository_id = int(token)
    if repository_id > MAX_ID:
        raise InvalidArgumentError(f"Repository id `{token}` is too large", token)
    return repository_id


def _parse_topic(family_token: str, action_token: str) -> tuple[EventFamily, Action]:
    family = _FAMILY_TOKENS.get(family_token)
    if family is None:
        raise InvalidArgumentError(
            f"Unknown event family `{family_token}`, expected `issue` or `pr`",
            family_token,
        )
    try:
        action = ACTIONS_BY_FAMILY[family](action_token)
    except ValueError:
        valid = ", ".join(a.value for a in ACTIONS_BY_FAMILY[family])
        raise InvalidArgumentError(
            f"Unknown {family.value} action `{action_token}`, expected one of: {valid}",
            action_token,
        ) from None
    return family, action


def get_help_message(prefix: str) -> str:
    """Generate usage text for the configured trigger keyword."""
    issue_actions = ", ".join(a.value for a in ACTIONS_BY_FAMILY[EventFamily.ISSUE])
    pr_actions = ", ".join(a.value for a in ACTIONS_BY_FAMILY[EventFamily.PULL_REQUEST])

    return f"""GitHub notification commands:

{prefix} subscribe <repo_id> issue <action>
{prefix} subscribe <repo_id> pr <action>
{prefix} unsubscribe <repo_id> issue <action>
{prefix} unsubscribe <repo_id> pr <action>
{prefix} repositories list
{prefix} repositories add <owner> <repo_name> <api_key>
{prefix} repositories remove <repo_id> <api_key>
{prefix} help

Issue actions: {issue_actions}
PR actions: {pr_actions}"""
