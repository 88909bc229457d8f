"""Event families, their actions, and subscription keys."""

from dataclasses import dataclass
from enum import Enum

# Ids are stored in signed 64-bit columns
MAX_ID = 2**63 - 1


class EventFamily(str, Enum):
    """Broad category of a repository event."""

    ISSUE = "issue"
    PULL_REQUEST = "pr"


class IssueAction(str, Enum):
    """Actions GitHub reports on `issues` webhooks."""

    OPENED = "opened"
    EDITED = "edited"
    DELETED = "deleted"
    PINNED = "pinned"
    UNPINNED = "unpinned"
    CLOSED = "closed"
    REOPENED = "reopened"
    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"
    LABELED = "labeled"
    UNLABELED = "unlabeled"
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    TRANSFERRED = "transferred"
    MILESTONED = "milestoned"
    DEMILESTONED = "demilestoned"


class PullRequestAction(str, Enum):
    """Actions GitHub reports on `pull_request` webhooks."""

    OPENED = "opened"
    EDITED = "edited"
    CLOSED = "closed"
    REOPENED = "reopened"
    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"
    REVIEW_REQUESTED = "review_requested"
    REVIEW_REQUEST_REMOVED = "review_request_removed"
    LABELED = "labeled"
    UNLABELED = "unlabeled"
    SYNCHRONIZE = "synchronize"

    @classmethod
    def _missing_(cls, value: object) -> "PullRequestAction | None":
        if value == "synchronized":
            return cls.SYNCHRONIZE
        return None


Action = IssueAction | PullRequestAction

ACTIONS_BY_FAMILY: dict[EventFamily, type[IssueAction] | type[PullRequestAction]] = {
    EventFamily.ISSUE: IssueAction,
    EventFamily.PULL_REQUEST: PullRequestAction,
}


@dataclass(frozen=True)
class SubscriptionKey:
    """One notification topic: (repository id, event family, action)."""

    repository_id: int
    family: EventFamily
    action: Action

    def __post_init__(self) -> None:
        if not isinstance(self.action, ACTIONS_BY_FAMILY[self.family]):
            raise ValueError(f"{self.action!r} is not a {self.family.value} action")

    @property
    def topic(self) -> str:
        """Storage discriminator, e.g. "issue_opened". Must stay stable."""
        return topic_for(self.family, self.action)

    @classmethod
    def from_topic(cls, repository_id: int, topic: str) -> "SubscriptionKey":
        """Inverse of `topic`."""
        family_value, _, action_value = topic.partition("_")
        family = EventFamily(family_value)
        return cls(repository_id, family, ACTIONS_BY_FAMILY[family](action_value))


def topic_for(family: EventFamily, action: Action) -> str:
    return f"{family.value}_{action.value}"
