"""Subscription model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .repository import Repository


class Subscription(Base):
    """One conversation listening to one topic of one repository."""

    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint(
            "repository_id",
            "topic",
            "conversation_id",
            name="uq_subscription_topic_conversation",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    repository_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("repositories.id", ondelete="CASCADE"),
        index=True,
    )

    # "{family}_{action}", e.g. "issue_opened" or "pr_closed"
    topic: Mapped[str] = mapped_column(String(64), index=True)
    conversation_id: Mapped[int] = mapped_column(BigInteger, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    # Relationships
    repository: Mapped["Repository"] = relationship(back_populates="subscriptions")
