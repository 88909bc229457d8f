"""Repository model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .subscription import Subscription


class Repository(Base):
    """A GitHub repository with a hook pointing at this service."""

    __tablename__ = "repositories"

    # Upstream GitHub repository id, never generated locally
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)

    owner: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    url: Mapped[str] = mapped_column(String(500))
    webhook_id: Mapped[int] = mapped_column(BigInteger)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    # Relationships
    subscriptions: Mapped[list["Subscription"]] = relationship(
        back_populates="repository",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"
