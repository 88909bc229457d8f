"""Database models."""

from .base import Base
from .repository import Repository
from .subscription import Subscription

__all__ = [
    "Base",
    "Repository",
    "Subscription",
]
