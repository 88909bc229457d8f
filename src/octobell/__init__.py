"""GitHub issue and pull request notifications for chat conversations."""

__version__ = "0.1.0"
