"""Background queue workers."""

from .worker import QueueWorker, WorkerClosedError

__all__ = [
    "QueueWorker",
    "WorkerClosedError",
]
