"""Deletion coordinator and background queue for orphaned post media."""

from .candidate_resolver import CandidateResolver
from .coordinator import DeletionCoordinator
from .queue_lock import QueueLock
from .queue_processor import DeletionQueueProcessor
from .queue_store import DeletionQueueStore
from .scheduler import Scheduler, SqlScheduler

__all__ = [
    "CandidateResolver",
    "DeletionCoordinator",
    "DeletionQueueProcessor",
    "DeletionQueueStore",
    "QueueLock",
    "Scheduler",
    "SqlScheduler",
]
