"""Domain models and invariants of media-gc."""

from .models import (
    INELIGIBLE_POST_TYPES,
    DrainResult,
    DrainStatus,
    ItemOutcome,
    MediaObject,
    Post,
    QueueItem,
    QueueStatus,
    RunStats,
    ScanCategory,
    ScanConfig,
)

__all__ = [
    "INELIGIBLE_POST_TYPES",
    "DrainResult",
    "DrainStatus",
    "ItemOutcome",
    "MediaObject",
    "Post",
    "QueueItem",
    "QueueStatus",
    "RunStats",
    "ScanCategory",
    "ScanConfig",
]
