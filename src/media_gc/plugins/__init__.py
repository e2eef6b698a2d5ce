"""Extension hooks for the media cleanup."""

from .hooks import (
    CleanupHooks,
    DecisionFilter,
    DeleteObserver,
    ScanEnabledFilter,
    SupportedPostTypesFilter,
)

__all__ = [
    "CleanupHooks",
    "DecisionFilter",
    "DeleteObserver",
    "ScanEnabledFilter",
    "SupportedPostTypesFilter",
]
