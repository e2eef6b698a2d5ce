"""Extension points of the media cleanup.

Extensions are plain callables collected in :class:`CleanupHooks` when the
services are built; there is no global event registry. Filters run in
registration order and each receives the value produced by the previous one.
Observers are notified around every irreversible delete. ``before_delete``
fires only once the attachment was re-read after the last filter; if it still
disappears before the delete (another process removed it), the item is dropped
and no ``after_delete`` follows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol, Sequence, runtime_checkable

from ..domain.models import ScanCategory

logger = logging.getLogger(__name__)


@runtime_checkable
class SupportedPostTypesFilter(Protocol):
    def __call__(self, post_types: Sequence[str]) -> Sequence[str]:
        """Return the allow-list of post types that trigger cleanup."""


@runtime_checkable
class ScanEnabledFilter(Protocol):
    def __call__(
        self, enabled: bool, category: ScanCategory, media_id: int, post_id: int
    ) -> bool:
        """Switch a single scan category on or off for this candidate."""


@runtime_checkable
class DecisionFilter(Protocol):
    def __call__(self, decision: bool, media_id: int, post_id: int) -> bool:
        """Refine a boolean verdict about ``media_id``."""


@runtime_checkable
class DeleteObserver(Protocol):
    def __call__(self, media_id: int, post_id: int) -> None:
        """Observe an attachment delete; must not touch the queue or lock."""


@dataclass(slots=True)
class CleanupHooks:
    """Ordered extension callbacks resolved at construction time."""

    supported_post_types: list[SupportedPostTypesFilter] = field(default_factory=list)
    scan_enabled: list[ScanEnabledFilter] = field(default_factory=list)
    skip_delete: list[DecisionFilter] = field(default_factory=list)
    used_elsewhere: list[DecisionFilter] = field(default_factory=list)
    before_delete: list[DeleteObserver] = field(default_factory=list)
    after_delete: list[DeleteObserver] = field(default_factory=list)

    def filter_supported_post_types(self, post_types: Sequence[str]) -> tuple[str, ...]:
        value: Sequence[str] = tuple(post_types)
        for callback in self.supported_post_types:
            value = callback(value)
        return tuple(value)

    def is_scan_enabled(
        self, category: ScanCategory, enabled: bool, media_id: int, post_id: int
    ) -> bool:
        value = enabled
        for callback in self.scan_enabled:
            value = bool(callback(value, category, media_id, post_id))
        return value

    def should_skip_delete(self, skip: bool, media_id: int, post_id: int) -> bool:
        value = skip
        for callback in self.skip_delete:
            value = bool(callback(value, media_id, post_id))
        return value

    def is_used_elsewhere(self, media_id: int, post_id: int) -> bool:
        """Ask extensions whether ``media_id`` is used through other means."""

        value = False
        for callback in self.used_elsewhere:
            value = bool(callback(value, media_id, post_id))
        return value

    def notify_before_delete(self, media_id: int, post_id: int) -> None:
        self._notify(self.before_delete, media_id, post_id)

    def notify_after_delete(self, media_id: int, post_id: int) -> None:
        self._notify(self.after_delete, media_id, post_id)

    @staticmethod
    def _notify(observers: Sequence[DeleteObserver], media_id: int, post_id: int) -> None:
        for observer in observers:
            try:
                observer(media_id, post_id)
            except Exception:
                logger.exception(
                    "media_gc.hooks.observer_failed",
                    extra={"media_id": media_id, "post_id": post_id},
                )


__all__ = [
    "CleanupHooks",
    "DecisionFilter",
    "DeleteObserver",
    "ScanEnabledFilter",
    "SupportedPostTypesFilter",
]
