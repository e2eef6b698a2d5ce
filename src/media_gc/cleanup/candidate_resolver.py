"""Resolve a single deletion candidate to delete-or-keep."""

from __future__ import annotations

import logging

from ..domain.models import ItemOutcome, ScanConfig
from ..exceptions import RepositoryError
from ..plugins.hooks import CleanupHooks
from ..repositories.post_repository import PostRepository
from ..scanner.reference_scanner import ReferenceScanner, ScanSession

logger = logging.getLogger(__name__)


class CandidateResolver:
    """Shared by the synchronous coordinator path and the queue drain."""

    def __init__(
        self,
        *,
        posts: PostRepository,
        scanner: ReferenceScanner,
        hooks: CleanupHooks | None = None,
    ) -> None:
        self._posts = posts
        self._scanner = scanner
        self._hooks = hooks or CleanupHooks()

    def should_skip(
        self,
        media_id: int,
        post_id: int,
        config: ScanConfig,
        session: ScanSession | None = None,
    ) -> bool:
        """Final skip decision: scanner verdict, protected IDs, then filters."""
        protected = media_id in config.protected_media_ids
        skip = protected or self._scanner.is_referenced_elsewhere(media_id, post_id, config, session)
        skip = self._hooks.should_skip_delete(skip, media_id, post_id)
        # filters may veto a delete but never release a protected ID
        return skip or protected

    def resolve(
        self,
        media_id: int,
        post_id: int,
        config: ScanConfig,
        session: ScanSession | None = None,
    ) -> ItemOutcome:
        if media_id <= 0:
            return ItemOutcome.DROPPED
        if self._posts.get_media(media_id) is None:
            logger.debug("media_gc.media.vanished", extra={"media_id": media_id, "post_id": post_id})
            return ItemOutcome.DROPPED

        if self.should_skip(media_id, post_id, config, session):
            logger.info("media_gc.media.kept", extra={"media_id": media_id, "post_id": post_id})
            return ItemOutcome.KEPT
        # filters and extensions may have removed it meanwhile
        if self._posts.get_media(media_id) is None:
            logger.debug("media_gc.media.vanished", extra={"media_id": media_id, "post_id": post_id})
            return ItemOutcome.DROPPED

        self._hooks.notify_before_delete(media_id, post_id)
        try:
            removed = self._posts.delete_media_with_files(media_id)
        except RepositoryError:
            logger.exception(
                "media_gc.media.delete_failed",
                extra={"media_id": media_id, "post_id": post_id},
            )
            return ItemOutcome.FAILED
        if not removed:
            return ItemOutcome.DROPPED
        self._hooks.notify_after_delete(media_id, post_id)
        logger.info("media_gc.media.deleted", extra={"media_id": media_id, "post_id": post_id})
        return ItemOutcome.DELETED
