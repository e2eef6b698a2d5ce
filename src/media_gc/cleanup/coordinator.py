"""React to a permanent post delete by cleaning up the media it owned."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..domain.models import INELIGIBLE_POST_TYPES, Post, QueueItem, RunStats, ScanConfig
from ..plugins.hooks import CleanupHooks
from ..repositories.post_repository import PostRepository
from ..scanner.reference_scanner import ScanSession
from ..settings.settings_service import SettingsService
from ..stats.notice_store import NoticeStore
from ..utils.clock import utcnow
from .candidate_resolver import CandidateResolver
from .queue_store import DeletionQueueStore
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


class DeletionCoordinator:
    """Collect candidates of a deleted post and delete now or defer to the queue."""

    def __init__(
        self,
        *,
        posts: PostRepository,
        settings_service: SettingsService,
        resolver: CandidateResolver,
        queue: DeletionQueueStore,
        scheduler: Scheduler,
        notices: NoticeStore | None = None,
        hooks: CleanupHooks | None = None,
        initial_delay_seconds: float = 5.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._posts = posts
        self._settings_service = settings_service
        self._resolver = resolver
        self._queue = queue
        self._scheduler = scheduler
        self._notices = notices
        self._hooks = hooks or CleanupHooks()
        self._initial_delay_seconds = initial_delay_seconds
        self._clock = clock or utcnow

    def is_eligible(self, post: Post, config: ScanConfig) -> bool:
        allowed = self._hooks.filter_supported_post_types(config.supported_post_types)
        if allowed:
            return post.post_type in allowed
        return post.post_type not in INELIGIBLE_POST_TYPES

    def collect_candidates(self, post: Post) -> list[int]:
        """Parented attachments in retrieval order, then the thumbnail."""
        candidates = [media_id for media_id in self._posts.list_attachment_ids(post.id) if media_id > 0]
        if post.thumbnail_id and post.thumbnail_id > 0:
            candidates.append(post.thumbnail_id)
        return list(dict.fromkeys(candidates))

    def on_post_permanently_deleted(
        self,
        post_id: int,
        post_snapshot: Post,
        *,
        actor: str | None = None,
    ) -> RunStats:
        stats = RunStats()
        config = self._settings_service.get_scan_config()
        if not self.is_eligible(post_snapshot, config):
            logger.debug(
                "media_gc.post.ineligible",
                extra={"post_id": post_id, "post_type": post_snapshot.post_type},
            )
            return stats

        candidates = self.collect_candidates(post_snapshot)
        if not candidates:
            return stats

        if config.background_processing:
            now = self._clock()
            self._queue.append(
                QueueItem(attachment_id=media_id, post_id=post_id, queued_at=now)
                for media_id in candidates
            )
            stats.queued += len(candidates)
            self._scheduler.schedule_once(self._initial_delay_seconds)
        else:
            session = ScanSession()
            for media_id in candidates:
                stats.record(self._resolver.resolve(media_id, post_id, config, session))

        logger.info(
            "media_gc.post.processed",
            extra={"post_id": post_id, "candidates": candidates, **stats.to_dict()},
        )
        if actor and self._notices is not None and not stats.is_empty():
            self._notices.push(actor, stats)
        return stats
