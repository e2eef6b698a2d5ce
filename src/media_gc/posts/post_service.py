"""Permanent post deletion feeding the media cleanup."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..cleanup.coordinator import DeletionCoordinator
from ..domain.models import RunStats
from ..exceptions import ensure_found
from ..repositories.post_repository import PostRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PostService:
    """Delete posts for good and hand their media to the coordinator."""

    posts: PostRepository
    coordinator: DeletionCoordinator

    def delete_permanently(self, post_id: int, *, actor: str | None = None) -> RunStats:
        snapshot = ensure_found(self.posts.delete_post(post_id), entity="post", identifier=post_id)
        logger.info(
            "media_gc.post.deleted",
            extra={"post_id": post_id, "post_type": snapshot.post_type, "actor": actor},
        )
        return self.coordinator.on_post_permanently_deleted(post_id, snapshot, actor=actor)
