"""Heuristic check whether a media object is referenced outside its post.

The scanner only reads. Verdicts are advisory: ``True`` means "possibly still
used" and keeps the attachment, ``False`` means "not found to be used".
Checks run cheapest/most authoritative first and stop at the first hit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..domain.models import MediaObject, ScanCategory, ScanConfig
from ..plugins.hooks import CleanupHooks
from ..repositories.option_repository import OptionRepository
from ..repositories.post_repository import PostRepository
from ..repositories.reference_queries import ReferenceQueryRepository
from .patterns import content_reference_pattern, numeric_boundary_pattern

SITE_ICON_OPTION = "site_icon"
CUSTOM_LOGO_OPTION = "custom_logo"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanSession:
    """Per-run context: memoised verdicts and files found missing.

    Create one per coordinator invocation or queue drain; the store changes
    between runs, so a session must never be reused across them.
    """

    verdicts: dict[tuple[int, int], bool] = field(default_factory=dict)
    missing_files: set[int] = field(default_factory=set)


class ReferenceScanner:
    """Decide whether an attachment appears to be used elsewhere."""

    def __init__(
        self,
        *,
        posts: PostRepository,
        queries: ReferenceQueryRepository,
        options: OptionRepository,
        hooks: CleanupHooks | None = None,
    ) -> None:
        self._posts = posts
        self._queries = queries
        self._options = options
        self._hooks = hooks or CleanupHooks()

    def is_referenced_elsewhere(
        self,
        media_id: int,
        exclude_post_id: int,
        config: ScanConfig,
        session: ScanSession | None = None,
    ) -> bool:
        key = (media_id, exclude_post_id)
        if session is not None and key in session.verdicts:
            return session.verdicts[key]

        verdict = self._scan(media_id, exclude_post_id, config, session)
        if session is not None:
            session.verdicts[key] = verdict
        logger.debug(
            "media_gc.scan.verdict",
            extra={"media_id": media_id, "post_id": exclude_post_id, "used": verdict},
        )
        return verdict

    def _scan(
        self,
        media_id: int,
        exclude_post_id: int,
        config: ScanConfig,
        session: ScanSession | None,
    ) -> bool:
        media = self._posts.get_media(media_id)
        self._note_missing_file(media_id, media, session)

        if self._options.get_int(SITE_ICON_OPTION) == media_id:
            return True
        if self._options.get_int(CUSTOM_LOGO_OPTION) == media_id:
            return True
        if self._queries.thumbnail_in_use(media_id, exclude_post_id):
            return True

        def enabled(category: ScanCategory) -> bool:
            return self._hooks.is_scan_enabled(
                category, config.is_enabled(category), media_id, exclude_post_id
            )

        basename = media.basename if media else ""
        url_needles = _url_needles(media)
        own_rows = (exclude_post_id, media_id)

        if enabled(ScanCategory.CONTENT) and self._queries.content_matches(
            content_reference_pattern(media_id), exclude_post_id
        ):
            return True
        if (
            basename
            and enabled(ScanCategory.FILENAME)
            and self._queries.content_contains(basename, exclude_post_id)
        ):
            return True
        if enabled(ScanCategory.POSTMETA_URL) and self._queries.postmeta_contains_any(
            url_needles, own_rows
        ):
            return True

        boundary = numeric_boundary_pattern(media_id)
        if enabled(ScanCategory.POSTMETA_ID) and self._queries.postmeta_matches_id(
            media_id, boundary, own_rows
        ):
            return True
        if self._queries.termmeta_matches_id(media_id, boundary):
            return True
        if enabled(ScanCategory.TERMMETA_URL) and self._queries.termmeta_contains_any(url_needles):
            return True
        if enabled(ScanCategory.OPTIONS_URL) and self._queries.options_contain_any(url_needles):
            return True
        if enabled(ScanCategory.COMMENTS_URL) and self._queries.comments_contain_any(url_needles):
            return True

        return self._hooks.is_used_elsewhere(media_id, exclude_post_id)

    @staticmethod
    def _note_missing_file(
        media_id: int, media: MediaObject | None, session: ScanSession | None
    ) -> None:
        if media is not None and media.file_path is not None and media.file_path.exists():
            return
        if session is not None:
            session.missing_files.add(media_id)
        logger.info("media_gc.scan.file_missing", extra={"media_id": media_id})


def _url_needles(media: MediaObject | None) -> list[str]:
    if media is None:
        return []
    needles = [media.url, media.url_path]
    return [needle for index, needle in enumerate(needles) if needle and needle not in needles[:index]]


__all__ = ["ReferenceScanner", "ScanSession"]
