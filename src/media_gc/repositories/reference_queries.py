"""Read-only existence queries used by the reference scanner.

Every method answers "is there at least one row referencing the media
object?" with a ``LIMIT 1`` probe and never mutates the store.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from sqlalchemy import or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from ..db.db_models import CommentModel, OptionModel, PostMetaModel, PostModel, TermMetaModel
from ..domain.models import INELIGIBLE_POST_TYPES, TRASH_STATUS
from .post_repository import THUMBNAIL_KEY


class ReferenceQueryRepository:
    """Parameterised ``FindMetadataReferencing`` probes over the content tables."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        ignored_option_keys: Iterable[str] = (),
    ) -> None:
        self._session_factory = session_factory
        self._ignored_option_keys = tuple(ignored_option_keys)

    def _exists(self, statement: Select) -> bool:
        with self._session_factory() as session:
            return session.execute(statement.limit(1)).first() is not None

    # Posts ------------------------------------------------------------------

    def thumbnail_in_use(self, media_id: int, exclude_post_id: int) -> bool:
        statement = (
            select(PostMetaModel.id)
            .join(PostModel, PostMetaModel.post_id == PostModel.id)
            .where(
                PostMetaModel.meta_key == THUMBNAIL_KEY,
                PostMetaModel.meta_value == str(media_id),
                PostModel.id != exclude_post_id,
                PostModel.status != TRASH_STATUS,
            )
        )
        return self._exists(statement)

    def content_matches(self, pattern: str, exclude_post_id: int) -> bool:
        """Return whether another eligible post's content/excerpt matches ``pattern``."""
        statement = self._eligible_posts(exclude_post_id).where(
            or_(
                PostModel.content.regexp_match(pattern),
                PostModel.excerpt.regexp_match(pattern),
            )
        )
        return self._exists(statement)

    def content_contains(self, needle: str, exclude_post_id: int) -> bool:
        statement = self._eligible_posts(exclude_post_id).where(
            or_(
                PostModel.content.contains(needle, autoescape=True),
                PostModel.excerpt.contains(needle, autoescape=True),
            )
        )
        return self._exists(statement)

    # Post meta ----------------------------------------------------------------

    def postmeta_matches_id(
        self, media_id: int, boundary_pattern: str, exclude_post_ids: Sequence[int]
    ) -> bool:
        statement = self._other_postmeta(exclude_post_ids).where(
            or_(
                PostMetaModel.meta_value == str(media_id),
                PostMetaModel.meta_value.regexp_match(boundary_pattern),
            )
        )
        return self._exists(statement)

    def postmeta_contains_any(self, needles: Sequence[str], exclude_post_ids: Sequence[int]) -> bool:
        if not needles:
            return False
        statement = self._other_postmeta(exclude_post_ids).where(
            or_(*(PostMetaModel.meta_value.contains(needle, autoescape=True) for needle in needles))
        )
        return self._exists(statement)

    # Term meta / options / comments ---------------------------------------------

    def termmeta_matches_id(self, media_id: int, boundary_pattern: str) -> bool:
        statement = select(TermMetaModel.id).where(
            or_(
                TermMetaModel.meta_value == str(media_id),
                TermMetaModel.meta_value.regexp_match(boundary_pattern),
            )
        )
        return self._exists(statement)

    def termmeta_contains_any(self, needles: Sequence[str]) -> bool:
        if not needles:
            return False
        statement = select(TermMetaModel.id).where(
            or_(*(TermMetaModel.meta_value.contains(needle, autoescape=True) for needle in needles))
        )
        return self._exists(statement)

    def options_contain_any(self, needles: Sequence[str]) -> bool:
        if not needles:
            return False
        statement = select(OptionModel.key).where(
            or_(*(OptionModel.value.contains(needle, autoescape=True) for needle in needles))
        )
        if self._ignored_option_keys:
            statement = statement.where(OptionModel.key.not_in(self._ignored_option_keys))
        return self._exists(statement)

    def comments_contain_any(self, needles: Sequence[str]) -> bool:
        if not needles:
            return False
        statement = select(CommentModel.id).where(
            or_(*(CommentModel.content.contains(needle, autoescape=True) for needle in needles))
        )
        return self._exists(statement)

    # Helpers ----------------------------------------------------------------

    @staticmethod
    def _eligible_posts(exclude_post_id: int) -> Select:
        return select(PostModel.id).where(
            PostModel.id != exclude_post_id,
            PostModel.status != TRASH_STATUS,
            PostModel.post_type.not_in(sorted(INELIGIBLE_POST_TYPES)),
        )

    @staticmethod
    def _other_postmeta(exclude_post_ids: Sequence[int]) -> Select:
        return (
            select(PostMetaModel.id)
            .join(PostModel, PostMetaModel.post_id == PostModel.id)
            .where(
                PostModel.id.not_in(list(exclude_post_ids)),
                PostModel.status != TRASH_STATUS,
            )
        )
