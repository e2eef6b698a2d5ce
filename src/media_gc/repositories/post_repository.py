"""Persistence layer for posts and attachment (media) records."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from urllib.parse import urljoin, urlparse

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db.db_models import CommentModel, PostMetaModel, PostModel
from ..domain.models import ATTACHMENT_POST_TYPE, MediaObject, Post
from ..exceptions import MediaDeleteError, handle_sqlalchemy_errors

ATTACHED_FILE_KEY = "_wp_attached_file"
ATTACHMENT_METADATA_KEY = "_wp_attachment_metadata"
THUMBNAIL_KEY = "_thumbnail_id"

logger = logging.getLogger(__name__)


class PostRepository:
    """Read posts/attachments and perform the irreversible media delete."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        uploads_dir: Path,
        uploads_base_url: str,
    ) -> None:
        self._session_factory = session_factory
        self._uploads_dir = Path(uploads_dir)
        self._uploads_base_url = uploads_base_url if uploads_base_url.endswith("/") else f"{uploads_base_url}/"

    # Writes used by the content side ---------------------------------------

    def create_post(
        self,
        *,
        post_type: str = "post",
        status: str = "publish",
        parent_id: int | None = None,
        title: str = "",
        content: str = "",
        excerpt: str = "",
        guid: str = "",
        meta: dict[str, str] | None = None,
    ) -> int:
        with self._session_factory() as session, handle_sqlalchemy_errors(entity="post"):
            model = PostModel(
                post_type=post_type,
                status=status,
                parent_id=parent_id,
                title=title,
                content=content,
                excerpt=excerpt,
                guid=guid,
            )
            for key, value in (meta or {}).items():
                model.meta.append(PostMetaModel(meta_key=key, meta_value=value))
            session.add(model)
            session.commit()
            return model.id

    def create_attachment(
        self,
        *,
        parent_id: int | None,
        relative_path: str,
        sizes: Iterable[str] = (),
        title: str = "",
    ) -> int:
        """Register an attachment whose file lives at ``uploads_dir/relative_path``."""
        metadata = {
            "file": relative_path,
            "sizes": {name: {"file": name} for name in sizes},
        }
        return self.create_post(
            post_type=ATTACHMENT_POST_TYPE,
            status="inherit",
            parent_id=parent_id,
            title=title,
            guid=urljoin(self._uploads_base_url, relative_path),
            meta={
                ATTACHED_FILE_KEY: relative_path,
                ATTACHMENT_METADATA_KEY: json.dumps(metadata),
            },
        )

    def add_meta(self, post_id: int, key: str, value: str) -> None:
        with self._session_factory() as session, handle_sqlalchemy_errors(entity="postmeta"):
            session.add(PostMetaModel(post_id=post_id, meta_key=key, meta_value=value))
            session.commit()

    def delete_post(self, post_id: int) -> Post | None:
        """Remove a post with its meta and comments; return the prior snapshot.

        Attachments keep their ``parent_id`` so the cleanup can still find
        them after the post row is gone.
        """
        with self._session_factory() as session, handle_sqlalchemy_errors(entity="post"):
            model = session.get(PostModel, post_id)
            if model is None:
                return None
            snapshot = self._to_post(model)
            session.execute(delete(CommentModel).where(CommentModel.post_id == post_id))
            session.delete(model)
            session.commit()
            return snapshot

    # Reads ------------------------------------------------------------------

    def get_post(self, post_id: int) -> Post | None:
        with self._session_factory() as session:
            model = session.get(PostModel, post_id)
            if model is None:
                return None
            return self._to_post(model)

    def get_media(self, media_id: int) -> MediaObject | None:
        """Return the attachment ``media_id`` or ``None`` if it is gone or not media."""
        with self._session_factory() as session:
            model = session.get(PostModel, media_id)
            if model is None or model.post_type != ATTACHMENT_POST_TYPE:
                return None
            attached = self._meta_value(model, ATTACHED_FILE_KEY)
            file_path = self._uploads_dir / attached if attached else None
            url = urljoin(self._uploads_base_url, attached) if attached else model.guid
            return MediaObject(
                id=model.id,
                parent_id=model.parent_id,
                file_path=file_path,
                url=url,
                url_path=urlparse(url).path if url else "",
            )

    def list_attachment_ids(self, parent_id: int) -> list[int]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(PostModel.id)
                .where(
                    PostModel.parent_id == parent_id,
                    PostModel.post_type == ATTACHMENT_POST_TYPE,
                )
                .order_by(PostModel.id)
            )
            return list(rows)

    # Media delete ------------------------------------------------------------

    def delete_media_with_files(self, media_id: int) -> bool:
        """Delete attachment ``media_id`` with its files.

        Idempotent: returns ``False`` when there is nothing to delete. Thumbnail
        references held by other posts are removed together with the record.
        Raises :class:`MediaDeleteError` when a file cannot be unlinked.
        """
        with self._session_factory() as session, handle_sqlalchemy_errors(entity="attachment"):
            model = session.get(PostModel, media_id)
            if model is None or model.post_type != ATTACHMENT_POST_TYPE:
                return False
            files = self._collect_files(model)
            session.execute(
                delete(PostMetaModel).where(
                    PostMetaModel.meta_key == THUMBNAIL_KEY,
                    PostMetaModel.meta_value == str(media_id),
                )
            )
            session.delete(model)
            session.commit()

        for path in files:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                raise MediaDeleteError(f"attachment {media_id}: cannot remove '{path}'") from exc
        logger.info(
            "media_gc.media.files_removed",
            extra={"media_id": media_id, "files": [str(path) for path in files]},
        )
        return True

    def _collect_files(self, model: PostModel) -> list[Path]:
        attached = self._meta_value(model, ATTACHED_FILE_KEY)
        if not attached:
            return []
        main = self._uploads_dir / attached
        files = [main]
        raw_metadata = self._meta_value(model, ATTACHMENT_METADATA_KEY)
        if raw_metadata:
            try:
                metadata = json.loads(raw_metadata)
            except json.JSONDecodeError:
                metadata = {}
            sizes = metadata.get("sizes") if isinstance(metadata, dict) else None
            if isinstance(sizes, dict):
                for size in sizes.values():
                    name = size.get("file") if isinstance(size, dict) else None
                    if name:
                        files.append(main.parent / Path(name).name)
        root = self._uploads_dir.resolve()
        return [path for path in files if path.resolve().is_relative_to(root)]

    @staticmethod
    def _meta_value(model: PostModel, key: str) -> str | None:
        for meta in model.meta:
            if meta.meta_key == key:
                return meta.meta_value
        return None

    @classmethod
    def _to_post(cls, model: PostModel) -> Post:
        thumbnail = cls._meta_value(model, THUMBNAIL_KEY)
        try:
            thumbnail_id = int(thumbnail) if thumbnail else None
        except ValueError:
            thumbnail_id = None
        return Post(
            id=model.id,
            post_type=model.post_type,
            status=model.status,
            parent_id=model.parent_id,
            thumbnail_id=thumbnail_id,
        )
