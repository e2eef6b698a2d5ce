"""Routes for permanent post deletion."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..cleanup.cleanup_schemas import RunStatsModel
from ..exceptions import NotFoundError
from .post_service import PostService

router = APIRouter(prefix="/api/posts", tags=["posts"])


def get_post_service(request: Request) -> PostService:
    try:
        return request.app.state.post_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover
        raise RuntimeError("PostService is not configured") from exc


@router.delete("/{post_id}", response_model=RunStatsModel)
def delete_post(
    post_id: int,
    actor: str | None = None,
    service: PostService = Depends(get_post_service),
) -> RunStatsModel:
    """Delete the post permanently and report what happened to its media."""
    try:
        stats = service.delete_permanently(post_id, actor=actor)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return RunStatsModel(**stats.to_dict())
