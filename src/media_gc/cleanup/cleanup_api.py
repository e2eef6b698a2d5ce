"""Operator routes: pending-work indicator, 'run now' and run notices."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..stats.notice_store import NoticeStore
from .cleanup_schemas import NoticeModel, QueueStatusModel, RunStatsModel
from .queue_processor import DeletionQueueProcessor

router = APIRouter(prefix="/api/media-cleanup", tags=["media-cleanup"])


def get_queue_processor(request: Request) -> DeletionQueueProcessor:
    try:
        return request.app.state.queue_processor  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover
        raise RuntimeError("DeletionQueueProcessor is not configured") from exc


def get_notice_store(request: Request) -> NoticeStore:
    try:
        return request.app.state.notice_store  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover
        raise RuntimeError("NoticeStore is not configured") from exc


@router.get("/status", response_model=QueueStatusModel)
def queue_status(
    processor: DeletionQueueProcessor = Depends(get_queue_processor),
) -> QueueStatusModel:
    status = processor.status()
    return QueueStatusModel(
        pending=status.pending,
        last_run_at=status.last_run_at,
        locked=status.locked,
        scheduled=status.scheduled,
    )


@router.post("/run-now", response_model=RunStatsModel)
def run_now(
    actor: str | None = None,
    processor: DeletionQueueProcessor = Depends(get_queue_processor),
) -> RunStatsModel:
    stats = processor.run_now(actor=actor)
    return RunStatsModel(**stats.to_dict())


@router.get("/notices/{actor}", response_model=NoticeModel)
def pop_notice(
    actor: str,
    notices: NoticeStore = Depends(get_notice_store),
) -> NoticeModel:
    """Return (once) the summary of the last run triggered by ``actor``."""
    stats = notices.pop(actor)
    return NoticeModel(
        actor=actor,
        stats=RunStatsModel(**stats.to_dict()) if stats is not None else None,
    )
