"""Pydantic schemas for the media cleanup admin API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class RunStatsModel(BaseModel):
    deleted: int = 0
    kept: int = 0
    queued: int = 0
    failed: int = 0
    dropped: int = 0


class QueueStatusModel(BaseModel):
    pending: int
    last_run_at: datetime | None = None
    locked: bool
    scheduled: bool


class NoticeModel(BaseModel):
    actor: str
    stats: RunStatsModel | None = None
