"""One-shot schedule for queue drains persisted in ``scheduled_events``."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Protocol

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.db_init import begin_write
from ..db.db_models import ScheduledEventModel
from ..utils.clock import utcnow

QUEUE_DRAIN_HOOK = "media_gc_process_queue"

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Arms future queue drains without creating duplicate schedules."""

    def schedule_once(self, delay_seconds: float) -> bool:
        """Schedule a drain unless one is already pending; return whether added."""

    def is_scheduled(self) -> bool:
        """Return whether a drain is pending."""


class SqlScheduler:
    """Database-backed :class:`Scheduler` keyed by hook name."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        hook: str = QUEUE_DRAIN_HOOK,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._hook = hook
        self._clock = clock or utcnow

    def schedule_once(self, delay_seconds: float) -> bool:
        run_at = self._clock() + timedelta(seconds=max(0.0, delay_seconds))
        with self._session_factory() as session:
            begin_write(session)
            if session.get(ScheduledEventModel, self._hook) is not None:
                return False
            session.add(ScheduledEventModel(hook=self._hook, run_at=run_at))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return False
        logger.info(
            "media_gc.scheduler.armed",
            extra={"hook": self._hook, "run_at": run_at.isoformat()},
        )
        return True

    def is_scheduled(self) -> bool:
        with self._session_factory() as session:
            return session.get(ScheduledEventModel, self._hook) is not None

    def next_run_at(self) -> datetime | None:
        with self._session_factory() as session:
            model = session.get(ScheduledEventModel, self._hook)
            return model.run_at if model is not None else None

    def cancel(self) -> bool:
        """Drop the pending event, due or not; return whether one existed."""
        with self._session_factory() as session:
            result = session.execute(
                delete(ScheduledEventModel).where(ScheduledEventModel.hook == self._hook)
            )
            session.commit()
            return bool(result.rowcount)

    def claim_due(self, now: datetime | None = None) -> bool:
        """Consume the pending event if it is due; only one caller wins."""
        current = now or self._clock()
        with self._session_factory() as session:
            result = session.execute(
                delete(ScheduledEventModel).where(
                    ScheduledEventModel.hook == self._hook,
                    ScheduledEventModel.run_at <= current,
                )
            )
            session.commit()
            return bool(result.rowcount)
