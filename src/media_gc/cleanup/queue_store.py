"""Persisted deletion queue: one ordered JSON record in the options table.

The record is rewritten as a whole (read-modify-write) inside a single write
transaction: ``BEGIN IMMEDIATE`` on SQLite, ``SELECT ... FOR UPDATE`` elsewhere.
Appends always go to the tail, which keeps the drain order FIFO across runs.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.db_init import begin_write
from ..db.db_models import OptionModel
from ..domain.models import QueueItem
from ..utils.clock import utcnow

QUEUE_OPTION_KEY = "media_gc_queue"
LAST_RUN_OPTION_KEY = "media_gc_queue_last_run"

logger = logging.getLogger(__name__)


class DeletionQueueStore:
    """Read and rewrite the queue record."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def load(self) -> list[QueueItem]:
        with self._session_factory() as session:
            model = session.get(OptionModel, QUEUE_OPTION_KEY)
            return [QueueItem.from_payload(entry) for entry in self._decode(model)]

    def count(self) -> int:
        with self._session_factory() as session:
            return len(self._decode(session.get(OptionModel, QUEUE_OPTION_KEY)))

    def append(self, items: Iterable[QueueItem]) -> int:
        """Append ``items`` to the tail and return the new queue length."""
        new_entries = [item.to_payload() for item in items]
        with self._session_factory() as session:
            model = self._locked_record(session)
            entries = self._decode(model) + new_entries
            self._write(session, model, entries)
            session.commit()
        logger.info(
            "media_gc.queue.enqueued",
            extra={"added": len(new_entries), "pending": len(entries)},
        )
        return len(entries)

    def remove_head(self, count: int) -> int:
        """Drop the first ``count`` entries and return how many remain.

        The record is re-read inside the transaction so entries appended while
        a drain was running survive at the tail.
        """
        with self._session_factory() as session:
            model = self._locked_record(session)
            entries = self._decode(model)[max(0, count):]
            self._write(session, model, entries)
            session.commit()
            return len(entries)

    def last_run_at(self) -> datetime | None:
        with self._session_factory() as session:
            model = session.get(OptionModel, LAST_RUN_OPTION_KEY)
            if model is None:
                return None
            try:
                return datetime.fromisoformat(model.value)
            except ValueError:
                return None

    def stamp_last_run(self, when: datetime) -> None:
        with self._session_factory() as session:
            model = session.get(OptionModel, LAST_RUN_OPTION_KEY) or OptionModel(key=LAST_RUN_OPTION_KEY)
            model.value = when.isoformat()
            model.updated_at = utcnow()
            session.add(model)
            session.commit()

    @staticmethod
    def _locked_record(session: Session) -> OptionModel | None:
        begin_write(session)
        return session.scalars(
            select(OptionModel).where(OptionModel.key == QUEUE_OPTION_KEY).with_for_update()
        ).one_or_none()

    @staticmethod
    def _write(session: Session, model: OptionModel | None, entries: list[object]) -> None:
        if model is None:
            model = OptionModel(key=QUEUE_OPTION_KEY)
            session.add(model)
        model.value = json.dumps(entries)
        model.updated_at = utcnow()

    @staticmethod
    def _decode(model: OptionModel | None) -> list[object]:
        if model is None or not model.value:
            return []
        try:
            entries = json.loads(model.value)
        except json.JSONDecodeError:
            logger.warning("media_gc.queue.corrupted")
            return []
        return entries if isinstance(entries, list) else []
