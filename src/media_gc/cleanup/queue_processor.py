"""Background drain of the persisted deletion queue.

One drain holds the queue lock, walks the queue in FIFO order within a count
and wall-clock budget, writes back the unprocessed tail and releases the lock.
The queue record is only rewritten at the end of a run, so a crashed drain
leaves the queue as it was and the lock expiry lets the next run proceed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime

from ..domain.models import DrainResult, DrainStatus, QueueStatus, RunStats
from ..scanner.reference_scanner import ScanSession
from ..settings.settings_service import SettingsService
from ..stats.notice_store import NoticeStore
from ..utils.clock import utcnow
from .candidate_resolver import CandidateResolver
from .queue_lock import QueueLock
from .queue_store import DeletionQueueStore
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


class DeletionQueueProcessor:
    """Lock-protected, batch- and time-budgeted queue worker."""

    def __init__(
        self,
        *,
        queue: DeletionQueueStore,
        lock: QueueLock,
        resolver: CandidateResolver,
        settings_service: SettingsService,
        scheduler: Scheduler,
        notices: NoticeStore | None = None,
        batch_size: int = 20,
        time_budget_seconds: float = 20.0,
        retry_delay_seconds: float = 60.0,
        continue_delay_seconds: float = 15.0,
        run_now_budget_seconds: float = 25.0,
        run_now_max_iterations: int = 10,
        clock: Callable[[], datetime] | None = None,
        timer: Callable[[], float] | None = None,
    ) -> None:
        self._queue = queue
        self._lock = lock
        self._resolver = resolver
        self._settings_service = settings_service
        self._scheduler = scheduler
        self._notices = notices
        self._batch_size = max(1, batch_size)
        self._time_budget_seconds = max(0.0, time_budget_seconds)
        self._retry_delay_seconds = max(0.0, retry_delay_seconds)
        self._continue_delay_seconds = max(0.0, continue_delay_seconds)
        self._run_now_budget_seconds = max(0.0, run_now_budget_seconds)
        self._run_now_max_iterations = max(1, run_now_max_iterations)
        self._clock = clock or utcnow
        self._timer = timer or time.monotonic

    # ------------------------------------------------------------------
    # Single drain
    # ------------------------------------------------------------------
    def process_queue(self) -> DrainResult:
        """Run one bounded drain; see module docstring for the state machine."""

        if self._queue.count() == 0:
            return DrainResult(status=DrainStatus.IDLE)

        token = self._lock.acquire()
        if token is None:
            self._scheduler.schedule_once(self._retry_delay_seconds)
            return DrainResult(status=DrainStatus.LOCKED, remaining=self._queue.count())

        try:
            result = self._drain_locked()
        finally:
            self._lock.release(token)

        if result.remaining:
            self._scheduler.schedule_once(self._continue_delay_seconds)
        logger.info(
            "media_gc.queue.drained",
            extra={
                "processed": result.processed,
                "remaining": result.remaining,
                **result.stats.to_dict(),
            },
        )
        return result

    def _drain_locked(self) -> DrainResult:
        started = self._timer()
        items = self._queue.load()
        config = self._settings_service.get_scan_config()
        session = ScanSession()
        stats = RunStats()

        processed = 0
        for item in items:
            if processed >= self._batch_size:
                break
            if self._timer() - started >= self._time_budget_seconds:
                break
            stats.record(self._resolver.resolve(item.attachment_id, item.post_id, config, session))
            processed += 1

        remaining = self._queue.remove_head(processed)
        self._queue.stamp_last_run(self._clock())
        return DrainResult(
            status=DrainStatus.DRAINED,
            processed=processed,
            remaining=remaining,
            stats=stats,
        )

    # ------------------------------------------------------------------
    # Operator actions
    # ------------------------------------------------------------------
    def run_now(self, *, actor: str | None = None) -> RunStats:
        """Drain repeatedly within an overall budget and iteration cap.

        Per-drain batch/time limits still apply; whatever is left is picked up
        by the regular schedule armed by :meth:`process_queue`.
        """

        started = self._timer()
        total = RunStats()
        for _ in range(self._run_now_max_iterations):
            if self._timer() - started >= self._run_now_budget_seconds:
                break
            result = self.process_queue()
            total.merge(result.stats)
            if result.status is not DrainStatus.DRAINED or result.remaining == 0:
                break

        if actor and self._notices is not None and not total.is_empty():
            self._notices.push(actor, total)
        return total

    def ensure_scheduled(self) -> bool:
        """Arm a drain when work is pending and nothing is scheduled yet."""

        if self._queue.count() == 0:
            return False
        return self._scheduler.schedule_once(self._continue_delay_seconds)

    def status(self) -> QueueStatus:
        return QueueStatus(
            pending=self._queue.count(),
            last_run_at=self._queue.last_run_at(),
            locked=self._lock.is_held(),
            scheduled=self._scheduler.is_scheduled(),
        )
