"""Lifecycle helpers wiring the scheduled queue drain into the API process."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

from .cleanup.queue_processor import DeletionQueueProcessor
from .cleanup.scheduler import SqlScheduler
from .domain.models import DrainResult
from .utils.clock import utcnow

logger = logging.getLogger(__name__)


def scheduled_drain_once(
    *,
    processor: DeletionQueueProcessor,
    scheduler: SqlScheduler,
    now: datetime | None = None,
) -> DrainResult | None:
    """Run one drain if the scheduled event is due; ``None`` when nothing was due."""

    if not scheduler.claim_due(now or utcnow()):
        return None
    return processor.process_queue()


async def run_scheduled_queue_drains(
    *,
    processor: DeletionQueueProcessor,
    scheduler: SqlScheduler,
    shutdown_event: asyncio.Event,
    poll_interval_seconds: float = 5.0,
    clock: Callable[[], datetime] | None = None,
) -> None:
    """Poll the schedule until ``shutdown_event`` is signalled."""

    interval = max(0.01, float(poll_interval_seconds))
    tick = clock or utcnow
    # pick up work left behind by a previous process
    await asyncio.to_thread(processor.ensure_scheduled)
    while not shutdown_event.is_set():
        try:
            result = await asyncio.to_thread(
                scheduled_drain_once,
                processor=processor,
                scheduler=scheduler,
                now=tick(),
            )
        except Exception:  # pragma: no cover
            logger.exception("media_gc.scheduler.drain_failed")
            # the claimed event is gone; re-arm so the queue is not stranded
            await asyncio.to_thread(processor.ensure_scheduled)
        else:
            if result is not None:
                logger.debug(
                    "media_gc.scheduler.drain_finished",
                    extra={"status": result.status.value, "remaining": result.remaining},
                )
        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            continue


__all__ = [
    "run_scheduled_queue_drains",
    "scheduled_drain_once",
]
