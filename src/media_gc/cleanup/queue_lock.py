"""Time-boxed mutual exclusion for queue drains."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import uuid4

from ..repositories.transient_repository import TransientRepository
from ..utils.clock import utcnow

QUEUE_LOCK_KEY = "media_gc_queue_lock"
DEFAULT_LOCK_TTL_SECONDS = 120

logger = logging.getLogger(__name__)


class QueueLock:
    """Single well-known lock record with a fixed expiry.

    The expiry is the only recovery path for a holder that crashed without
    releasing. :meth:`acquire` hands out a token and :meth:`release` only
    removes the record carrying that token, so a holder whose lock expired
    cannot release the lock of whoever took it over.
    """

    def __init__(
        self,
        transients: TransientRepository,
        *,
        ttl_seconds: float = DEFAULT_LOCK_TTL_SECONDS,
        key: str = QUEUE_LOCK_KEY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._transients = transients
        self._ttl_seconds = ttl_seconds
        self._key = key
        self._clock = clock or utcnow

    def acquire(self) -> str | None:
        """Take the lock; return the holder token, or ``None`` when it is busy."""
        token = uuid4().hex
        if self._transients.add(self._key, token, ttl_seconds=self._ttl_seconds, now=self._clock()):
            return token
        logger.info("media_gc.queue.lock_busy", extra={"key": self._key})
        return None

    def release(self, token: str) -> bool:
        """Release the lock held under ``token``; a stale token is a no-op."""
        released = self._transients.delete(self._key, value=token)
        if not released:
            logger.warning("media_gc.queue.lock_lost", extra={"key": self._key})
        return released

    def is_held(self) -> bool:
        """Return whether any live holder (this process or another) owns the lock."""
        return self._transients.get(self._key, now=self._clock()) is not None
