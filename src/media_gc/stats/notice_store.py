"""Short-lived per-operator summaries of cleanup runs."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime

from ..domain.models import RunStats
from ..repositories.transient_repository import TransientRepository
from ..utils.clock import utcnow

NOTICE_KEY_PREFIX = "media_gc_notice_"
DEFAULT_NOTICE_TTL_SECONDS = 60


class NoticeStore:
    """Keep the latest :class:`RunStats` for the operator who triggered it."""

    def __init__(
        self,
        transients: TransientRepository,
        *,
        ttl_seconds: float = DEFAULT_NOTICE_TTL_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._transients = transients
        self._ttl_seconds = ttl_seconds
        self._clock = clock or utcnow

    def push(self, actor: str, stats: RunStats) -> None:
        self._transients.set(
            self._key(actor),
            json.dumps(stats.to_dict()),
            ttl_seconds=self._ttl_seconds,
            now=self._clock(),
        )

    def pop(self, actor: str) -> RunStats | None:
        """Return and forget the pending notice for ``actor``."""
        key = self._key(actor)
        raw = self._transients.get(key, now=self._clock())
        if raw is None:
            return None
        self._transients.delete(key)
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return RunStats.from_dict(payload) if isinstance(payload, dict) else None

    @staticmethod
    def _key(actor: str) -> str:
        return f"{NOTICE_KEY_PREFIX}{actor}"
