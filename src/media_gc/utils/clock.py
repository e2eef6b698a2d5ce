"""Clock helpers shared by repositories and workers."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return naive UTC ``now``; DateTime columns store naive UTC values."""

    return datetime.now(timezone.utc).replace(tzinfo=None)
