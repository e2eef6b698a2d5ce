"""Domain models for media-gc.

Lightweight dataclasses shared by the scanner, the deletion coordinator and
the queue processor. Persistence details live in :mod:`src.media_gc.db`;
these objects are detached snapshots and carry no database state.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

INELIGIBLE_POST_TYPES: frozenset[str] = frozenset({"revision", "nav_menu_item", "attachment"})
"""Post types that never trigger media cleanup unless explicitly allow-listed."""

ATTACHMENT_POST_TYPE = "attachment"
TRASH_STATUS = "trash"


class ScanCategory(str, Enum):
    """Independently switchable scan strategies."""

    CONTENT = "content"
    FILENAME = "filename"
    POSTMETA_ID = "postmeta_id"
    POSTMETA_URL = "postmeta_url"
    TERMMETA_URL = "termmeta_url"
    OPTIONS_URL = "options_url"
    COMMENTS_URL = "comments_url"


class ItemOutcome(str, Enum):
    """Result of resolving a single deletion candidate."""

    DELETED = "deleted"
    KEPT = "kept"
    FAILED = "failed"
    DROPPED = "dropped"


class DrainStatus(str, Enum):
    """High-level result of one queue drain attempt."""

    IDLE = "idle"
    LOCKED = "locked"
    DRAINED = "drained"


@dataclass(slots=True, frozen=True)
class Post:
    """Snapshot of a post taken before it leaves the store."""

    id: int
    post_type: str
    status: str
    parent_id: int | None = None
    thumbnail_id: int | None = None


@dataclass(slots=True, frozen=True)
class MediaObject:
    """Attachment record together with its stored file coordinates.

    ``file_path`` is ``None`` when no file is registered for the attachment;
    ``url_path`` is the path component of ``url``.
    """

    id: int
    parent_id: int | None
    file_path: Path | None
    url: str
    url_path: str

    @property
    def basename(self) -> str:
        return self.file_path.name if self.file_path else ""


@dataclass(slots=True, frozen=True)
class ScanConfig:
    """Switches controlling which scans run and which media are exempt."""

    scan_content: bool = True
    scan_filename: bool = True
    scan_postmeta_id: bool = True
    scan_postmeta_url: bool = True
    scan_termmeta_url: bool = False
    scan_options_url: bool = False
    scan_comments_url: bool = False
    background_processing: bool = True
    supported_post_types: tuple[str, ...] = ()
    protected_media_ids: frozenset[int] = frozenset()

    def is_enabled(self, category: ScanCategory) -> bool:
        return bool(getattr(self, f"scan_{category.value}"))

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["supported_post_types"] = list(self.supported_post_types)
        payload["protected_media_ids"] = sorted(self.protected_media_ids)
        return payload


@dataclass(slots=True, frozen=True)
class QueueItem:
    """Deferred deletion candidate persisted in the queue record."""

    attachment_id: int
    post_id: int
    queued_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "attachment_id": self.attachment_id,
            "post_id": self.post_id,
            "queued_at": self.queued_at.isoformat(),
        }

    @classmethod
    def from_payload(cls, payload: object) -> "QueueItem":
        """Decode a stored entry; malformed entries become ``attachment_id=0``."""

        if not isinstance(payload, Mapping):
            return cls(attachment_id=0, post_id=0, queued_at=datetime.min)
        return cls(
            attachment_id=_as_int(payload.get("attachment_id")),
            post_id=_as_int(payload.get("post_id")),
            queued_at=_as_datetime(payload.get("queued_at")),
        )


@dataclass(slots=True)
class RunStats:
    """Per-invocation counters; never persisted beyond a short-lived notice."""

    deleted: int = 0
    kept: int = 0
    queued: int = 0
    failed: int = 0
    dropped: int = 0

    def record(self, outcome: ItemOutcome) -> None:
        if outcome is ItemOutcome.DELETED:
            self.deleted += 1
        elif outcome is ItemOutcome.KEPT:
            self.kept += 1
        elif outcome is ItemOutcome.FAILED:
            self.failed += 1
        else:
            self.dropped += 1

    def merge(self, other: "RunStats") -> None:
        self.deleted += other.deleted
        self.kept += other.kept
        self.queued += other.queued
        self.failed += other.failed
        self.dropped += other.dropped

    def is_empty(self) -> bool:
        return not (self.deleted or self.kept or self.queued or self.failed)

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RunStats":
        return cls(**{name: _as_int(payload.get(name)) for name in cls.__dataclass_fields__})


@dataclass(slots=True)
class DrainResult:
    """Outcome of :meth:`DeletionQueueProcessor.process_queue`."""

    status: DrainStatus
    processed: int = 0
    remaining: int = 0
    stats: RunStats = field(default_factory=RunStats)


@dataclass(slots=True, frozen=True)
class QueueStatus:
    """Pending-work indicator exposed to operators."""

    pending: int
    last_run_at: datetime | None
    locked: bool
    scheduled: bool


def _as_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


def _as_datetime(value: object) -> datetime:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return datetime.min
    return datetime.min


__all__ = [
    "ATTACHMENT_POST_TYPE",
    "DrainResult",
    "DrainStatus",
    "INELIGIBLE_POST_TYPES",
    "ItemOutcome",
    "MediaObject",
    "Post",
    "QueueItem",
    "QueueStatus",
    "RunStats",
    "ScanCategory",
    "ScanConfig",
    "TRASH_STATUS",
]
