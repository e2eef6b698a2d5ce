"""Settings pointing at a throwaway SQLite file and uploads folder."""

from __future__ import annotations

from pathlib import Path

from src.media_gc.config import GcSettings

UPLOADS_BASE_URL = "http://example.test/uploads/"


def make_settings(tmp_path: Path, **overrides: object) -> GcSettings:
    values: dict[str, object] = {
        "database_url": f"sqlite:///{tmp_path / 'media_gc.db'}",
        "uploads_dir": tmp_path / "uploads",
        "uploads_base_url": UPLOADS_BASE_URL,
        "enable_scheduler": False,
    }
    values.update(overrides)
    return GcSettings(**values)
