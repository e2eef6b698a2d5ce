"""Smoke-check that the public surface of each package imports cleanly."""

from __future__ import annotations

from importlib import import_module
from types import ModuleType

import pytest

MODULES_AND_SYMBOLS = [
    ("src.media_gc", "build_services"),
    ("src.media_gc.main", "create_app"),
    ("src.media_gc.config", "GcSettings"),
    ("src.media_gc.domain", "ScanConfig"),
    ("src.media_gc.db", "Base"),
    ("src.media_gc.scanner", "ReferenceScanner"),
    ("src.media_gc.cleanup", "DeletionCoordinator"),
    ("src.media_gc.cleanup", "DeletionQueueProcessor"),
    ("src.media_gc.cleanup.cleanup_api", "router"),
    ("src.media_gc.settings.settings_api", "router"),
    ("src.media_gc.posts.posts_api", "router"),
    ("src.media_gc.plugins", "CleanupHooks"),
    ("src.media_gc.stats.notice_store", "NoticeStore"),
    ("src.media_gc.lifecycle", "run_scheduled_queue_drains"),
]


@pytest.mark.parametrize(("module_name", "symbol"), MODULES_AND_SYMBOLS)
def test_importable_symbols(module_name: str, symbol: str) -> None:
    module: ModuleType = import_module(module_name)
    assert hasattr(module, symbol), f"{module_name} missing {symbol}"
