from __future__ import annotations

import json

from src.media_gc.domain.models import ScanCategory, ScanConfig
from src.media_gc.services.container import CleanupServices


def test_defaults_when_nothing_is_stored(services: CleanupServices) -> None:
    config = services.settings_service.get_scan_config()

    assert config == ScanConfig()
    assert config.is_enabled(ScanCategory.CONTENT) is True
    assert config.is_enabled(ScanCategory.OPTIONS_URL) is False
    assert config.background_processing is True


def test_update_merges_and_persists(services: CleanupServices) -> None:
    service = services.settings_service

    service.update({"scan_comments_url": True}, actor="alice")
    config = service.update({"supported_post_types": ["page", " page ", "product", ""]})

    assert config.scan_comments_url is True
    assert config.supported_post_types == ("page", "product")
    stored = json.loads(services.options.get("media_gc_settings") or "{}")
    assert stored["scan_comments_url"] is True


def test_invalid_values_fall_back_to_defaults(services: CleanupServices) -> None:
    services.options.upsert(
        "media_gc_settings",
        json.dumps(
            {
                "scan_content": "yes",
                "scan_filename": False,
                "protected_media_ids": [5, "7", -3, 0, "x"],
            }
        ),
    )

    config = services.settings_service.get_scan_config()

    assert config.scan_content is True
    assert config.scan_filename is False
    assert config.protected_media_ids == frozenset({5, 7})


def test_corrupted_record_reads_as_defaults(services: CleanupServices) -> None:
    services.options.upsert("media_gc_settings", "[broken")

    assert services.settings_service.get_scan_config() == ScanConfig()
