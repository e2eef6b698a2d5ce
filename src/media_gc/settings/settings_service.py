"""Serve the cleanup scan configuration stored in the options table."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from typing import Any

from ..domain.models import ScanConfig
from ..repositories.option_repository import OptionRepository

SETTINGS_OPTION_KEY = "media_gc_settings"

_BOOLEAN_FIELDS = tuple(
    item.name for item in fields(ScanConfig) if item.type in ("bool", bool)
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SettingsService:
    """Read/write access to :class:`ScanConfig`; defaults fill every gap."""

    repo: OptionRepository

    def get_scan_config(self) -> ScanConfig:
        raw = self.repo.get(SETTINGS_OPTION_KEY)
        if not raw:
            return ScanConfig()
        try:
            stored = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("media_gc.settings.corrupted", extra={"key": SETTINGS_OPTION_KEY})
            return ScanConfig()
        if not isinstance(stored, dict):
            return ScanConfig()
        return self._hydrate(stored)

    def update(self, payload: dict[str, Any], actor: str | None = None) -> ScanConfig:
        """Merge ``payload`` into the stored configuration and persist it."""
        current = self.get_scan_config().to_dict()
        for key, value in payload.items():
            if key in current and value is not None:
                current[key] = value
        config = self._hydrate(current)
        self.repo.upsert(SETTINGS_OPTION_KEY, json.dumps(config.to_dict()), updated_by=actor)
        logger.info("media_gc.settings.updated", extra={"actor": actor, "keys": sorted(payload)})
        return config

    @staticmethod
    def _hydrate(store: dict[str, Any]) -> ScanConfig:
        defaults = ScanConfig()
        values: dict[str, Any] = {}
        for name in _BOOLEAN_FIELDS:
            value = store.get(name)
            values[name] = value if isinstance(value, bool) else getattr(defaults, name)

        post_types = store.get("supported_post_types")
        if isinstance(post_types, list):
            values["supported_post_types"] = tuple(
                dict.fromkeys(str(item).strip() for item in post_types if str(item).strip())
            )

        protected = store.get("protected_media_ids")
        if isinstance(protected, list):
            ids: set[int] = set()
            for item in protected:
                try:
                    media_id = int(item)
                except (TypeError, ValueError):
                    continue
                if media_id > 0:
                    ids.add(media_id)
            values["protected_media_ids"] = frozenset(ids)

        return ScanConfig(**values)
