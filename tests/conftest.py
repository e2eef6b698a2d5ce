from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from src.media_gc.config import AppConfig, build_config
from src.media_gc.plugins.hooks import CleanupHooks
from src.media_gc.services.container import CleanupServices, build_services
from tests.helpers.clock import FakeClock, FakeTimer
from tests.helpers.config import make_settings
from tests.helpers.content import ContentBuilder


@pytest.fixture()
def app_config(tmp_path: Path) -> Iterator[AppConfig]:
    config = build_config(make_settings(tmp_path))
    yield config
    config.engine.dispose()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture()
def hooks() -> CleanupHooks:
    return CleanupHooks()


@pytest.fixture()
def services(
    app_config: AppConfig, hooks: CleanupHooks, clock: FakeClock, timer: FakeTimer
) -> CleanupServices:
    return build_services(app_config, hooks=hooks, clock=clock, timer=timer)


@pytest.fixture()
def content(services: CleanupServices, app_config: AppConfig) -> ContentBuilder:
    return ContentBuilder(services.posts, app_config.uploads_dir, app_config.session_factory)
