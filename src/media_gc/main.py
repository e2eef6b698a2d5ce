"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator

from fastapi import FastAPI

from .config import AppConfig, load_config
from .dependencies import include_routers
from .lifecycle import run_scheduled_queue_drains
from .logging import configure_logging
from .plugins.hooks import CleanupHooks


def create_app(config: AppConfig | None = None, *, hooks: CleanupHooks | None = None) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    configure_logging()
    cfg = config or load_config()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if not cfg.settings.enable_scheduler:
            yield
            return
        services = app.state.services
        shutdown_event = asyncio.Event()
        task = asyncio.create_task(
            run_scheduled_queue_drains(
                processor=services.queue_processor,
                scheduler=services.scheduler,
                shutdown_event=shutdown_event,
                poll_interval_seconds=cfg.settings.scheduler_poll_interval_seconds,
            ),
            name="media-gc-queue-drain",
        )
        try:
            yield
        finally:
            shutdown_event.set()
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    app = FastAPI(title="media-gc", lifespan=lifespan)
    include_routers(app, cfg, hooks=hooks)
    return app
