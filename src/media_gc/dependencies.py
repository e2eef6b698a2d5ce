"""Dependency wiring helpers."""

from fastapi import FastAPI

from .cleanup.cleanup_api import router as cleanup_router
from .config import AppConfig
from .plugins.hooks import CleanupHooks
from .posts.posts_api import router as posts_router
from .services.container import CleanupServices, build_services
from .settings.settings_api import router as settings_router


def include_routers(
    app: FastAPI,
    config: AppConfig,
    *,
    hooks: CleanupHooks | None = None,
) -> CleanupServices:
    """Mount module routers and attach services."""
    services = build_services(config, hooks=hooks)

    app.state.config = config
    app.state.services = services
    app.state.settings_service = services.settings_service
    app.state.post_service = services.post_service
    app.state.queue_processor = services.queue_processor
    app.state.notice_store = services.notices

    app.include_router(settings_router)
    app.include_router(posts_router)
    app.include_router(cleanup_router)
    return services
