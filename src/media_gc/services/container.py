"""Service composition helpers."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from ..cleanup.candidate_resolver import CandidateResolver
from ..cleanup.coordinator import DeletionCoordinator
from ..cleanup.queue_lock import QueueLock
from ..cleanup.queue_processor import DeletionQueueProcessor
from ..cleanup.queue_store import LAST_RUN_OPTION_KEY, QUEUE_OPTION_KEY, DeletionQueueStore
from ..cleanup.scheduler import SqlScheduler
from ..config import AppConfig
from ..plugins.hooks import CleanupHooks
from ..posts.post_service import PostService
from ..repositories.option_repository import OptionRepository
from ..repositories.post_repository import PostRepository
from ..repositories.reference_queries import ReferenceQueryRepository
from ..repositories.transient_repository import TransientRepository
from ..scanner.reference_scanner import ReferenceScanner
from ..settings.settings_service import SETTINGS_OPTION_KEY, SettingsService
from ..stats.notice_store import NoticeStore
from ..utils.clock import utcnow

# bookkeeping records never count as site content
INTERNAL_OPTION_KEYS = (SETTINGS_OPTION_KEY, QUEUE_OPTION_KEY, LAST_RUN_OPTION_KEY)


@dataclass(slots=True)
class CleanupServices:
    """Fully wired object graph shared by the API, scripts and lifecycle loop."""

    posts: PostRepository
    options: OptionRepository
    transients: TransientRepository
    settings_service: SettingsService
    scanner: ReferenceScanner
    resolver: CandidateResolver
    queue: DeletionQueueStore
    scheduler: SqlScheduler
    notices: NoticeStore
    coordinator: DeletionCoordinator
    queue_processor: DeletionQueueProcessor
    post_service: PostService


def build_services(
    config: AppConfig,
    *,
    hooks: CleanupHooks | None = None,
    clock: Callable[[], datetime] | None = None,
    timer: Callable[[], float] | None = None,
) -> CleanupServices:
    """Wire repositories and services for ``config``."""

    settings = config.settings
    hooks = hooks or CleanupHooks()
    clock = clock or utcnow
    timer = timer or time.monotonic
    session_factory = config.session_factory

    posts = PostRepository(
        session_factory,
        uploads_dir=config.uploads_dir,
        uploads_base_url=config.uploads_base_url,
    )
    options = OptionRepository(session_factory)
    transients = TransientRepository(session_factory)
    queries = ReferenceQueryRepository(session_factory, ignored_option_keys=INTERNAL_OPTION_KEYS)
    settings_service = SettingsService(repo=options)
    scanner = ReferenceScanner(posts=posts, queries=queries, options=options, hooks=hooks)
    resolver = CandidateResolver(posts=posts, scanner=scanner, hooks=hooks)
    queue = DeletionQueueStore(session_factory)
    scheduler = SqlScheduler(session_factory, clock=clock)
    notices = NoticeStore(transients, ttl_seconds=settings.notice_ttl_seconds, clock=clock)
    lock = QueueLock(transients, ttl_seconds=settings.queue_lock_ttl_seconds, clock=clock)

    coordinator = DeletionCoordinator(
        posts=posts,
        settings_service=settings_service,
        resolver=resolver,
        queue=queue,
        scheduler=scheduler,
        notices=notices,
        hooks=hooks,
        initial_delay_seconds=settings.queue_initial_delay_seconds,
        clock=clock,
    )
    queue_processor = DeletionQueueProcessor(
        queue=queue,
        lock=lock,
        resolver=resolver,
        settings_service=settings_service,
        scheduler=scheduler,
        notices=notices,
        batch_size=settings.queue_batch_size,
        time_budget_seconds=settings.queue_time_budget_seconds,
        retry_delay_seconds=settings.queue_retry_delay_seconds,
        continue_delay_seconds=settings.queue_continue_delay_seconds,
        run_now_budget_seconds=settings.run_now_budget_seconds,
        run_now_max_iterations=settings.run_now_max_iterations,
        clock=clock,
        timer=timer,
    )

    return CleanupServices(
        posts=posts,
        options=options,
        transients=transients,
        settings_service=settings_service,
        scanner=scanner,
        resolver=resolver,
        queue=queue,
        scheduler=scheduler,
        notices=notices,
        coordinator=coordinator,
        queue_processor=queue_processor,
        post_service=PostService(posts=posts, coordinator=coordinator),
    )
