"""Application configuration builder.

Tunables are read from ``MEDIA_GC_*`` environment variables through
pydantic-settings; :func:`load_config` turns them into a ready-to-use bundle
with a SQLAlchemy engine and session factory (SQLite unless configured otherwise).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db.db_init import configure_sqlite_transactions, init_db


class GcSettings(BaseSettings):
    """Environment driven settings for the cleanup service."""

    model_config = SettingsConfigDict(env_prefix="MEDIA_GC_")

    database_url: str = Field(
        default="sqlite:///media_gc.db",
        description="SQLAlchemy URL of the shared content store.",
    )
    uploads_dir: Path = Field(
        default=Path("./var/uploads"),
        description="Filesystem root holding attachment files.",
    )
    uploads_base_url: str = Field(
        default="http://localhost/uploads/",
        description="Public base URL matching ``uploads_dir``.",
    )
    queue_batch_size: int = Field(
        default=20,
        ge=1,
        description="Maximum queue items processed by a single drain.",
    )
    queue_time_budget_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Wall-clock budget of a single drain in seconds.",
    )
    queue_lock_ttl_seconds: int = Field(
        default=120,
        ge=1,
        description="Expiry of the queue lock; bounds recovery after a crashed drain.",
    )
    queue_retry_delay_seconds: int = Field(
        default=60,
        ge=0,
        description="Delay before retrying a drain that found the lock held.",
    )
    queue_continue_delay_seconds: int = Field(
        default=15,
        ge=0,
        description="Delay before the next drain when work remains.",
    )
    queue_initial_delay_seconds: int = Field(
        default=5,
        ge=0,
        description="Delay of the first drain armed after an enqueue.",
    )
    run_now_budget_seconds: float = Field(
        default=25.0,
        gt=0,
        description="Overall wall-clock budget of an operator 'run now' action.",
    )
    run_now_max_iterations: int = Field(
        default=10,
        ge=1,
        description="Hard cap on drains executed by a single 'run now' action.",
    )
    notice_ttl_seconds: int = Field(
        default=60,
        ge=1,
        description="Lifetime of the per-operator summary notice.",
    )
    scheduler_poll_interval_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Polling interval of the scheduled drain loop.",
    )
    enable_scheduler: bool = Field(
        default=True,
        description="Run the scheduled drain loop inside the API process.",
    )


@dataclass(slots=True)
class AppConfig:
    settings: GcSettings
    engine: Engine
    session_factory: sessionmaker[Session]

    @property
    def uploads_dir(self) -> Path:
        return self.settings.uploads_dir

    @property
    def uploads_base_url(self) -> str:
        return self.settings.uploads_base_url


def build_config(settings: GcSettings) -> AppConfig:
    """Create engine/session factory for ``settings`` and ensure the schema."""
    connect_args: dict[str, object] = {}
    if settings.database_url.startswith("sqlite"):
        # drains run in worker threads
        connect_args["check_same_thread"] = False
    engine = create_engine(settings.database_url, future=True, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        configure_sqlite_transactions(engine)
    session_factory: sessionmaker[Session] = sessionmaker(bind=engine, expire_on_commit=False)
    init_db(engine)
    return AppConfig(settings=settings, engine=engine, session_factory=session_factory)


def load_config() -> AppConfig:
    """Load configuration from environment."""
    return build_config(GcSettings())
