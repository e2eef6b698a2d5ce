"""Database initialization helpers."""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session

from .db_models import Base

SQLITE_BEGIN_OPTION = "sqlite_begin"


def init_db(engine: Engine) -> None:
    """Create tables if they do not exist yet."""
    Base.metadata.create_all(engine)


def configure_sqlite_transactions(engine: Engine) -> None:
    """Let SQLAlchemy emit ``BEGIN`` itself instead of the pysqlite driver.

    pysqlite defers ``BEGIN`` until the first write, so a read-modify-write
    reads outside any lock. With this hook a session opened through
    :func:`begin_write` starts with ``BEGIN IMMEDIATE`` and holds the write
    lock from its first read; other transactions keep the default ``BEGIN``.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(connection: Connection) -> None:
        mode = connection.get_execution_options().get(SQLITE_BEGIN_OPTION, "DEFERRED")
        connection.exec_driver_sql(f"BEGIN {mode}")


def begin_write(session: Session) -> None:
    """Open ``session``'s transaction as a writer.

    Must be called before the session touches the database. SQLite takes the
    database write lock up front; other backends ignore the option and rely on
    row locks (``SELECT ... FOR UPDATE``).
    """
    session.connection(execution_options={SQLITE_BEGIN_OPTION: "IMMEDIATE"})
