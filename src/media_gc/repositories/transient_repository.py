"""Expiring key-value records (locks, operator notices)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.db_init import begin_write
from ..db.db_models import TransientModel


class TransientRepository:
    """Store values that silently disappear once ``expires_at`` has passed."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str, *, now: datetime) -> str | None:
        with self._session_factory() as session:
            model = session.get(TransientModel, key)
            if model is None or model.expires_at <= now:
                return None
            return model.value

    def set(self, key: str, value: str, *, ttl_seconds: float, now: datetime) -> None:
        with self._session_factory() as session:
            model = session.get(TransientModel, key)
            if model is None:
                model = TransientModel(key=key)
            model.value = value
            model.expires_at = now + timedelta(seconds=ttl_seconds)
            session.add(model)
            session.commit()

    def add(self, key: str, value: str, *, ttl_seconds: float, now: datetime) -> bool:
        """Insert ``key`` only if no live record exists; return whether it was added.

        Expired rows are purged first, then the primary key arbitrates between
        concurrent writers.
        """
        with self._session_factory() as session:
            begin_write(session)
            session.execute(
                delete(TransientModel).where(
                    TransientModel.key == key,
                    TransientModel.expires_at <= now,
                )
            )
            session.add(
                TransientModel(
                    key=key,
                    value=value,
                    expires_at=now + timedelta(seconds=ttl_seconds),
                )
            )
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return False
            return True

    def delete(self, key: str, *, value: str | None = None) -> bool:
        """Delete ``key``; when ``value`` is given only a matching record is removed."""
        with self._session_factory() as session:
            statement = delete(TransientModel).where(TransientModel.key == key)
            if value is not None:
                statement = statement.where(TransientModel.value == value)
            result = session.execute(statement)
            session.commit()
            return bool(result.rowcount)
