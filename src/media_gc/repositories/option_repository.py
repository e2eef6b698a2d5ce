"""Persistence for site-wide options."""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy.orm import Session

from ..db.db_models import OptionModel
from ..utils.clock import utcnow


class OptionRepository:
    """Key-value wrapper backed by the options table."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str, default: str | None = None) -> str | None:
        with self._session_factory() as session:
            model = session.get(OptionModel, key)
            return model.value if model is not None else default

    def get_int(self, key: str) -> int:
        """Return the option as integer, ``0`` when unset or not numeric."""
        value = self.get(key)
        try:
            return int(value) if value is not None else 0
        except ValueError:
            return 0

    def upsert(self, key: str, value: str, *, updated_by: str | None = None) -> None:
        with self._session_factory() as session:
            model = session.get(OptionModel, key)
            if model is None:
                model = OptionModel(key=key)
            model.value = value
            model.updated_at = utcnow()
            model.updated_by = updated_by
            session.add(model)
            session.commit()

    def delete(self, key: str) -> None:
        with self._session_factory() as session:
            model = session.get(OptionModel, key)
            if model is not None:
                session.delete(model)
                session.commit()
