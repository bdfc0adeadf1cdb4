"""Shared helpers for repositories."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy.orm import Session
from sqlalchemy.sql import Select


class BaseRepository:
    """Base repository providing convenience helpers."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def _scalar_int(self, statement: Select[Any]) -> int | None:
        """Execute ``statement`` and return its scalar result as ``int`` if any."""

        value = self._session.execute(statement).scalar()
        return int(value) if value is not None else None

    @staticmethod
    def _to_float(value: Any) -> float:
        if value is None:
            return 0.0
        return float(value)

    @staticmethod
    def _to_optional_float(value: Any) -> float | None:
        if value is None:
            return None
        return float(value)

    @staticmethod
    def _coerce_date(value: Any) -> date | None:
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        text_value = str(value)
        if len(text_value) >= 10:
            text_value = text_value[:10]
        return date.fromisoformat(text_value)

    @staticmethod
    def _search_pattern(value: str | None) -> str | None:
        if not value:
            return None
        return f"%{value.lower()}%"
