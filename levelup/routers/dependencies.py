"""Shared FastAPI dependency definitions."""
from __future__ import annotations

from collections.abc import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from levelup.tasks import RecalculationQueue


def get_db_session(request: Request) -> Generator[Session, None, None]:
    """Yield a database session from the factory configured on the app."""

    session = request.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def get_recalculation_queue(request: Request) -> RecalculationQueue | None:
    return getattr(request.app.state, "recalculation_queue", None)
