"""Database engine factories."""
from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from levelup.core.config import get_settings
from levelup.core.logger import get_logger

LOGGER = get_logger(__name__)


def get_sqlalchemy_url() -> str:
    """Return the configured SQLAlchemy URL."""

    return get_settings().database.sqlalchemy_url


def create_sync_engine(url: str | None = None, **kwargs) -> Engine:
    """Create a synchronous SQLAlchemy engine using configured defaults."""

    settings = get_settings()
    resolved_url = url or settings.database.sqlalchemy_url

    options = dict(kwargs)
    options.setdefault("echo", settings.sqlalchemy_echo)
    options.setdefault("pool_pre_ping", not resolved_url.startswith("sqlite"))

    masked_url = "{driver}://{user}:{pwd}@{host}:{port}/{name}".format(
        driver=settings.database.driver,
        user=settings.database.user,
        pwd="***" if settings.database.password else "",
        host=settings.database.host,
        port=settings.database.port,
        name=settings.database.name,
    )
    LOGGER.debug("Creating SQLAlchemy engine for %s", url or masked_url)
    return create_engine(resolved_url, future=True, **options)
