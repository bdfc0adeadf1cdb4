"""FastAPI application instance and startup hooks."""
from __future__ import annotations

from fastapi import FastAPI
from sqlalchemy.orm import sessionmaker

from levelup.core import get_logger, get_settings
from levelup.core.logger import init_logging
from levelup.db.session import get_sessionmaker
from levelup.routers import candidates_router, criteria_router, points_router
from levelup.tasks import RecalculationQueue, build_recalculation_runner

LOGGER = get_logger(__name__)


def create_app(session_factory: sessionmaker | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    init_logging(level=settings.log_level)

    app = FastAPI(title="Level-up Promotion Service", version="0.1.0")
    app.state.session_factory = session_factory or get_sessionmaker()
    app.state.recalculation_queue = None

    app.include_router(criteria_router)
    app.include_router(candidates_router)
    app.include_router(points_router)

    @app.on_event("startup")
    def start_recalculation_worker() -> None:
        queue = RecalculationQueue(
            build_recalculation_runner(app.state.session_factory),
            max_retries=settings.promotion.recalc_max_retries,
            retry_delay=settings.promotion.recalc_retry_delay,
        )
        queue.start()
        app.state.recalculation_queue = queue
        LOGGER.info("Recalculation worker ready")

    @app.on_event("shutdown")
    def stop_recalculation_worker() -> None:
        queue = app.state.recalculation_queue
        if queue is not None:
            queue.shutdown()
            app.state.recalculation_queue = None

    @app.get("/health", include_in_schema=False)
    def health() -> dict[str, str]:
        return {"status": "ok"}

    LOGGER.info("FastAPI application initialised")
    return app


app = create_app()
