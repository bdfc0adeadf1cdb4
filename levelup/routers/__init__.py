"""FastAPI routers exposed by the application."""

from .candidates import router as candidates_router
from .criteria import router as criteria_router
from .points import router as points_router

__all__ = ["candidates_router", "criteria_router", "points_router"]
