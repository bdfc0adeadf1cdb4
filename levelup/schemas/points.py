"""Schemas for the live point listing."""
from __future__ import annotations

from pydantic import BaseModel

from levelup.models import Level


class EmployeePointEntry(BaseModel):
    """One employee's live point totals."""

    user_id: int
    name: str
    department: str
    team: str
    level: Level | None = None
    years_of_service: int | None = None
    scores: dict[int, float | None]
    auto_filled_years: list[int] = []
    total_merit: float
    total_penalty: float
    adjustment: float
    cumulative: float
    is_met: bool
    credit_score: float
    total_points: float


class PointListing(BaseModel):
    base_year: int
    total: int
    page: int
    page_size: int
    employees: list[EmployeePointEntry]
