"""Configurable grading and level-promotion criteria."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum as SQLEnum, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import ID_TYPE, Base
from .employees import Level


class GradeCriteria(Base):
    """Points awarded for a grade within a year or inclusive year range.

    ``year_range`` is either ``"2025"`` or ``"2021-2024"``. Rows are scanned in
    insertion order and the first match wins.
    """

    __tablename__ = "grade_criteria"
    __table_args__ = (UniqueConstraint("grade", "year_range", name="uq_grade_criteria_grade_range"),)

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    grade: Mapped[str] = mapped_column(String(8), nullable=False)
    year_range: Mapped[str] = mapped_column(String(16), nullable=False)
    points: Mapped[float] = mapped_column(Float, nullable=False)


class LevelCriteria(Base):
    """Thresholds an employee must meet to be promoted *into* ``level``.

    ``special_required_points`` is read from the employee's current level for
    the special (tenure-bypassing) track.
    """

    __tablename__ = "level_criteria"
    __table_args__ = (UniqueConstraint("level", "year", name="uq_level_criteria_level_year"),)

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    level: Mapped[Level] = mapped_column(SQLEnum(Level, native_enum=False), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    required_points: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    special_required_points: Mapped[float | None] = mapped_column(Float)
    required_credits: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    min_tenure: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
        nullable=False,
    )


class LevelCriteriaHistory(Base):
    """Audit trail of individual field changes to ``LevelCriteria``."""

    __tablename__ = "level_criteria_history"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    level: Mapped[Level] = mapped_column(SQLEnum(Level, native_enum=False), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    changed_by_name: Mapped[str] = mapped_column(String(120), nullable=False)
    field: Mapped[str] = mapped_column(String(64), nullable=False)
    old_value: Mapped[str | None] = mapped_column(String(64))
    new_value: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False
    )
