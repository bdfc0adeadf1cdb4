"""Per-employee yearly records: grades, point ledger, credits and adjustments."""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import ID_TYPE, Base


class PerformanceGrade(Base):
    """Letter grade of one evaluation year, written by the grading process."""

    __tablename__ = "performance_grades"
    __table_args__ = (UniqueConstraint("user_id", "year", name="uq_performance_grade_user_year"),)

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    grade: Mapped[str] = mapped_column(String(8), nullable=False, default="")


class Point(Base):
    """Yearly point ledger row.

    ``merit``/``penalty`` are entered manually; ``score``, ``cumulative`` and
    ``is_met`` are rewritten by the grade-based recalculation.
    """

    __tablename__ = "points"
    __table_args__ = (UniqueConstraint("user_id", "year", name="uq_point_user_year"),)

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    merit: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    penalty: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    cumulative: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    is_met: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
        nullable=False,
    )


class Credit(Base):
    """Yearly credit score (tracked from 2025 onwards)."""

    __tablename__ = "credits"
    __table_args__ = (UniqueConstraint("user_id", "year", name="uq_credit_user_year"),)

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    cumulative: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    is_met: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class BonusPenaltyType(str, Enum):
    BONUS = "bonus"
    PENALTY = "penalty"


class BonusPenalty(Base):
    """Signed point adjustment; penalties are stored as negative ``points``."""

    __tablename__ = "bonus_penalties"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type: Mapped[BonusPenaltyType] = mapped_column(
        SQLEnum(BonusPenaltyType, native_enum=False), nullable=False
    )
    points: Mapped[float] = mapped_column(Float, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False
    )
