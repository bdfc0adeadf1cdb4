"""Promotion candidate records derived by the selection pass."""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import ID_TYPE, Base


class PromotionType(str, Enum):
    NORMAL = "normal"
    SPECIAL = "special"


class CandidateSource(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class Candidate(Base):
    """Eligibility verdict for one employee and evaluation year.

    The selection pass owns ``point_met``, ``credit_met`` and
    ``promotion_type``; ``is_review_target`` and ``saved_at`` belong to the
    manual review workflow and are never reset by a recalculation.
    """

    __tablename__ = "candidates"
    __table_args__ = (UniqueConstraint("user_id", "year", name="uq_candidate_user_year"),)

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    point_met: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    credit_met: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    promotion_type: Mapped[PromotionType] = mapped_column(
        SQLEnum(PromotionType, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PromotionType.NORMAL,
    )
    is_review_target: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    source: Mapped[CandidateSource] = mapped_column(
        SQLEnum(CandidateSource, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CandidateSource.AUTO,
    )
    saved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
        nullable=False,
    )

    employee = relationship("Employee")
