"""ORM models describing employees and their organisational attributes."""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Enum as SQLEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import ID_TYPE, Base


class Level(str, Enum):
    """Ordered promotion tiers, lowest first."""

    L0 = "L0"
    L1 = "L1"
    L2 = "L2"
    L3 = "L3"
    L4 = "L4"
    L5 = "L5"

    @classmethod
    def ordered(cls) -> tuple["Level", ...]:
        return tuple(cls)


class Role(str, Enum):
    """Workflow roles; DEPT_HEAD is excluded from promotion evaluation."""

    TEAM_MEMBER = "TEAM_MEMBER"
    TEAM_LEADER = "TEAM_LEADER"
    SECTION_CHIEF = "SECTION_CHIEF"
    DEPT_HEAD = "DEPT_HEAD"
    HR_TEAM = "HR_TEAM"
    CEO = "CEO"
    SYSTEM_ADMIN = "SYSTEM_ADMIN"


class EmploymentType(str, Enum):
    REGULAR = "REGULAR"
    CONTRACT = "CONTRACT"


class Employee(Base):
    """An employee record as maintained by the HR upload process."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True)
    role: Mapped[Role] = mapped_column(
        SQLEnum(Role, native_enum=False), nullable=False, default=Role.TEAM_MEMBER
    )
    department: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    team: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    level: Mapped[Level | None] = mapped_column(SQLEnum(Level, native_enum=False))
    position: Mapped[str | None] = mapped_column(String(80))
    employment_type: Mapped[EmploymentType | None] = mapped_column(
        SQLEnum(EmploymentType, native_enum=False)
    )
    hire_date: Mapped[date | None] = mapped_column(Date)
    level_start_date: Mapped[date | None] = mapped_column(Date)
    years_of_service: Mapped[int | None] = mapped_column(Integer)
    competency_level: Mapped[str | None] = mapped_column(String(16))
    level_up_year: Mapped[int | None] = mapped_column(Integer)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False
    )
