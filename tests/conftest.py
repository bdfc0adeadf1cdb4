"""Shared fixtures: an in-memory database and a small record builder."""
from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from levelup.core.logger import shutdown_logging
from levelup.models import (
    Base,
    BonusPenalty,
    BonusPenaltyType,
    Candidate,
    CandidateSource,
    Credit,
    Employee,
    GradeCriteria,
    Level,
    LevelCriteria,
    PerformanceGrade,
    Point,
    PromotionType,
    Role,
)

DEFAULT_GRADE_TABLE = (
    ("S", "2021-2024", 4),
    ("A", "2021-2024", 3),
    ("B", "2021-2024", 2),
    ("C", "2021-2024", 1),
    ("S", "2025", 4),
    ("O", "2025", 3),
    ("E", "2025", 2.5),
    ("G", "2025", 2),
    ("N", "2025", 1.5),
    ("U", "2025", 1),
)


class RecordBuilder:
    """Insert domain rows with sensible defaults."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def employee(
        self,
        name: str,
        *,
        level: Level | None = Level.L2,
        years_of_service: int | None = 3,
        role: Role = Role.TEAM_MEMBER,
        is_active: bool = True,
        level_start_date: date | None = None,
        hire_date: date | None = None,
        department: str = "Engineering",
        team: str = "Platform",
    ) -> Employee:
        employee = Employee(
            name=name,
            email=f"{name.lower().replace(' ', '.')}@example.com",
            role=role,
            department=department,
            team=team,
            level=level,
            years_of_service=years_of_service,
            is_active=is_active,
            level_start_date=level_start_date,
            hire_date=hire_date,
        )
        self.session.add(employee)
        self.session.flush()
        return employee

    def grades(self, employee: Employee, grades: dict[int, str]) -> None:
        for year, grade in grades.items():
            self.session.add(PerformanceGrade(user_id=employee.id, year=year, grade=grade))
        self.session.flush()

    def credit(self, employee: Employee, year: int, score: float) -> None:
        self.session.add(Credit(user_id=employee.id, year=year, score=score))
        self.session.flush()

    def adjustment(self, employee: Employee, points: float) -> None:
        kind = BonusPenaltyType.BONUS if points >= 0 else BonusPenaltyType.PENALTY
        self.session.add(BonusPenalty(user_id=employee.id, type=kind, points=points, reason="test"))
        self.session.flush()

    def point(
        self,
        employee: Employee,
        year: int,
        *,
        score: float = 0,
        merit: float = 0,
        penalty: float = 0,
        cumulative: float = 0,
    ) -> Point:
        point = Point(
            user_id=employee.id,
            year=year,
            score=score,
            merit=merit,
            penalty=penalty,
            cumulative=cumulative,
            is_met=False,
        )
        self.session.add(point)
        self.session.flush()
        return point

    def grade_table(self, entries=DEFAULT_GRADE_TABLE) -> None:
        for grade, year_range, points in entries:
            self.session.add(GradeCriteria(grade=grade, year_range=year_range, points=points))
            self.session.flush()

    def level_criteria(
        self,
        level: Level,
        year: int,
        *,
        required_points: float = 10,
        special_required_points: float | None = None,
        min_tenure: int = 2,
        required_credits: float = 0,
    ) -> LevelCriteria:
        criteria = LevelCriteria(
            level=level,
            year=year,
            required_points=required_points,
            special_required_points=special_required_points,
            required_credits=required_credits,
            min_tenure=min_tenure,
        )
        self.session.add(criteria)
        self.session.flush()
        return criteria

    def candidate(
        self,
        employee: Employee,
        year: int,
        *,
        point_met: bool = False,
        credit_met: bool = False,
        promotion_type: PromotionType = PromotionType.NORMAL,
        is_review_target: bool = False,
        source: CandidateSource = CandidateSource.AUTO,
    ) -> Candidate:
        candidate = Candidate(
            user_id=employee.id,
            year=year,
            point_met=point_met,
            credit_met=credit_met,
            promotion_type=promotion_type,
            is_review_target=is_review_target,
            source=source,
        )
        self.session.add(candidate)
        self.session.flush()
        return candidate


@pytest.fixture(scope="session", autouse=True)
def _stop_log_listener():
    yield
    shutdown_logging()


@pytest.fixture()
def session() -> Session:
    """Provide an in-memory database session for each test."""

    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, future=True)
    with SessionLocal() as session:
        yield session
    engine.dispose()


@pytest.fixture()
def records(session: Session) -> RecordBuilder:
    return RecordBuilder(session)
