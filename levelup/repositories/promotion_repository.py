"""Data access for criteria, employee records and candidate verdicts."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from sqlalchemy import and_, func, select

from levelup.models import (
    BonusPenalty,
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

from .base import BaseRepository


@dataclass(frozen=True)
class EmployeeRow:
    user_id: int
    name: str
    department: str
    team: str
    role: Role
    level: Level | None
    years_of_service: int | None
    level_start_date: date | None
    hire_date: date | None


@dataclass(frozen=True)
class LevelCriteriaRow:
    level: Level
    year: int
    required_points: float
    special_required_points: float | None
    required_credits: float
    min_tenure: int


@dataclass(frozen=True)
class GradeCriteriaRow:
    grade: str
    year_range: str
    points: float


@dataclass(frozen=True)
class CandidateRow:
    candidate_id: int
    user_id: int
    year: int
    point_met: bool
    credit_met: bool
    promotion_type: PromotionType
    is_review_target: bool
    source: CandidateSource


@dataclass(frozen=True)
class CandidateListingRow:
    candidate: CandidateRow
    name: str
    department: str
    team: str
    level: Level | None


@dataclass(frozen=True)
class MeritPenaltyTotals:
    merit: float
    penalty: float


class PromotionRepository(BaseRepository):
    """Repository encapsulating the queries behind candidate selection."""

    # -- criteria ---------------------------------------------------------

    def list_level_criteria(self, year: int) -> list[LevelCriteriaRow]:
        rows = self._session.scalars(
            select(LevelCriteria).where(LevelCriteria.year == year).order_by(LevelCriteria.level)
        )
        return [self._criteria_row(row) for row in rows]

    def latest_criteria_year(self, *, before: int | None = None) -> int | None:
        """Most recent year with any level criteria, optionally strictly before ``before``."""

        statement = select(func.max(LevelCriteria.year))
        if before is not None:
            statement = statement.where(LevelCriteria.year < before)
        return self._scalar_int(statement)

    def latest_required_points_by_level(self) -> dict[Level, float]:
        """``required_points`` of each level from the newest year defining it."""

        rows = self._session.execute(
            select(LevelCriteria.level, LevelCriteria.required_points).order_by(LevelCriteria.year.desc())
        )
        required: dict[Level, float] = {}
        for level, points in rows:
            required.setdefault(Level(level), self._to_float(points))
        return required

    def list_grade_criteria(self) -> list[GradeCriteriaRow]:
        """Return the grade table in authored (insertion) order."""

        rows = self._session.scalars(select(GradeCriteria).order_by(GradeCriteria.id))
        return [
            GradeCriteriaRow(grade=row.grade, year_range=row.year_range, points=float(row.points))
            for row in rows
        ]

    # -- employees --------------------------------------------------------

    def list_selection_employees(self) -> list[EmployeeRow]:
        """Active, leveled employees outside the DEPT_HEAD role."""

        return self._employees(require_level=True, exclude_roles=(Role.DEPT_HEAD,))

    def list_active_employees(
        self,
        *,
        user_ids: Iterable[int] | None = None,
        exclude_roles: Sequence[Role] = (),
        level: Level | None = None,
        keyword: str | None = None,
    ) -> list[EmployeeRow]:
        return self._employees(
            user_ids=user_ids,
            exclude_roles=exclude_roles,
            level=level,
            keyword=keyword,
        )

    def _employees(
        self,
        *,
        require_level: bool = False,
        user_ids: Iterable[int] | None = None,
        exclude_roles: Sequence[Role] = (),
        level: Level | None = None,
        keyword: str | None = None,
    ) -> list[EmployeeRow]:
        conditions = [Employee.is_active.is_(True)]
        if require_level:
            conditions.append(Employee.level.is_not(None))
        if user_ids is not None:
            conditions.append(Employee.id.in_(list(user_ids)))
        if exclude_roles:
            conditions.append(Employee.role.not_in(list(exclude_roles)))
        if level is not None:
            conditions.append(Employee.level == level)
        pattern = self._search_pattern(keyword)
        if pattern:
            conditions.append(func.lower(Employee.name).like(pattern))

        rows = self._session.scalars(
            select(Employee)
            .where(and_(*conditions))
            .order_by(Employee.department, Employee.team, Employee.name, Employee.id)
        )
        return [
            EmployeeRow(
                user_id=row.id,
                name=row.name,
                department=row.department,
                team=row.team,
                role=row.role,
                level=row.level,
                years_of_service=row.years_of_service,
                level_start_date=self._coerce_date(row.level_start_date),
                hire_date=self._coerce_date(row.hire_date),
            )
            for row in rows
        ]

    # -- yearly records ---------------------------------------------------

    def grades_by_user(
        self,
        years: Iterable[int],
        *,
        user_ids: Iterable[int] | None = None,
    ) -> dict[int, dict[int, str]]:
        statement = select(
            PerformanceGrade.user_id, PerformanceGrade.year, PerformanceGrade.grade
        ).where(PerformanceGrade.year.in_(list(years)))
        if user_ids is not None:
            statement = statement.where(PerformanceGrade.user_id.in_(list(user_ids)))

        grades: dict[int, dict[int, str]] = defaultdict(dict)
        for user_id, year, grade in self._session.execute(statement):
            grades[int(user_id)][int(year)] = grade or ""
        return dict(grades)

    def credits_by_user(self, years: Iterable[int]) -> dict[int, dict[int, float]]:
        result = self._session.execute(
            select(Credit.user_id, Credit.year, Credit.score).where(Credit.year.in_(list(years)))
        )
        credits: dict[int, dict[int, float]] = defaultdict(dict)
        for user_id, year, score in result:
            credits[int(user_id)][int(year)] = self._to_float(score)
        return dict(credits)

    def bonus_penalty_adjustments(self) -> dict[int, float]:
        """All-time signed sum of bonus/penalty points per employee."""

        result = self._session.execute(
            select(BonusPenalty.user_id, func.sum(BonusPenalty.points)).group_by(BonusPenalty.user_id)
        )
        return {int(user_id): self._to_float(total) for user_id, total in result}

    def merit_penalty_totals(self) -> dict[int, MeritPenaltyTotals]:
        result = self._session.execute(
            select(Point.user_id, func.sum(Point.merit), func.sum(Point.penalty)).group_by(Point.user_id)
        )
        return {
            int(user_id): MeritPenaltyTotals(merit=self._to_float(merit), penalty=self._to_float(penalty))
            for user_id, merit, penalty in result
        }

    def latest_point_cumulatives(self) -> dict[int, float]:
        """Stored ``cumulative`` of each employee's most recent point year."""

        latest = (
            select(Point.user_id, func.max(Point.year).label("year"))
            .group_by(Point.user_id)
            .subquery()
        )
        result = self._session.execute(
            select(Point.user_id, Point.cumulative).join(
                latest, and_(Point.user_id == latest.c.user_id, Point.year == latest.c.year)
            )
        )
        return {int(user_id): self._to_float(cumulative) for user_id, cumulative in result}

    def point_scores_by_user(self, *, user_ids: Iterable[int] | None = None) -> dict[int, dict[int, float]]:
        statement = select(Point.user_id, Point.year, Point.score)
        if user_ids is not None:
            statement = statement.where(Point.user_id.in_(list(user_ids)))

        scores: dict[int, dict[int, float]] = defaultdict(dict)
        for user_id, year, score in self._session.execute(statement):
            scores[int(user_id)][int(year)] = self._to_float(score)
        return dict(scores)

    def upsert_point(
        self,
        user_id: int,
        year: int,
        *,
        score: float,
        cumulative: float,
        is_met: bool,
    ) -> None:
        """Write the derived point fields, leaving merit/penalty as entered."""

        point = self._session.scalars(
            select(Point).where(Point.user_id == user_id, Point.year == year)
        ).first()
        if point is None:
            point = Point(user_id=user_id, year=year, merit=0, penalty=0)
            self._session.add(point)
        point.score = score
        point.cumulative = cumulative
        point.is_met = is_met
        self._session.flush()

    # -- candidates -------------------------------------------------------

    def get_candidate(self, user_id: int, year: int) -> CandidateRow | None:
        candidate = self._session.scalars(
            select(Candidate).where(Candidate.user_id == user_id, Candidate.year == year)
        ).first()
        return self._candidate_row(candidate) if candidate is not None else None

    def create_candidate(
        self,
        user_id: int,
        year: int,
        *,
        point_met: bool,
        credit_met: bool,
        promotion_type: PromotionType,
    ) -> CandidateRow:
        candidate = Candidate(
            user_id=user_id,
            year=year,
            point_met=point_met,
            credit_met=credit_met,
            promotion_type=promotion_type,
            is_review_target=False,
            source=CandidateSource.AUTO,
        )
        self._session.add(candidate)
        self._session.flush()
        return self._candidate_row(candidate)

    def update_candidate(
        self,
        candidate_id: int,
        *,
        point_met: bool,
        credit_met: bool,
        promotion_type: PromotionType,
    ) -> None:
        candidate = self._session.get(Candidate, candidate_id)
        if candidate is None:
            raise LookupError(f"Candidate {candidate_id} disappeared during update")
        candidate.point_met = point_met
        candidate.credit_met = credit_met
        candidate.promotion_type = promotion_type
        self._session.flush()

    def list_candidates(
        self,
        year: int,
        *,
        review_target: bool | None = None,
        promotion_type: PromotionType | None = None,
    ) -> list[CandidateListingRow]:
        statement = (
            select(Candidate, Employee)
            .join(Employee, Employee.id == Candidate.user_id)
            .where(Candidate.year == year)
        )
        if review_target is not None:
            statement = statement.where(Candidate.is_review_target.is_(review_target))
        if promotion_type is not None:
            statement = statement.where(Candidate.promotion_type == promotion_type)
        statement = statement.order_by(Employee.department, Employee.team, Employee.name)

        return [
            CandidateListingRow(
                candidate=self._candidate_row(candidate),
                name=employee.name,
                department=employee.department,
                team=employee.team,
                level=employee.level,
            )
            for candidate, employee in self._session.execute(statement)
        ]

    # -- mapping helpers --------------------------------------------------

    def _criteria_row(self, row: LevelCriteria) -> LevelCriteriaRow:
        return LevelCriteriaRow(
            level=row.level,
            year=int(row.year),
            required_points=self._to_float(row.required_points),
            special_required_points=self._to_optional_float(row.special_required_points),
            required_credits=self._to_float(row.required_credits),
            min_tenure=int(row.min_tenure or 0),
        )

    @staticmethod
    def _candidate_row(candidate: Candidate) -> CandidateRow:
        return CandidateRow(
            candidate_id=candidate.id,
            user_id=candidate.user_id,
            year=candidate.year,
            point_met=bool(candidate.point_met),
            credit_met=bool(candidate.credit_met),
            promotion_type=PromotionType(candidate.promotion_type),
            is_review_target=bool(candidate.is_review_target),
            source=CandidateSource(candidate.source),
        )
