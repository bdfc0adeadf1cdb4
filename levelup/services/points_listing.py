"""Live per-employee point totals for the point management listing."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from math import ceil

from sqlalchemy.orm import Session

from levelup.core.config import PromotionSettings, get_settings
from levelup.core.logger import get_logger
from levelup.models import Level, Role
from levelup.repositories import EmployeeRow, MeritPenaltyTotals, PromotionRepository

from .eligibility import resolve_window_years
from .points import WindowRules, calculate_final_points, get_credit_score, next_level

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class EmployeePointRow:
    user_id: int
    name: str
    department: str
    team: str
    level: Level | None
    years_of_service: int | None
    scores: dict[int, float | None] = field(default_factory=dict)
    auto_filled_years: tuple[int, ...] = ()
    total_merit: float = 0.0
    total_penalty: float = 0.0
    adjustment: float = 0.0
    cumulative: float = 0.0
    is_met: bool = False
    credit_score: float = 0.0

    @property
    def total_points(self) -> float:
        return self.cumulative + self.credit_score


@dataclass(frozen=True)
class PointPage:
    """Paginated collection of ``EmployeePointRow`` items."""

    items: list[EmployeePointRow]
    total: int
    page: int
    page_size: int
    base_year: int

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 1
        return ceil(self.total / self.page_size)


class PointsListingService:
    """Compute the listing totals on read instead of trusting stored cumulatives.

    This is the merit/penalty flavoured total; candidate selection uses its own
    credit-based total and the two are not expected to agree.
    """

    def __init__(
        self,
        session: Session,
        *,
        repository: PromotionRepository | None = None,
        settings: PromotionSettings | None = None,
    ) -> None:
        self._repository = repository or PromotionRepository(session)
        self._settings = settings or get_settings().promotion
        self._rules = WindowRules.from_settings(self._settings)

    def list_point_rows(
        self,
        base_year: int | None = None,
        *,
        level: Level | None = None,
        keyword: str | None = None,
        is_met: bool | None = None,
        today: date | None = None,
    ) -> list[EmployeePointRow]:
        today = today or date.today()
        base_year = base_year or today.year

        employees = self._repository.list_active_employees(
            exclude_roles=(Role.DEPT_HEAD,), level=level, keyword=keyword
        )
        user_ids = [employee.user_id for employee in employees]

        table = self._repository.list_grade_criteria()
        grades = self._repository.grades_by_user(
            range(self._rules.floor_year, self._rules.max_data_year + 1), user_ids=user_ids
        )
        credits = self._repository.credits_by_user([self._rules.max_data_year])
        scores = self._repository.point_scores_by_user(user_ids=user_ids)
        ledgers = self._repository.merit_penalty_totals()
        stored_cumulatives = self._repository.latest_point_cumulatives()
        adjustments = self._repository.bonus_penalty_adjustments()
        required_by_level = self._repository.latest_required_points_by_level()

        rows: list[EmployeePointRow] = []
        for employee in employees:
            ledger = ledgers.get(employee.user_id, MeritPenaltyTotals(merit=0.0, penalty=0.0))
            adjustment = adjustments.get(employee.user_id, 0.0)
            year_scores, auto_filled = self._year_scores(
                employee, scores.get(employee.user_id, {}), base_year
            )

            if table:
                cumulative = calculate_final_points(
                    grades.get(employee.user_id, {}),
                    table,
                    base_year,
                    resolve_window_years(employee, today),
                    ledger.merit,
                    ledger.penalty,
                    adjustment,
                    self._rules,
                )
            else:
                stored = stored_cumulatives.get(employee.user_id)
                if stored is None:
                    stored = sum(value or 0.0 for value in year_scores.values()) + ledger.merit - ledger.penalty
                cumulative = stored + adjustment

            target_level = next_level(employee.level)
            required = required_by_level.get(target_level) if target_level else None
            met = required is not None and cumulative >= required

            rows.append(
                EmployeePointRow(
                    user_id=employee.user_id,
                    name=employee.name,
                    department=employee.department,
                    team=employee.team,
                    level=employee.level,
                    years_of_service=employee.years_of_service,
                    scores=year_scores,
                    auto_filled_years=auto_filled,
                    total_merit=ledger.merit,
                    total_penalty=ledger.penalty,
                    adjustment=adjustment,
                    cumulative=cumulative,
                    is_met=met,
                    credit_score=get_credit_score(
                        credits.get(employee.user_id, {}), self._rules.max_data_year
                    ),
                )
            )

        if is_met is not None:
            rows = [row for row in rows if row.is_met is is_met]
        LOGGER.debug("Built %s point rows for base year %s", len(rows), base_year)
        return rows

    def _year_scores(
        self,
        employee: EmployeeRow,
        stored: dict[int, float],
        base_year: int,
    ) -> tuple[dict[int, float | None], tuple[int, ...]]:
        """Stored score per displayed year; pre-hire gaps get the default points."""

        years = employee.years_of_service or 0
        start_year = max(base_year - years + 1 if years > 0 else base_year, self._rules.floor_year)
        hire_year = employee.hire_date.year if employee.hire_date else None

        year_scores: dict[int, float | None] = {}
        auto_filled: list[int] = []
        for year in range(start_year, base_year + 1):
            if year in stored:
                year_scores[year] = stored[year]
            elif hire_year is not None and year < hire_year:
                year_scores[year] = self._rules.default_points
                auto_filled.append(year)
            else:
                year_scores[year] = None
        return year_scores, tuple(auto_filled)

    def page_point_rows(
        self,
        *,
        page: int,
        page_size: int,
        base_year: int | None = None,
        level: Level | None = None,
        keyword: str | None = None,
        is_met: bool | None = None,
        today: date | None = None,
    ) -> PointPage:
        """Return one page of point rows; pages past the end clamp to the last."""

        if page < 1:
            page = 1
        if page_size < 1:
            raise ValueError("page_size must be greater than zero")

        today = today or date.today()
        base_year = base_year or today.year
        rows = self.list_point_rows(
            base_year, level=level, keyword=keyword, is_met=is_met, today=today
        )
        total = len(rows)
        max_page = max(1, ceil(total / page_size)) if total else 1
        page = min(page, max_page)
        offset = (page - 1) * page_size
        return PointPage(
            items=rows[offset : offset + page_size],
            total=total,
            page=page,
            page_size=page_size,
            base_year=base_year,
        )
