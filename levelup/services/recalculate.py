"""Rebuild the stored point ledger from performance grades."""
from __future__ import annotations

from datetime import date

from sqlalchemy.orm import Session

from levelup.core.config import PromotionSettings, get_settings
from levelup.core.logger import get_logger, timeit
from levelup.repositories import MeritPenaltyTotals, PromotionRepository

from .auto_select import AutoSelectService, SelectionResult
from .criteria import CriteriaResolver
from .eligibility import resolve_window_years
from .points import WindowRules, calculate_point_sum, grade_to_points

LOGGER = get_logger(__name__)

_NO_LEDGER = MeritPenaltyTotals(merit=0.0, penalty=0.0)


class PointRecalculationService:
    """Recompute ``score``, ``cumulative`` and ``is_met`` of every graded year.

    The window always ends at the last year with data rather than at an
    evaluation year. Manually entered merit and penalty are never touched.
    """

    def __init__(
        self,
        session: Session,
        *,
        repository: PromotionRepository | None = None,
        settings: PromotionSettings | None = None,
    ) -> None:
        self._session = session
        self._repository = repository or PromotionRepository(session)
        self._settings = settings or get_settings().promotion
        self._rules = WindowRules.from_settings(self._settings)

    def recalculate_points_from_grades(
        self,
        user_ids: list[int] | None = None,
        *,
        today: date | None = None,
    ) -> int:
        """Return the number of employees whose ledger was rewritten."""

        table = self._repository.list_grade_criteria()
        if not table:
            LOGGER.info("Grade table is empty; skipping point recalculation")
            return 0

        today = today or date.today()
        criteria = CriteriaResolver(self._repository).resolve(today.year)
        employees = self._repository.list_active_employees(user_ids=user_ids)
        grade_years = range(self._rules.floor_year, self._rules.max_data_year + 1)
        grades = self._repository.grades_by_user(grade_years, user_ids=user_ids)
        ledgers = self._repository.merit_penalty_totals()

        updated = 0
        with timeit(
            "Point recalculation",
            logger=LOGGER,
            unit="employees",
            total=len(employees),
            track_db_calls=True,
            session=self._session,
        ):
            for employee in employees:
                employee_grades = grades.get(employee.user_id)
                if not employee_grades:
                    continue

                ledger = ledgers.get(employee.user_id, _NO_LEDGER)
                window = calculate_point_sum(
                    employee_grades,
                    table,
                    self._rules.max_data_year + 1,
                    resolve_window_years(employee, today),
                    self._rules,
                )
                cumulative = window + ledger.merit - ledger.penalty

                own_criteria = criteria.get(employee.level)
                required = own_criteria.required_points if own_criteria else 0
                is_met = required > 0 and cumulative >= required

                for year, grade in sorted(employee_grades.items()):
                    self._repository.upsert_point(
                        employee.user_id,
                        year,
                        score=grade_to_points(grade, year, table, self._rules.default_points),
                        cumulative=cumulative,
                        is_met=is_met,
                    )
                updated += 1

        LOGGER.info("Recalculated point ledger for %s employees", updated)
        return updated


def recalculate_and_select(session: Session, year: int, *, today: date | None = None) -> SelectionResult:
    """Refresh the point ledger and then rerun candidate selection for ``year``."""

    PointRecalculationService(session).recalculate_points_from_grades(today=today)
    session.commit()
    return AutoSelectService(session).auto_select_candidates(year, today=today)
