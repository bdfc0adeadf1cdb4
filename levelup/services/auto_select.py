"""Automatic promotion candidate selection."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Mapping, Sequence

from sqlalchemy.orm import Session

from levelup.core.config import PromotionSettings, get_settings
from levelup.core.logger import get_logger, log_context, timeit
from levelup.models import PromotionType
from levelup.repositories import EmployeeRow, GradeCriteriaRow, PromotionRepository

from .criteria import CriteriaResolver, CriteriaSet
from .eligibility import EligibilityVerdict, classify, resolve_tenure, resolve_window_years
from .points import WindowRules, calculate_selection_points, get_credit_score, next_level

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class SelectionResult:
    """Counts reported by one selection pass.

    ``total`` is the number of qualifying employees whose candidate row was
    written, ``added`` the subset that was newly created.
    """

    added: int = 0
    total: int = 0
    updated: int = 0
    failed: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "added": self.added,
            "total": self.total,
            "updated": self.updated,
            "failed": self.failed,
        }


@dataclass(frozen=True)
class SelectionInputs:
    criteria: CriteriaSet
    grade_table: Sequence[GradeCriteriaRow]
    grades: Mapping[int, Mapping[int, str]]
    credits: Mapping[int, Mapping[int, float]]
    adjustments: Mapping[int, float]


class AutoSelectService:
    """Classify every eligible employee and upsert their candidate verdict."""

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

    def auto_select_candidates(self, year: int, *, today: date | None = None) -> SelectionResult:
        """Run one selection pass for ``year``.

        Each employee is committed on its own; a failure is logged and counted
        without stopping the pass.
        """

        today = today or date.today()
        criteria = CriteriaResolver(self._repository).resolve(year)
        if criteria.is_empty:
            return SelectionResult()

        employees = self._repository.list_selection_employees()
        inputs = self._load_inputs(year, criteria)

        added = updated = failed = 0
        with log_context.bound(year=year), timeit(
            "Candidate selection",
            logger=LOGGER,
            unit="employees",
            total=len(employees),
            track_db_calls=True,
            session=self._session,
        ):
            for employee in employees:
                try:
                    verdict = self.evaluate(employee, year, inputs, today=today)
                    promotion_type = verdict.promotion_type if verdict else None
                    if promotion_type is None:
                        continue
                    created = self._upsert_candidate(employee.user_id, year, verdict, promotion_type)
                    self._session.commit()
                except Exception:
                    self._session.rollback()
                    failed += 1
                    LOGGER.exception("Candidate selection failed for employee %s", employee.user_id)
                    continue

                if created:
                    added += 1
                else:
                    updated += 1

        result = SelectionResult(added=added, total=added + updated, updated=updated, failed=failed)
        LOGGER.info(
            "Selected %s candidates for %s (%s new, %s updated, %s failed)",
            result.total,
            year,
            result.added,
            result.updated,
            result.failed,
        )
        return result

    def evaluate(
        self,
        employee: EmployeeRow,
        year: int,
        inputs: SelectionInputs,
        *,
        today: date,
    ) -> EligibilityVerdict | None:
        """Verdict for one employee, or ``None`` when there is no level to reach."""

        target_level = next_level(employee.level)
        if target_level is None:
            return None
        next_criteria = inputs.criteria.get(target_level)
        current_criteria = inputs.criteria.get(employee.level)

        final_points = calculate_selection_points(
            inputs.grades.get(employee.user_id, {}),
            inputs.grade_table,
            year,
            resolve_window_years(employee, today),
            get_credit_score(inputs.credits.get(employee.user_id, {}), self._rules.max_data_year),
            inputs.adjustments.get(employee.user_id, 0.0),
            self._rules,
        )
        return classify(final_points, resolve_tenure(employee, today), next_criteria, current_criteria)

    def _load_inputs(self, year: int, criteria: CriteriaSet) -> SelectionInputs:
        first_year = max(self._rules.floor_year, year - self._rules.lookback_cap)
        return SelectionInputs(
            criteria=criteria,
            grade_table=self._repository.list_grade_criteria(),
            grades=self._repository.grades_by_user(range(first_year, year)),
            credits=self._repository.credits_by_user([self._rules.max_data_year]),
            adjustments=self._repository.bonus_penalty_adjustments(),
        )

    def _upsert_candidate(
        self,
        user_id: int,
        year: int,
        verdict: EligibilityVerdict,
        promotion_type: PromotionType,
    ) -> bool:
        """Write the verdict; return ``True`` when a new row was created."""

        existing = self._repository.get_candidate(user_id, year)
        if existing is not None:
            self._repository.update_candidate(
                existing.candidate_id,
                point_met=verdict.point_met,
                credit_met=verdict.credit_met,
                promotion_type=promotion_type,
            )
            return False

        self._repository.create_candidate(
            user_id,
            year,
            point_met=verdict.point_met,
            credit_met=verdict.credit_met,
            promotion_type=promotion_type,
        )
        return True


def auto_select_candidates(session: Session, year: int, *, today: date | None = None) -> SelectionResult:
    """Module-level entry point mirroring :meth:`AutoSelectService.auto_select_candidates`."""

    return AutoSelectService(session).auto_select_candidates(year, today=today)
