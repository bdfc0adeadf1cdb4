"""Tests for the batch candidate selection pass."""
from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from levelup.models import Candidate, CandidateSource, Level, PromotionType, Role
from levelup.repositories import CandidateRow, PromotionRepository
from levelup.services import AutoSelectService, SelectionResult
from levelup.services.auto_select import auto_select_candidates
from levelup.services.criteria import CriteriaResolver

TODAY = date(2026, 3, 1)


def _candidates(session: Session) -> dict[int, Candidate]:
    session.expire_all()
    return {row.user_id: row for row in session.scalars(select(Candidate))}


def _seed_qualifier(records, name: str = "Kim Qualifier"):
    employee = records.employee(name, level=Level.L2, years_of_service=3)
    records.grades(employee, {2023: "A", 2024: "B", 2025: "S"})
    records.credit(employee, 2025, 5)
    records.adjustment(employee, 1)
    return employee


def test_concrete_scenario_is_normal_candidate(session, records) -> None:
    """Window 9 + credit 5 + adjustment 1 = 15 clears the L3 bar of 10."""

    records.grade_table()
    records.level_criteria(Level.L3, 2026, required_points=10, min_tenure=2)
    employee = _seed_qualifier(records)
    session.commit()

    result = AutoSelectService(session).auto_select_candidates(2026, today=TODAY)

    assert result == SelectionResult(added=1, total=1, updated=0, failed=0)
    candidate = _candidates(session)[employee.id]
    assert candidate.year == 2026
    assert candidate.promotion_type is PromotionType.NORMAL
    assert candidate.point_met is True
    assert candidate.credit_met is True
    assert candidate.is_review_target is False
    assert candidate.source is CandidateSource.AUTO


def test_evaluate_reports_selection_points(session, records) -> None:
    records.grade_table()
    records.level_criteria(Level.L3, 2026, required_points=10, min_tenure=2)
    _seed_qualifier(records)
    session.commit()

    service = AutoSelectService(session)
    repository = PromotionRepository(session)
    criteria = service._load_inputs(2026, CriteriaResolver(repository).resolve(2026))
    employee = repository.list_selection_employees()[0]

    verdict = service.evaluate(employee, 2026, criteria, today=TODAY)

    assert verdict is not None
    assert verdict.final_points == 15
    assert verdict.tenure == 3


def test_existing_rows_are_updated_and_review_flag_kept(session, records) -> None:
    records.grade_table()
    records.level_criteria(Level.L3, 2026, required_points=10, min_tenure=2)
    existing = _seed_qualifier(records, "Alice Existing")
    fresh = _seed_qualifier(records, "Bob Fresh")
    records.candidate(
        existing,
        2026,
        point_met=False,
        credit_met=False,
        promotion_type=PromotionType.SPECIAL,
        is_review_target=True,
        source=CandidateSource.MANUAL,
    )
    session.commit()

    result = auto_select_candidates(session, 2026, today=TODAY)

    assert result.updated == 1
    assert result.added == 1
    assert result.total == 2
    candidates = _candidates(session)
    updated = candidates[existing.id]
    assert updated.promotion_type is PromotionType.NORMAL
    assert updated.point_met is True
    assert updated.is_review_target is True
    assert updated.source is CandidateSource.MANUAL
    assert candidates[fresh.id].is_review_target is False


def test_non_qualifier_leaves_existing_row_untouched(session, records) -> None:
    records.grade_table()
    records.level_criteria(Level.L3, 2026, required_points=10, min_tenure=2)
    employee = records.employee("Lee Low", level=Level.L2, years_of_service=3)
    records.grades(employee, {2023: "C", 2024: "C", 2025: "U"})
    records.candidate(
        employee, 2026, point_met=True, credit_met=True, promotion_type=PromotionType.SPECIAL
    )
    session.commit()

    result = AutoSelectService(session).auto_select_candidates(2026, today=TODAY)

    assert result == SelectionResult()
    candidate = _candidates(session)[employee.id]
    assert candidate.point_met is True
    assert candidate.promotion_type is PromotionType.SPECIAL


def test_non_qualifier_gets_no_row(session, records) -> None:
    records.grade_table()
    records.level_criteria(Level.L3, 2026, required_points=10, min_tenure=2)
    employee = records.employee("Lee Low", level=Level.L2, years_of_service=3)
    records.grades(employee, {2023: "C", 2024: "C", 2025: "U"})
    session.commit()

    AutoSelectService(session).auto_select_candidates(2026, today=TODAY)

    assert employee.id not in _candidates(session)


def test_special_track_candidate(session, records) -> None:
    """Short tenure but points above the current level's special bar."""

    records.grade_table()
    records.level_criteria(Level.L2, 2026, required_points=8, special_required_points=6, min_tenure=2)
    records.level_criteria(Level.L3, 2026, required_points=10, min_tenure=2)
    employee = records.employee("Sam Special", level=Level.L2, years_of_service=1)
    records.grades(employee, {2025: "S"})
    records.credit(employee, 2025, 5)
    session.commit()

    result = AutoSelectService(session).auto_select_candidates(2026, today=TODAY)

    assert result.added == 1
    candidate = _candidates(session)[employee.id]
    assert candidate.promotion_type is PromotionType.SPECIAL
    assert candidate.point_met is False
    assert candidate.credit_met is False


def test_missing_next_level_criteria_leaves_special_track(session, records) -> None:
    records.grade_table()
    records.level_criteria(Level.L2, 2026, required_points=8, special_required_points=6, min_tenure=2)
    employee = records.employee("Sam Special", level=Level.L2, years_of_service=1)
    records.grades(employee, {2025: "S"})
    records.credit(employee, 2025, 5)
    session.commit()

    result = AutoSelectService(session).auto_select_candidates(2026, today=TODAY)

    assert result == SelectionResult(added=1, total=1, updated=0, failed=0)
    candidate = _candidates(session)[employee.id]
    assert candidate.promotion_type is PromotionType.SPECIAL
    assert candidate.point_met is False


def test_rerun_is_idempotent(session, records) -> None:
    records.grade_table()
    records.level_criteria(Level.L3, 2026, required_points=10, min_tenure=2)
    first = _seed_qualifier(records, "Alice")
    second = _seed_qualifier(records, "Bob")
    session.commit()

    service = AutoSelectService(session)
    first_result = service.auto_select_candidates(2026, today=TODAY)
    snapshot = {
        user_id: (row.point_met, row.credit_met, row.promotion_type, row.is_review_target, row.source)
        for user_id, row in _candidates(session).items()
    }
    second_result = service.auto_select_candidates(2026, today=TODAY)
    again = {
        user_id: (row.point_met, row.credit_met, row.promotion_type, row.is_review_target, row.source)
        for user_id, row in _candidates(session).items()
    }

    assert first_result.added == 2
    assert second_result == SelectionResult(added=0, total=2, updated=2, failed=0)
    assert snapshot == again
    assert set(again) == {first.id, second.id}


def test_ineligible_employees_are_skipped(session, records) -> None:
    records.grade_table()
    records.level_criteria(Level.L3, 2026, required_points=1, min_tenure=1)
    records.level_criteria(Level.L4, 2026, required_points=1, min_tenure=1)
    head = records.employee("Dana Head", level=Level.L2, role=Role.DEPT_HEAD)
    inactive = records.employee("Ivan Inactive", level=Level.L2, is_active=False)
    top = records.employee("Tia Top", level=Level.L5)
    unleveled = records.employee("Uma Unleveled", level=None)
    no_bars = records.employee("Noel Next", level=Level.L1)
    session.commit()

    result = AutoSelectService(session).auto_select_candidates(2026, today=TODAY)

    assert result == SelectionResult()
    candidates = _candidates(session)
    for employee in (head, inactive, top, unleveled, no_bars):
        assert employee.id not in candidates


def test_no_criteria_reports_zero(session, records) -> None:
    records.grade_table()
    _seed_qualifier(records)
    session.commit()

    result = AutoSelectService(session).auto_select_candidates(2026, today=TODAY)

    assert result.as_dict() == {"added": 0, "total": 0, "updated": 0, "failed": 0}
    assert _candidates(session) == {}


def test_criteria_fall_back_to_earlier_year(session, records) -> None:
    records.grade_table()
    records.level_criteria(Level.L3, 2025, required_points=10, min_tenure=2)
    employee = _seed_qualifier(records)
    session.commit()

    result = AutoSelectService(session).auto_select_candidates(2026, today=TODAY)

    assert result.added == 1
    assert _candidates(session)[employee.id].year == 2026


class _FlakyRepository(PromotionRepository):
    """Fails to create the candidate row of one named employee."""

    def __init__(self, session: Session, failing_user_id: int) -> None:
        super().__init__(session)
        self._failing_user_id = failing_user_id

    def create_candidate(self, user_id, year, **kwargs) -> CandidateRow:
        if user_id == self._failing_user_id:
            raise RuntimeError("write failed")
        return super().create_candidate(user_id, year, **kwargs)


def test_one_failure_does_not_stop_the_pass(session, records) -> None:
    records.grade_table()
    records.level_criteria(Level.L3, 2026, required_points=10, min_tenure=2)
    first = _seed_qualifier(records, "Alice")
    broken = _seed_qualifier(records, "Bob")
    last = _seed_qualifier(records, "Carol")
    session.commit()

    service = AutoSelectService(session, repository=_FlakyRepository(session, broken.id))
    result = service.auto_select_candidates(2026, today=TODAY)

    assert result == SelectionResult(added=2, total=2, updated=0, failed=1)
    candidates = _candidates(session)
    assert set(candidates) == {first.id, last.id}
