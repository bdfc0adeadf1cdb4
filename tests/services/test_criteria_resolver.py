"""Tests for whole-year level criteria fallback."""
from __future__ import annotations

from unittest.mock import create_autospec

from levelup.models import Level
from levelup.repositories import LevelCriteriaRow, PromotionRepository
from levelup.services.criteria import (
    CriteriaResolver,
    exact_year,
    latest_any_year,
    latest_earlier_year,
)


def _row(level: Level, year: int, required_points: float = 10) -> LevelCriteriaRow:
    return LevelCriteriaRow(
        level=level,
        year=year,
        required_points=required_points,
        special_required_points=None,
        required_credits=0,
        min_tenure=2,
    )


def _repository(rows_by_year: dict[int, list[LevelCriteriaRow]]) -> PromotionRepository:
    repository = create_autospec(PromotionRepository, instance=True)
    repository.list_level_criteria.side_effect = lambda year: rows_by_year.get(year, [])

    def latest(*, before=None):
        years = [year for year in rows_by_year if before is None or year < before]
        return max(years) if years else None

    repository.latest_criteria_year.side_effect = latest
    return repository


def test_exact_year_is_used_when_present() -> None:
    repository = _repository({2025: [_row(Level.L1, 2025)], 2026: [_row(Level.L1, 2026, 12)]})

    criteria = CriteriaResolver(repository).resolve(2026)

    assert criteria.resolved_year == 2026
    assert not criteria.is_fallback
    assert criteria.get(Level.L1).required_points == 12


def test_latest_earlier_year_substitutes_whole_year() -> None:
    repository = _repository(
        {
            2024: [_row(Level.L1, 2024), _row(Level.L2, 2024)],
            2025: [_row(Level.L1, 2025, 11)],
            2028: [_row(Level.L1, 2028, 20)],
        }
    )

    criteria = CriteriaResolver(repository).resolve(2026)

    assert criteria.resolved_year == 2025
    assert criteria.is_fallback
    # No merging with other years.
    assert criteria.get(Level.L2) is None
    assert criteria.get(Level.L1).required_points == 11


def test_later_year_used_when_nothing_earlier() -> None:
    repository = _repository({2028: [_row(Level.L1, 2028, 20)]})

    criteria = CriteriaResolver(repository).resolve(2026)

    assert criteria.resolved_year == 2028


def test_no_criteria_anywhere_yields_empty_set() -> None:
    criteria = CriteriaResolver(_repository({})).resolve(2026)

    assert criteria.is_empty
    assert criteria.resolved_year is None
    assert criteria.get(Level.L1) is None


def test_tiers_individually() -> None:
    repository = _repository({2023: [_row(Level.L1, 2023)], 2027: [_row(Level.L1, 2027)]})

    assert exact_year(repository, 2026) is None
    assert exact_year(repository, 2023) == 2023
    assert latest_earlier_year(repository, 2026) == 2023
    assert latest_earlier_year(repository, 2023) is None
    assert latest_any_year(repository, 2020) == 2027
