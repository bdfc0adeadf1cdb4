"""Grade-to-point translation and windowed point aggregation.

Two totals are built on the same grade window and are deliberately kept apart:

* :func:`calculate_final_points` feeds the live point listing and includes the
  manual merit/penalty ledger.
* :func:`calculate_selection_points` feeds the batch candidate selection and
  includes the credit score instead of the merit/penalty ledger.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Protocol

from levelup.core.config import PromotionSettings
from levelup.models import Level

from .fallback import FallbackChain, Tier

DEFAULT_GRADE_POINTS = 2.0
GRADE_FLOOR_YEAR = 2021
MAX_DATA_YEAR = 2025
LOOKBACK_CAP = 5

# Legacy spreadsheet tokens that mean "no grade".
PLACEHOLDER_GRADES = frozenset({"", "-", "NI"})


class GradeEntry(Protocol):
    grade: str
    year_range: str
    points: float


@dataclass(frozen=True)
class WindowRules:
    """Bounds of the backward-looking grade window."""

    lookback_cap: int = LOOKBACK_CAP
    floor_year: int = GRADE_FLOOR_YEAR
    default_points: float = DEFAULT_GRADE_POINTS
    max_data_year: int = MAX_DATA_YEAR

    @classmethod
    def from_settings(cls, settings: PromotionSettings) -> "WindowRules":
        return cls(
            lookback_cap=settings.lookback_cap,
            floor_year=settings.grade_floor_year,
            default_points=settings.default_grade_points,
            max_data_year=settings.max_data_year,
        )


DEFAULT_RULES = WindowRules()


def normalize_grade(grade: str | None) -> str:
    return (grade or "").strip().upper()


def year_range_contains(year_range: str, year: int) -> bool:
    """Whether ``year_range`` (``"2025"`` or ``"2021-2024"``) covers ``year``."""

    if year_range == str(year):
        return True
    parts = year_range.split("-")
    if len(parts) != 2:
        return False
    try:
        start, end = int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        return False
    return start <= year <= end


def lookup_grade_points(
    grade: str | None, year: int, table: Iterable[GradeEntry]
) -> Optional[float]:
    """Points of the first table entry matching ``grade`` and ``year``.

    Placeholder grades never match. Table order is significant.
    """

    normalized = normalize_grade(grade)
    if normalized in PLACEHOLDER_GRADES:
        return None
    for entry in table:
        if entry.grade != normalized:
            continue
        if year_range_contains(entry.year_range, year):
            return float(entry.points)
    return None


_GRADE_POINTS: FallbackChain[float] = FallbackChain(
    "grade points", Tier("grade table", lookup_grade_points)
)


def grade_to_points(
    grade: str | None,
    year: int,
    table: Iterable[GradeEntry],
    default: float = DEFAULT_GRADE_POINTS,
) -> float:
    """Translate a letter grade of ``year`` into points, defaulting to 2."""

    points = _GRADE_POINTS.resolve(grade, year, table)
    return default if points is None else points


def window_years(
    base_year: int,
    years_of_service: int | None,
    rules: WindowRules = DEFAULT_RULES,
) -> list[int]:
    """Years summed for ``base_year``: newest first, capped and floored."""

    tenure_range = min(max(years_of_service or 0, 0), rules.lookback_cap)
    years: list[int] = []
    for offset in range(tenure_range):
        year = base_year - 1 - offset
        if year < rules.floor_year:
            break
        years.append(year)
    return years


def calculate_point_sum(
    grades: Mapping[int, str],
    table: Iterable[GradeEntry],
    base_year: int,
    years_of_service: int | None,
    rules: WindowRules = DEFAULT_RULES,
) -> float:
    """Sum grade points over the window ending the year before ``base_year``."""

    entries = list(table)
    return sum(
        grade_to_points(grades.get(year, ""), year, entries, rules.default_points)
        for year in window_years(base_year, years_of_service, rules)
    )


def calculate_final_points(
    grades: Mapping[int, str],
    table: Iterable[GradeEntry],
    base_year: int,
    years_of_service: int | None,
    total_merit: float,
    total_penalty: float,
    adjustment: float,
    rules: WindowRules = DEFAULT_RULES,
) -> float:
    """Listing total: grade window + merit - penalty + bonus/penalty adjustment."""

    return (
        calculate_point_sum(grades, table, base_year, years_of_service, rules)
        + total_merit
        - total_penalty
        + adjustment
    )


def calculate_selection_points(
    grades: Mapping[int, str],
    table: Iterable[GradeEntry],
    base_year: int,
    years_of_service: int | None,
    credit_score: float,
    adjustment: float,
    rules: WindowRules = DEFAULT_RULES,
) -> float:
    """Selection total: grade window + credit score + bonus/penalty adjustment.

    The merit/penalty ledger is not part of this total.
    """

    return (
        calculate_point_sum(grades, table, base_year, years_of_service, rules)
        + credit_score
        + adjustment
    )


def get_credit_score(
    credits_by_year: Mapping[int, float],
    max_data_year: int = MAX_DATA_YEAR,
) -> float:
    """Credit score of ``max_data_year`` only; credits are never summed."""

    return float(credits_by_year.get(max_data_year, 0.0))


def next_level(level: Level | str | None) -> Level | None:
    """Successor of ``level``; ``None`` at the top level or for unknown input."""

    if level is None:
        return None
    try:
        current = Level(level)
    except ValueError:
        return None
    ordered = Level.ordered()
    index = ordered.index(current)
    if index >= len(ordered) - 1:
        return None
    return ordered[index + 1]
