"""Tenure resolution and the normal/special promotion eligibility rules."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

from levelup.models import PromotionType
from levelup.repositories import LevelCriteriaRow

from .fallback import FallbackChain, Tier


class TenureSource(Protocol):
    years_of_service: int | None
    level_start_date: date | None
    hire_date: date | None


def tenure_from_level_start(employee: TenureSource, today: date) -> Optional[int]:
    if employee.level_start_date is None:
        return None
    return today.year - employee.level_start_date.year


def tenure_from_years_of_service(employee: TenureSource, today: date) -> Optional[int]:
    return employee.years_of_service


def tenure_from_hire_date(employee: TenureSource, today: date) -> Optional[int]:
    if employee.hire_date is None:
        return None
    return today.year - employee.hire_date.year


# Years held at the current level, used against ``min_tenure``.
TENURE_CHAIN: FallbackChain[int] = FallbackChain(
    "tenure",
    Tier("level start date", tenure_from_level_start),
    Tier("years of service", tenure_from_years_of_service),
    Tier("hire date", tenure_from_hire_date),
    default=0,
)

# Years of service, used to size the grade window.
WINDOW_YEARS_CHAIN: FallbackChain[int] = FallbackChain(
    "window years",
    Tier("years of service", tenure_from_years_of_service),
    Tier("level start date", tenure_from_level_start),
    Tier("hire date", tenure_from_hire_date),
    default=0,
)


def resolve_tenure(employee: TenureSource, today: date) -> int:
    return TENURE_CHAIN.resolve(employee, today) or 0


def resolve_window_years(employee: TenureSource, today: date) -> int:
    return WINDOW_YEARS_CHAIN.resolve(employee, today) or 0


@dataclass(frozen=True)
class EligibilityVerdict:
    """Outcome of the two independent eligibility tracks for one employee."""

    final_points: float
    tenure: int
    tenure_met: bool
    qualification_met: bool
    special_eligible: bool

    @property
    def qualifies(self) -> bool:
        return self.qualification_met or self.special_eligible

    @property
    def promotion_type(self) -> PromotionType | None:
        if self.qualification_met:
            return PromotionType.NORMAL
        if self.special_eligible:
            return PromotionType.SPECIAL
        return None

    # Both flags mirror the combined normal-track verdict.
    @property
    def point_met(self) -> bool:
        return self.qualification_met

    @property
    def credit_met(self) -> bool:
        return self.qualification_met


def classify(
    final_points: float,
    tenure: int,
    next_criteria: LevelCriteriaRow | None,
    current_criteria: LevelCriteriaRow | None,
) -> EligibilityVerdict:
    """Apply the normal and special track rules.

    A ``min_tenure`` of zero can never be met, leaving only the special track.
    A ``required_points`` of zero means tenure alone qualifies. The special bar
    comes from the employee's current level, not the next one. Missing next
    level criteria read as zero for both bars.
    """

    min_tenure = (next_criteria.min_tenure if next_criteria else 0) or 0
    tenure_met = min_tenure > 0 and tenure >= min_tenure

    required_points = (next_criteria.required_points if next_criteria else 0) or 0
    qualification_met = tenure_met and (required_points <= 0 or final_points >= required_points)

    special_bar = current_criteria.special_required_points if current_criteria else None
    special_eligible = (
        not tenure_met
        and special_bar is not None
        and special_bar > 0
        and final_points >= special_bar
    )

    return EligibilityVerdict(
        final_points=final_points,
        tenure=tenure,
        tenure_met=tenure_met,
        qualification_met=qualification_met,
        special_eligible=special_eligible,
    )
