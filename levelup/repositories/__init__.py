"""Repositories wrapping SQL access for the selection engine."""

from .criteria_repository import (
    CriteriaRepository,
    GradeCriteriaEntry,
    LevelCriteriaChange,
    LevelCriteriaHistoryRow,
    LevelCriteriaValues,
)
from .promotion_repository import (
    CandidateListingRow,
    CandidateRow,
    EmployeeRow,
    GradeCriteriaRow,
    LevelCriteriaRow,
    MeritPenaltyTotals,
    PromotionRepository,
)

__all__ = [
    "CandidateListingRow",
    "CandidateRow",
    "CriteriaRepository",
    "EmployeeRow",
    "GradeCriteriaEntry",
    "GradeCriteriaRow",
    "LevelCriteriaChange",
    "LevelCriteriaHistoryRow",
    "LevelCriteriaRow",
    "LevelCriteriaValues",
    "MeritPenaltyTotals",
    "PromotionRepository",
]
