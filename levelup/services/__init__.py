"""Service layer for the promotion evaluation engine."""

from .auto_select import AutoSelectService, SelectionResult, auto_select_candidates
from .candidates import CandidateService
from .criteria import CriteriaResolver, CriteriaSet
from .criteria_admin import (
    CriteriaAdminService,
    LevelCriteriaOverview,
    LevelCriteriaOverviewItem,
    SaveResult,
)
from .eligibility import EligibilityVerdict, classify, resolve_tenure, resolve_window_years
from .fallback import FallbackChain, Tier
from .points import (
    calculate_final_points,
    calculate_point_sum,
    calculate_selection_points,
    get_credit_score,
    grade_to_points,
    next_level,
)
from .points_listing import EmployeePointRow, PointPage, PointsListingService
from .recalculate import (
    PointRecalculationService,
    recalculate_and_select,
)

__all__ = [
    "AutoSelectService",
    "CandidateService",
    "CriteriaAdminService",
    "CriteriaResolver",
    "CriteriaSet",
    "EligibilityVerdict",
    "EmployeePointRow",
    "FallbackChain",
    "LevelCriteriaOverview",
    "LevelCriteriaOverviewItem",
    "PointPage",
    "PointRecalculationService",
    "PointsListingService",
    "SaveResult",
    "SelectionResult",
    "Tier",
    "auto_select_candidates",
    "calculate_final_points",
    "calculate_point_sum",
    "calculate_selection_points",
    "classify",
    "get_credit_score",
    "grade_to_points",
    "next_level",
    "recalculate_and_select",
    "resolve_tenure",
    "resolve_window_years",
]
