"""Pydantic request and response schemas."""

from .candidates import AutoSelectRequest, CandidateEntry, CandidateList, SelectionSummary
from .criteria import (
    GradeCriteriaItem,
    GradeCriteriaList,
    GradeCriteriaPayload,
    LevelCriteriaHistoryEntry,
    LevelCriteriaItem,
    LevelCriteriaOverviewEntry,
    LevelCriteriaOverviewResponse,
    LevelCriteriaPayload,
    SaveResponse,
)
from .points import EmployeePointEntry, PointListing

__all__ = [
    "AutoSelectRequest",
    "CandidateEntry",
    "CandidateList",
    "EmployeePointEntry",
    "GradeCriteriaItem",
    "GradeCriteriaList",
    "GradeCriteriaPayload",
    "LevelCriteriaHistoryEntry",
    "LevelCriteriaItem",
    "LevelCriteriaOverviewEntry",
    "LevelCriteriaOverviewResponse",
    "LevelCriteriaPayload",
    "PointListing",
    "SaveResponse",
    "SelectionSummary",
]
