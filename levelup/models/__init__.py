"""Database models for the promotion evaluation domain."""
from __future__ import annotations

from .base import Base
from .candidates import Candidate, CandidateSource, PromotionType
from .criteria import GradeCriteria, LevelCriteria, LevelCriteriaHistory
from .employees import Employee, EmploymentType, Level, Role
from .records import BonusPenalty, BonusPenaltyType, Credit, PerformanceGrade, Point

__all__ = [
    "Base",
    "BonusPenalty",
    "BonusPenaltyType",
    "Candidate",
    "CandidateSource",
    "Credit",
    "Employee",
    "EmploymentType",
    "GradeCriteria",
    "Level",
    "LevelCriteria",
    "LevelCriteriaHistory",
    "PerformanceGrade",
    "Point",
    "PromotionType",
    "Role",
]
