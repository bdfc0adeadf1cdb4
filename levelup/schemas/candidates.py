"""Schemas for candidate selection results and listings."""
from __future__ import annotations

from pydantic import BaseModel

from levelup.models import CandidateSource, Level, PromotionType


class AutoSelectRequest(BaseModel):
    year: int | None = None


class SelectionSummary(BaseModel):
    year: int
    added: int
    total: int
    updated: int
    failed: int = 0


class CandidateEntry(BaseModel):
    candidate_id: int
    user_id: int
    name: str
    department: str
    team: str
    level: Level | None = None
    year: int
    point_met: bool
    credit_met: bool
    promotion_type: PromotionType
    is_review_target: bool
    source: CandidateSource


class CandidateList(BaseModel):
    year: int
    total: int
    candidates: list[CandidateEntry]
