"""Schemas for grade and level criteria administration."""
from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from levelup.models import Level

_YEAR_RANGE = re.compile(r"^\d{4}(-\d{4})?$")


class GradeCriteriaItem(BaseModel):
    grade: str = Field(min_length=1, max_length=8)
    year_range: str
    points: float

    @field_validator("grade")
    @classmethod
    def _normalize_grade(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("grade must not be blank")
        return value

    @field_validator("year_range")
    @classmethod
    def _check_year_range(cls, value: str) -> str:
        value = value.strip()
        if not _YEAR_RANGE.match(value):
            raise ValueError("year_range must look like '2025' or '2021-2024'")
        if "-" in value:
            start, end = (int(part) for part in value.split("-"))
            if start > end:
                raise ValueError("year_range start must not be after its end")
        return value


class GradeCriteriaPayload(BaseModel):
    criteria: list[GradeCriteriaItem] = Field(min_length=1)


class GradeCriteriaList(BaseModel):
    criteria: list[GradeCriteriaItem]


class LevelCriteriaItem(BaseModel):
    level: Level
    required_points: float = Field(ge=0)
    special_required_points: float | None = Field(default=None, ge=0)
    required_credits: float = Field(default=0, ge=0)
    min_tenure: int = Field(ge=0)


class LevelCriteriaPayload(BaseModel):
    year: int = Field(ge=2000, le=2100)
    criteria: list[LevelCriteriaItem] = Field(min_length=1)
    changed_by: str = "Unknown"


class LevelCriteriaOverviewEntry(BaseModel):
    level: Level
    year: int
    required_points: float | None = None
    special_required_points: float | None = None
    required_credits: float | None = None
    min_tenure: int | None = None


class LevelCriteriaOverviewResponse(BaseModel):
    year: int
    criteria: list[LevelCriteriaOverviewEntry]
    available_years: list[int]


class LevelCriteriaHistoryEntry(BaseModel):
    level: Level
    year: int
    changed_by_name: str
    field: str
    old_value: str | None = None
    new_value: str | None = None
    created_at: datetime | None = None


class SaveResponse(BaseModel):
    success: bool = True
    saved: int
    recalculation_year: int
    recalculation_queued: bool
