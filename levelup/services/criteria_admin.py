"""Saving grade and level criteria, followed by a queued recalculation."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Protocol, Sequence

from sqlalchemy.orm import Session

from levelup.core.logger import get_logger
from levelup.models import Level
from levelup.repositories import (
    CriteriaRepository,
    GradeCriteriaEntry,
    LevelCriteriaChange,
    LevelCriteriaHistoryRow,
    LevelCriteriaValues,
)

LOGGER = get_logger(__name__)


class RecalculationScheduler(Protocol):
    def submit(self, year: int, *, reason: str = "") -> object: ...


@dataclass(frozen=True)
class LevelCriteriaOverviewItem:
    level: Level
    year: int
    required_points: Optional[float] = None
    special_required_points: Optional[float] = None
    required_credits: Optional[float] = None
    min_tenure: Optional[int] = None


@dataclass(frozen=True)
class LevelCriteriaOverview:
    year: int
    criteria: list[LevelCriteriaOverviewItem]
    available_years: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class SaveResult:
    saved: int
    recalculation_year: int
    changes: list[LevelCriteriaChange] = field(default_factory=list)
    recalculation_queued: bool = True


class CriteriaAdminService:
    """Persist criteria edits and trigger the follow-up recalculation.

    The save is committed before the recalculation is queued; a queueing
    problem is logged and reported but never undoes the save.
    """

    def __init__(
        self,
        session: Session,
        *,
        scheduler: RecalculationScheduler | None = None,
        repository: CriteriaRepository | None = None,
    ) -> None:
        self._session = session
        self._scheduler = scheduler
        self._repository = repository or CriteriaRepository(session)

    def list_grade_criteria(self) -> list[GradeCriteriaEntry]:
        return self._repository.list_grade_criteria()

    def save_grade_criteria(
        self,
        entries: Sequence[GradeCriteriaEntry],
        *,
        today: date | None = None,
    ) -> SaveResult:
        if not entries:
            raise ValueError("At least one grade criteria entry is required")

        created = self._repository.upsert_grade_criteria(entries)
        self._session.commit()
        LOGGER.info("Saved %s grade criteria entries (%s new)", len(entries), created)

        year = (today or date.today()).year
        queued = self._schedule(year, "grade criteria updated")
        return SaveResult(saved=len(entries), recalculation_year=year, recalculation_queued=queued)

    def level_criteria_overview(self, year: int) -> LevelCriteriaOverview:
        """One entry per level for ``year``, empty where nothing is configured."""

        existing = self._repository.level_criteria_by_level(year)
        items = []
        for level in Level.ordered():
            row = existing.get(level)
            if row is None:
                items.append(LevelCriteriaOverviewItem(level=level, year=year))
                continue
            items.append(
                LevelCriteriaOverviewItem(
                    level=level,
                    year=year,
                    required_points=row.required_points,
                    special_required_points=row.special_required_points,
                    required_credits=row.required_credits,
                    min_tenure=row.min_tenure,
                )
            )
        return LevelCriteriaOverview(
            year=year, criteria=items, available_years=self._repository.available_years()
        )

    def save_level_criteria(
        self,
        year: int,
        items: Sequence[LevelCriteriaValues],
        *,
        changed_by: str = "Unknown",
    ) -> SaveResult:
        if not items:
            raise ValueError("At least one level criteria entry is required")

        changes = self._repository.upsert_level_criteria(year, items, changed_by=changed_by)
        self._session.commit()
        LOGGER.info(
            "Saved level criteria for %s: %s levels, %s field changes by %s",
            year,
            len(items),
            len(changes),
            changed_by,
        )

        queued = self._schedule(year, "level criteria updated")
        return SaveResult(
            saved=len(items), recalculation_year=year, changes=changes, recalculation_queued=queued
        )

    def level_criteria_history(self, *, year: int | None = None, limit: int = 100) -> list[LevelCriteriaHistoryRow]:
        return self._repository.list_history(year=year, limit=limit)

    def _schedule(self, year: int, reason: str) -> bool:
        if self._scheduler is None:
            LOGGER.warning("No recalculation scheduler configured; skipping recalculation for %s", year)
            return False
        try:
            self._scheduler.submit(year, reason=reason)
        except Exception:
            LOGGER.exception("Failed to queue recalculation for %s", year)
            return False
        return True
