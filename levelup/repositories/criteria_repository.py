"""Writes and overviews for grade and level criteria administration."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from sqlalchemy import select

from levelup.models import GradeCriteria, Level, LevelCriteria, LevelCriteriaHistory

from .base import BaseRepository

TRACKED_FIELDS = ("required_points", "special_required_points", "required_credits", "min_tenure")


@dataclass(frozen=True)
class GradeCriteriaEntry:
    grade: str
    year_range: str
    points: float


@dataclass(frozen=True)
class LevelCriteriaValues:
    level: Level
    required_points: float
    required_credits: float
    min_tenure: int
    special_required_points: float | None = None


@dataclass(frozen=True)
class LevelCriteriaChange:
    level: Level
    year: int
    field: str
    old_value: str | None
    new_value: str | None


@dataclass(frozen=True)
class LevelCriteriaHistoryRow:
    level: Level
    year: int
    changed_by_name: str
    field: str
    old_value: str | None
    new_value: str | None
    created_at: datetime | None


def format_criteria_value(value: float | int | None) -> str | None:
    if value is None:
        return None
    return f"{value:g}"


class CriteriaRepository(BaseRepository):
    """Upserts keyed by the natural criteria keys, with a field-level audit trail."""

    def list_grade_criteria(self) -> list[GradeCriteriaEntry]:
        rows = self._session.scalars(select(GradeCriteria).order_by(GradeCriteria.id))
        return [
            GradeCriteriaEntry(grade=row.grade, year_range=row.year_range, points=float(row.points))
            for row in rows
        ]

    def upsert_grade_criteria(self, entries: Sequence[GradeCriteriaEntry]) -> int:
        """Insert or update by ``(grade, year_range)``; return the number of new rows."""

        created = 0
        for entry in entries:
            row = self._session.scalars(
                select(GradeCriteria).where(
                    GradeCriteria.grade == entry.grade, GradeCriteria.year_range == entry.year_range
                )
            ).first()
            if row is None:
                self._session.add(
                    GradeCriteria(grade=entry.grade, year_range=entry.year_range, points=entry.points)
                )
                self._session.flush()
                created += 1
            else:
                row.points = entry.points
        self._session.flush()
        return created

    def rename_year_range(self, old: str, new: str) -> int:
        """Move entries from ``old`` to ``new``; an entry already under ``new`` wins."""

        taken = set(
            self._session.scalars(select(GradeCriteria.grade).where(GradeCriteria.year_range == new))
        )
        rows = list(self._session.scalars(select(GradeCriteria).where(GradeCriteria.year_range == old)))
        for row in rows:
            if row.grade in taken:
                self._session.delete(row)
            else:
                row.year_range = new
        self._session.flush()
        return len(rows)

    def level_criteria_by_level(self, year: int) -> dict[Level, LevelCriteria]:
        rows = self._session.scalars(select(LevelCriteria).where(LevelCriteria.year == year))
        return {Level(row.level): row for row in rows}

    def available_years(self) -> list[int]:
        rows = self._session.scalars(
            select(LevelCriteria.year).distinct().order_by(LevelCriteria.year.desc())
        )
        return [int(year) for year in rows]

    def upsert_level_criteria(
        self,
        year: int,
        items: Sequence[LevelCriteriaValues],
        *,
        changed_by: str,
    ) -> list[LevelCriteriaChange]:
        """Upsert by ``(level, year)`` and record one history row per changed field.

        A new row records every tracked field with an empty old value.
        """

        existing = self.level_criteria_by_level(year)
        changes: list[LevelCriteriaChange] = []
        for item in items:
            row = existing.get(item.level)
            if row is None:
                row = LevelCriteria(level=item.level, year=year)
                self._session.add(row)
                existing[item.level] = row
                previous: dict[str, str | None] = {name: None for name in TRACKED_FIELDS}
                is_new = True
            else:
                previous = {
                    name: format_criteria_value(getattr(row, name)) for name in TRACKED_FIELDS
                }
                is_new = False

            for name in TRACKED_FIELDS:
                setattr(row, name, getattr(item, name))
                new_value = format_criteria_value(getattr(item, name))
                if is_new or previous[name] != new_value:
                    changes.append(
                        LevelCriteriaChange(
                            level=item.level,
                            year=year,
                            field=name,
                            old_value=previous[name],
                            new_value=new_value,
                        )
                    )

        self._session.add_all(
            LevelCriteriaHistory(
                level=change.level,
                year=change.year,
                changed_by_name=changed_by,
                field=change.field,
                old_value=change.old_value,
                new_value=change.new_value,
            )
            for change in changes
        )
        self._session.flush()
        return changes

    def list_history(self, *, year: int | None = None, limit: int = 100) -> list[LevelCriteriaHistoryRow]:
        statement = select(LevelCriteriaHistory)
        if year is not None:
            statement = statement.where(LevelCriteriaHistory.year == year)
        statement = statement.order_by(LevelCriteriaHistory.id.desc()).limit(limit)
        return [
            LevelCriteriaHistoryRow(
                level=Level(row.level),
                year=row.year,
                changed_by_name=row.changed_by_name,
                field=row.field,
                old_value=row.old_value,
                new_value=row.new_value,
                created_at=row.created_at,
            )
            for row in self._session.scalars(statement)
        ]
