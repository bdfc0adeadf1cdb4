"""Resolve the level criteria that apply to an evaluation year."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from levelup.core.logger import get_logger
from levelup.models import Level
from levelup.repositories import LevelCriteriaRow, PromotionRepository

from .fallback import FallbackChain, Tier

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class CriteriaSet:
    """Per-level criteria of one whole year.

    ``resolved_year`` differs from ``requested_year`` when a fallback year was
    substituted and is ``None`` when no criteria exist at all.
    """

    requested_year: int
    resolved_year: int | None
    by_level: Mapping[Level, LevelCriteriaRow] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.by_level

    @property
    def is_fallback(self) -> bool:
        return self.resolved_year is not None and self.resolved_year != self.requested_year

    def get(self, level: Level | None) -> LevelCriteriaRow | None:
        if level is None:
            return None
        return self.by_level.get(level)


def exact_year(repository: PromotionRepository, year: int) -> int | None:
    return year if repository.list_level_criteria(year) else None


def latest_earlier_year(repository: PromotionRepository, year: int) -> int | None:
    return repository.latest_criteria_year(before=year)


def latest_any_year(repository: PromotionRepository, year: int) -> int | None:
    return repository.latest_criteria_year()


CRITERIA_YEAR_CHAIN: FallbackChain[int] = FallbackChain(
    "criteria year",
    Tier("exact year", exact_year),
    Tier("latest earlier year", latest_earlier_year),
    Tier("latest year", latest_any_year),
)


class CriteriaResolver:
    """Load criteria for a year, substituting a whole fallback year if needed."""

    def __init__(self, repository: PromotionRepository) -> None:
        self._repository = repository

    def resolve(self, year: int) -> CriteriaSet:
        resolved_year, tier = CRITERIA_YEAR_CHAIN.resolve_with_tier(self._repository, year)
        if resolved_year is None:
            LOGGER.info("No level criteria configured for any year (requested %s)", year)
            return CriteriaSet(requested_year=year, resolved_year=None)

        if resolved_year != year:
            LOGGER.info("Level criteria for %s missing, using %s (%s)", year, resolved_year, tier)

        rows = self._repository.list_level_criteria(resolved_year)
        return CriteriaSet(
            requested_year=year,
            resolved_year=resolved_year,
            by_level={row.level: row for row in rows},
        )
