#!/usr/bin/env python3
"""Move legacy "2022-2024" grade criteria to "2021-2024" and upsert the default table."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy.orm import Session  # noqa: E402  (import after sys.path manipulation)

from levelup.core.logger import get_logger, init_logging  # noqa: E402
from levelup.db import session_scope  # noqa: E402
from levelup.repositories import CriteriaRepository, GradeCriteriaEntry  # noqa: E402

LOGGER = get_logger(__name__)

LEGACY_RANGE = "2022-2024"
HISTORIC_RANGE = "2021-2024"

DEFAULT_GRADE_CRITERIA: tuple[GradeCriteriaEntry, ...] = (
    GradeCriteriaEntry(grade="S", year_range=HISTORIC_RANGE, points=4),
    GradeCriteriaEntry(grade="A", year_range=HISTORIC_RANGE, points=3),
    GradeCriteriaEntry(grade="B", year_range=HISTORIC_RANGE, points=2),
    GradeCriteriaEntry(grade="C", year_range=HISTORIC_RANGE, points=1),
    GradeCriteriaEntry(grade="S", year_range="2025", points=4),
    GradeCriteriaEntry(grade="O", year_range="2025", points=3),
    GradeCriteriaEntry(grade="E", year_range="2025", points=2.5),
    GradeCriteriaEntry(grade="G", year_range="2025", points=2),
    GradeCriteriaEntry(grade="N", year_range="2025", points=1.5),
    GradeCriteriaEntry(grade="U", year_range="2025", points=1),
)


def migrate(session: Session) -> list[GradeCriteriaEntry]:
    """Apply the migration and return the resulting grade table."""

    repository = CriteriaRepository(session)
    renamed = repository.rename_year_range(LEGACY_RANGE, HISTORIC_RANGE)
    LOGGER.info("Renamed %s entries from %s to %s", renamed, LEGACY_RANGE, HISTORIC_RANGE)

    created = repository.upsert_grade_criteria(DEFAULT_GRADE_CRITERIA)
    LOGGER.info("Upserted %s default entries (%s new)", len(DEFAULT_GRADE_CRITERIA), created)
    return repository.list_grade_criteria()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--database-url", type=str, default=None, help="Override the configured SQLAlchemy URL")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    with session_scope(url=args.database_url) as session:
        table = migrate(session)
    for entry in table:
        LOGGER.info("  %s (%s): %s", entry.grade, entry.year_range, f"{entry.points:g}")


if __name__ == "__main__":
    init_logging(app_name="migrate-year-range")
    main()
