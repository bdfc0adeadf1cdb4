"""Background jobs triggered by criteria edits."""

from .recalculation import (
    JobOutcome,
    RecalculationJob,
    RecalculationQueue,
    build_recalculation_runner,
)

__all__ = [
    "JobOutcome",
    "RecalculationJob",
    "RecalculationQueue",
    "build_recalculation_runner",
]
