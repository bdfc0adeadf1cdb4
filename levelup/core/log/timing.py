"""Timing helpers to log duration and throughput of recalculation passes."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import perf_counter
from typing import Iterator, Optional

from sqlalchemy.orm import Session


class DatabaseCallTracker:
    """Counts ``execute``/``scalar``/``scalars`` calls made on a session."""

    def __init__(self) -> None:
        self.call_count = 0

    @classmethod
    def for_session(cls, session: Session) -> "DatabaseCallTracker":
        """Return the tracker already wrapping ``session`` or install a new one."""

        existing = getattr(session, "_call_tracker", None)
        if isinstance(existing, cls):
            return existing
        tracker = cls()
        tracker.track_calls(session)
        return tracker

    def track_calls(self, session: Session) -> Session:
        """Wrap the session's query methods so each call bumps the counter."""

        for method_name in ("execute", "scalar", "scalars"):
            original = getattr(session, method_name)

            def tracked(*args, _original=original, **kwargs):
                self.call_count += 1
                return _original(*args, **kwargs)

            setattr(session, method_name, tracked)

        session._call_tracker = self  # type: ignore[attr-defined]
        return session


@dataclass
class _Timer:
    label: str
    logger: logging.Logger
    level: int
    unit: str
    total: int
    start: float = field(default_factory=perf_counter)
    db_call_tracker: Optional[DatabaseCallTracker] = None
    db_call_baseline: int = 0

    @property
    def db_calls(self) -> int:
        if self.db_call_tracker is None:
            return 0
        return self.db_call_tracker.call_count - self.db_call_baseline

    def finish(self, success: bool = True) -> None:
        elapsed = perf_counter() - self.start
        total = self.total

        if success:
            message = f"{self.label} completed in {elapsed:.2f}s ({total:,} {self.unit}"
            if elapsed > 0 and total:
                message += f" @ {total / elapsed:,.0f} {self.unit}/s"
            message += ")"
        else:
            message = f"{self.label} failed after {elapsed:.2f}s ({total:,} {self.unit})"

        if self.db_calls:
            message += f" ({self.db_calls:,} DB calls)"

        if success:
            self.logger.log(self.level, message)
        else:
            self.logger.error(message)


@contextmanager
def timeit(
    label: str,
    *,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
    unit: str = "items",
    total: int = 0,
    track_db_calls: bool = False,
    session: Optional[Session] = None,
) -> Iterator[_Timer]:
    """Time the enclosed block and log its duration when it exits.

    Args:
        label: Description of the operation being timed
        logger: Logger instance to use (defaults to "levelup.timer")
        level: Logging level for the success message
        unit: Unit for throughput calculation (e.g., "employees")
        total: Number of units processed in the block
        track_db_calls: Whether to count database calls made during the block
        session: SQLAlchemy session to track (required if track_db_calls=True)
    """
    log = logger or logging.getLogger("levelup.timer")
    tracker = None

    if track_db_calls:
        if session is None:
            raise ValueError("session parameter is required when track_db_calls=True")
        tracker = DatabaseCallTracker.for_session(session)

    timer = _Timer(
        label=label,
        logger=log,
        level=level,
        unit=unit,
        total=total,
        db_call_tracker=tracker,
        db_call_baseline=tracker.call_count if tracker else 0,
    )

    try:
        yield timer
    except Exception:
        timer.finish(success=False)
        raise
    else:
        timer.finish(success=True)
