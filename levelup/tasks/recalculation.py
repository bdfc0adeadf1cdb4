"""Fire-and-forget recalculation after criteria edits.

Saving criteria must never wait for, or fail because of, the recalculation that
follows it. Jobs are handed to a single daemon worker thread which runs them in
submission order, retries failures a bounded number of times and records the
outcome instead of raising.
"""
from __future__ import annotations

import itertools
import queue
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Deque, Optional

from sqlalchemy.orm import sessionmaker

from levelup.core.config import get_settings
from levelup.core.logger import get_logger, log_context
from levelup.db import session_scope
from levelup.services.auto_select import SelectionResult
from levelup.services.recalculate import recalculate_and_select

LOGGER = get_logger(__name__)

Runner = Callable[[int], SelectionResult]

_STOP = object()


@dataclass
class RecalculationJob:
    job_id: int
    year: int
    reason: str = ""
    attempts: int = 0


@dataclass(frozen=True)
class JobOutcome:
    job_id: int
    year: int
    reason: str
    attempts: int
    succeeded: bool
    result: Optional[SelectionResult] = None
    error: Optional[str] = None
    finished_at: Optional[datetime] = None


def build_recalculation_runner(session_factory: sessionmaker) -> Runner:
    """Runner that recalculates and reselects in its own session."""

    def run(year: int) -> SelectionResult:
        with session_scope(session_factory) as session:
            return recalculate_and_select(session, year)

    return run


class RecalculationQueue:
    """Single-worker FIFO queue of recalculation jobs.

    Overlapping jobs are not coalesced; the last job to finish wins.
    """

    def __init__(
        self,
        runner: Runner,
        *,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        history_size: int = 50,
    ) -> None:
        settings = get_settings().promotion
        self._runner = runner
        self.max_retries = settings.recalc_max_retries if max_retries is None else max_retries
        self.retry_delay = settings.recalc_retry_delay if retry_delay is None else retry_delay
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._history: Deque[JobOutcome] = deque(maxlen=history_size)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._stopping = threading.Event()
        self._worker: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    @property
    def history(self) -> list[JobOutcome]:
        return list(self._history)

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._stopping.clear()
            self._worker = threading.Thread(
                target=self._loop, name="levelup-recalculation", daemon=True
            )
            self._worker.start()
        LOGGER.debug("Recalculation worker started")

    def submit(self, year: int, *, reason: str = "") -> RecalculationJob:
        """Queue a recalculation for ``year`` and return without waiting."""

        job = RecalculationJob(job_id=next(self._ids), year=year, reason=reason)
        if self._stopping.is_set():
            LOGGER.warning("Recalculation queue is shut down; dropping job %s for %s", job.job_id, year)
            return job
        self.start()
        self._queue.put(job)
        LOGGER.info("Queued recalculation job %s for %s (%s)", job.job_id, year, reason or "unspecified")
        return job

    def join(self) -> None:
        """Block until every submitted job has finished."""

        self._queue.join()

    def shutdown(self, *, wait: bool = True) -> None:
        with self._lock:
            worker = self._worker
            if worker is None or self._stopping.is_set():
                return
            self._stopping.set()
            self._queue.put(_STOP)
        if wait:
            worker.join()
        LOGGER.debug("Recalculation worker stopped")

    def _loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._history.append(self._run(item))
            finally:
                self._queue.task_done()

    def _run(self, job: RecalculationJob) -> JobOutcome:
        error: str | None = None
        with log_context.bound(job=job.job_id, year=job.year):
            while job.attempts <= self.max_retries:
                job.attempts += 1
                try:
                    result = self._runner(job.year)
                except Exception as exc:
                    error = f"{type(exc).__name__}: {exc}"
                    LOGGER.exception("Recalculation attempt %s failed", job.attempts)
                    if job.attempts <= self.max_retries and self.retry_delay > 0:
                        # Returns early on shutdown.
                        self._stopping.wait(self.retry_delay)
                    continue

                LOGGER.info("Recalculation finished: %s", result.as_dict())
                return JobOutcome(
                    job_id=job.job_id,
                    year=job.year,
                    reason=job.reason,
                    attempts=job.attempts,
                    succeeded=True,
                    result=result,
                    finished_at=datetime.now(),
                )

            LOGGER.error("Recalculation gave up after %s attempts", job.attempts)
            return JobOutcome(
                job_id=job.job_id,
                year=job.year,
                reason=job.reason,
                attempts=job.attempts,
                succeeded=False,
                error=error,
                finished_at=datetime.now(),
            )
