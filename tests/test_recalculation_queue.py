"""Tests for the background recalculation queue."""
from __future__ import annotations

import threading

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from levelup.models import Base, Candidate, Level
from levelup.services import SelectionResult
from levelup.tasks import RecalculationQueue, build_recalculation_runner

from conftest import RecordBuilder


@pytest.fixture()
def make_queue():
    queues: list[RecalculationQueue] = []

    def factory(runner, **kwargs) -> RecalculationQueue:
        kwargs.setdefault("retry_delay", 0)
        queue = RecalculationQueue(runner, **kwargs)
        queues.append(queue)
        return queue

    yield factory
    for queue in queues:
        queue.shutdown()


def test_submit_returns_before_job_runs(make_queue) -> None:
    release = threading.Event()
    ran: list[int] = []

    def runner(year: int) -> SelectionResult:
        release.wait(timeout=5)
        ran.append(year)
        return SelectionResult(added=1, total=1)

    queue = make_queue(runner)
    job = queue.submit(2026, reason="level criteria updated")

    assert job.year == 2026
    assert ran == []
    release.set()
    queue.join()
    assert ran == [2026]
    outcome = queue.history[-1]
    assert outcome.succeeded
    assert outcome.result == SelectionResult(added=1, total=1)
    assert outcome.reason == "level criteria updated"


def test_failed_job_is_retried_then_recorded(make_queue) -> None:
    calls: list[int] = []

    def runner(year: int) -> SelectionResult:
        calls.append(year)
        raise RuntimeError("database unavailable")

    queue = make_queue(runner, max_retries=2)
    queue.submit(2026)
    queue.join()

    assert calls == [2026, 2026, 2026]
    outcome = queue.history[-1]
    assert not outcome.succeeded
    assert outcome.attempts == 3
    assert "database unavailable" in outcome.error


def test_retry_recovers_from_transient_failure(make_queue) -> None:
    attempts = {"count": 0}

    def runner(year: int) -> SelectionResult:
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise RuntimeError("deadlock")
        return SelectionResult()

    queue = make_queue(runner, max_retries=1)
    queue.submit(2026)
    queue.join()

    assert queue.history[-1].succeeded
    assert queue.history[-1].attempts == 2


def test_jobs_run_in_submission_order(make_queue) -> None:
    seen: list[int] = []
    queue = make_queue(lambda year: seen.append(year) or SelectionResult())

    for year in (2024, 2025, 2026):
        queue.submit(year)
    queue.join()

    assert seen == [2024, 2025, 2026]
    assert [outcome.job_id for outcome in queue.history] == [1, 2, 3]


def test_submit_after_shutdown_is_dropped(make_queue) -> None:
    seen: list[int] = []
    queue = make_queue(lambda year: seen.append(year) or SelectionResult())
    queue.start()
    queue.shutdown()

    queue.submit(2026)

    assert seen == []
    assert not queue.running


def test_runner_recalculates_in_its_own_session() -> None:
    engine = create_engine(
        "sqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, future=True)

    with factory() as session:
        records = RecordBuilder(session)
        records.grade_table()
        records.level_criteria(Level.L3, 2026, required_points=10, min_tenure=2)
        employee = records.employee("Kim", level=Level.L2, years_of_service=3)
        records.grades(employee, {2023: "A", 2024: "B", 2025: "S"})
        records.credit(employee, 2025, 5)
        session.commit()
        employee_id = employee.id

    queue = RecalculationQueue(build_recalculation_runner(factory), retry_delay=0)
    try:
        queue.submit(2026)
        queue.join()
    finally:
        queue.shutdown()

    assert queue.history[-1].succeeded
    with factory() as session:
        candidate = session.scalars(select(Candidate)).one()
        assert candidate.user_id == employee_id
        assert candidate.year == 2026
    engine.dispose()
