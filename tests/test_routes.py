"""Smoke tests for the HTTP routes."""
from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from levelup.main import create_app
from levelup.models import Base, CandidateSource, Level, PromotionType
from levelup.repositories import CandidateListingRow, CandidateRow
from levelup.routers.candidates import get_auto_select_service, get_candidate_service
from levelup.routers.dependencies import get_recalculation_queue
from levelup.routers.points import get_points_listing_service
from levelup.services import EmployeePointRow, PointPage, SelectionResult


class _StubAutoSelectService:
    def __init__(self) -> None:
        self.years: list[int] = []

    def auto_select_candidates(self, year: int) -> SelectionResult:
        self.years.append(year)
        return SelectionResult(added=2, total=3, updated=1)


class _StubCandidateService:
    def list_candidates(self, year, *, review_target=None, promotion_type=None):
        candidate = CandidateRow(
            candidate_id=7,
            user_id=3,
            year=year,
            point_met=True,
            credit_met=True,
            promotion_type=PromotionType.NORMAL,
            is_review_target=False,
            source=CandidateSource.AUTO,
        )
        return [
            CandidateListingRow(
                candidate=candidate, name="Kim", department="Engineering", team="Platform", level=Level.L2
            )
        ]


class _StubPointsListingService:
    def page_point_rows(self, *, page, page_size, base_year=None, level=None, keyword=None, is_met=None):
        row = EmployeePointRow(
            user_id=3,
            name="Kim",
            department="Engineering",
            team="Platform",
            level=Level.L2,
            years_of_service=3,
            scores={2025: 4.0, 2026: None},
            cumulative=11,
            is_met=True,
            credit_score=5,
        )
        return PointPage(items=[row], total=1, page=1, page_size=page_size, base_year=base_year or 2026)


class _RecordingQueue:
    def __init__(self) -> None:
        self.submitted: list[int] = []

    def submit(self, year: int, *, reason: str = "") -> None:
        self.submitted.append(year)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, future=True)
    engine.dispose()


@pytest.fixture()
def app(session_factory):
    return create_app(session_factory=session_factory)


def test_auto_select_returns_counts(app) -> None:
    stub = _StubAutoSelectService()
    app.dependency_overrides[get_auto_select_service] = lambda: stub

    response = TestClient(app).post("/candidates/auto-select", json={"year": 2026})

    assert response.status_code == 200
    assert response.json() == {"year": 2026, "added": 2, "total": 3, "updated": 1, "failed": 0}
    assert stub.years == [2026]


def test_auto_select_defaults_to_current_year(app) -> None:
    stub = _StubAutoSelectService()
    app.dependency_overrides[get_auto_select_service] = lambda: stub

    response = TestClient(app).post("/candidates/auto-select")

    assert response.status_code == 200
    assert stub.years == [date.today().year]


def test_candidate_listing(app) -> None:
    app.dependency_overrides[get_candidate_service] = lambda: _StubCandidateService()

    response = TestClient(app).get("/candidates", params={"year": 2026})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["candidates"][0]["name"] == "Kim"
    assert body["candidates"][0]["promotion_type"] == "normal"
    assert body["candidates"][0]["source"] == "auto"


def test_points_listing(app) -> None:
    app.dependency_overrides[get_points_listing_service] = lambda: _StubPointsListingService()

    response = TestClient(app).get("/points", params={"base_year": 2026, "page_size": 10})

    assert response.status_code == 200
    body = response.json()
    assert body["page_size"] == 10
    employee = body["employees"][0]
    assert employee["cumulative"] == 11
    assert employee["total_points"] == 16
    assert employee["scores"] == {"2025": 4.0, "2026": None}


def test_grade_criteria_round_trip_queues_recalculation(app) -> None:
    queue = _RecordingQueue()
    app.dependency_overrides[get_recalculation_queue] = lambda: queue
    client = TestClient(app)

    response = client.post(
        "/grade-criteria",
        json={"criteria": [{"grade": " s ", "year_range": "2025", "points": 4}]},
    )

    assert response.status_code == 200
    assert response.json()["recalculation_queued"] is True
    assert queue.submitted == [date.today().year]
    listed = client.get("/grade-criteria").json()
    assert listed == {"criteria": [{"grade": "S", "year_range": "2025", "points": 4.0}]}


@pytest.mark.parametrize(
    "payload",
    [
        {"criteria": []},
        {"criteria": [{"grade": "S", "year_range": "2025-2021", "points": 4}]},
        {"criteria": [{"grade": "S", "year_range": "last year", "points": 4}]},
        {"criteria": [{"grade": "  ", "year_range": "2025", "points": 4}]},
    ],
)
def test_invalid_grade_criteria_rejected(app, payload) -> None:
    response = TestClient(app).post("/grade-criteria", json=payload)

    assert response.status_code == 422


def test_level_criteria_save_and_overview(app) -> None:
    queue = _RecordingQueue()
    app.dependency_overrides[get_recalculation_queue] = lambda: queue
    client = TestClient(app)

    response = client.post(
        "/settings/level-criteria",
        json={
            "year": 2027,
            "changed_by": "HR Admin",
            "criteria": [{"level": "L3", "required_points": 10, "min_tenure": 2}],
        },
    )

    assert response.status_code == 200
    assert queue.submitted == [2027]
    overview = client.get("/settings/level-criteria", params={"year": 2027}).json()
    assert len(overview["criteria"]) == 6
    assert overview["available_years"] == [2027]
    l3 = next(item for item in overview["criteria"] if item["level"] == "L3")
    assert l3["required_points"] == 10
    history = client.get("/settings/level-criteria/history", params={"year": 2027}).json()
    assert {entry["field"] for entry in history} == {
        "required_points",
        "special_required_points",
        "required_credits",
        "min_tenure",
    }


def test_startup_starts_and_shutdown_stops_worker(app) -> None:
    with TestClient(app):
        queue = app.state.recalculation_queue
        assert queue is not None
        assert queue.running

    assert app.state.recalculation_queue is None
    assert not queue.running
