"""Routes for editing grade and level criteria."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from levelup.core.logger import get_logger
from levelup.repositories import GradeCriteriaEntry, LevelCriteriaValues
from levelup.schemas import (
    GradeCriteriaItem,
    GradeCriteriaList,
    GradeCriteriaPayload,
    LevelCriteriaHistoryEntry,
    LevelCriteriaOverviewEntry,
    LevelCriteriaOverviewResponse,
    LevelCriteriaPayload,
    SaveResponse,
)
from levelup.services import CriteriaAdminService, SaveResult
from levelup.tasks import RecalculationQueue

from .dependencies import get_db_session, get_recalculation_queue

router = APIRouter(tags=["criteria"])
LOGGER = get_logger(__name__)


def get_criteria_admin_service(
    session: Session = Depends(get_db_session),
    queue: RecalculationQueue | None = Depends(get_recalculation_queue),
) -> CriteriaAdminService:
    return CriteriaAdminService(session, scheduler=queue)


def _save_response(result: SaveResult) -> SaveResponse:
    return SaveResponse(
        saved=result.saved,
        recalculation_year=result.recalculation_year,
        recalculation_queued=result.recalculation_queued,
    )


@router.get("/grade-criteria", response_model=GradeCriteriaList)
def list_grade_criteria(
    service: CriteriaAdminService = Depends(get_criteria_admin_service),
) -> GradeCriteriaList:
    entries = service.list_grade_criteria()
    return GradeCriteriaList(
        criteria=[
            GradeCriteriaItem(grade=entry.grade, year_range=entry.year_range, points=entry.points)
            for entry in entries
        ]
    )


@router.post("/grade-criteria", response_model=SaveResponse)
def save_grade_criteria(
    payload: GradeCriteriaPayload,
    service: CriteriaAdminService = Depends(get_criteria_admin_service),
) -> SaveResponse:
    entries = [
        GradeCriteriaEntry(grade=item.grade, year_range=item.year_range, points=item.points)
        for item in payload.criteria
    ]
    try:
        result = service.save_grade_criteria(entries)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _save_response(result)


@router.get("/settings/level-criteria", response_model=LevelCriteriaOverviewResponse)
def level_criteria_overview(
    year: int | None = Query(default=None),
    service: CriteriaAdminService = Depends(get_criteria_admin_service),
) -> LevelCriteriaOverviewResponse:
    overview = service.level_criteria_overview(year or date.today().year)
    return LevelCriteriaOverviewResponse(
        year=overview.year,
        criteria=[
            LevelCriteriaOverviewEntry(
                level=item.level,
                year=item.year,
                required_points=item.required_points,
                special_required_points=item.special_required_points,
                required_credits=item.required_credits,
                min_tenure=item.min_tenure,
            )
            for item in overview.criteria
        ],
        available_years=overview.available_years,
    )


@router.post("/settings/level-criteria", response_model=SaveResponse)
def save_level_criteria(
    payload: LevelCriteriaPayload,
    service: CriteriaAdminService = Depends(get_criteria_admin_service),
) -> SaveResponse:
    items = [
        LevelCriteriaValues(
            level=item.level,
            required_points=item.required_points,
            special_required_points=item.special_required_points,
            required_credits=item.required_credits,
            min_tenure=item.min_tenure,
        )
        for item in payload.criteria
    ]
    try:
        result = service.save_level_criteria(payload.year, items, changed_by=payload.changed_by)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _save_response(result)


@router.get("/settings/level-criteria/history", response_model=list[LevelCriteriaHistoryEntry])
def level_criteria_history(
    year: int | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    service: CriteriaAdminService = Depends(get_criteria_admin_service),
) -> list[LevelCriteriaHistoryEntry]:
    return [
        LevelCriteriaHistoryEntry(
            level=row.level,
            year=row.year,
            changed_by_name=row.changed_by_name,
            field=row.field,
            old_value=row.old_value,
            new_value=row.new_value,
            created_at=row.created_at,
        )
        for row in service.level_criteria_history(year=year, limit=limit)
    ]
