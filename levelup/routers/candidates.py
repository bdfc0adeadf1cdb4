"""Routes for running and reading candidate selection."""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from levelup.core.logger import get_logger
from levelup.models import PromotionType
from levelup.schemas import AutoSelectRequest, CandidateEntry, CandidateList, SelectionSummary
from levelup.services import AutoSelectService, CandidateService

from .dependencies import get_db_session

router = APIRouter(prefix="/candidates", tags=["candidates"])
LOGGER = get_logger(__name__)


def get_auto_select_service(session: Session = Depends(get_db_session)) -> AutoSelectService:
    return AutoSelectService(session)


def get_candidate_service(session: Session = Depends(get_db_session)) -> CandidateService:
    return CandidateService(session)


@router.post("/auto-select", response_model=SelectionSummary)
def run_auto_select(
    payload: AutoSelectRequest | None = Body(default=None),
    service: AutoSelectService = Depends(get_auto_select_service),
) -> SelectionSummary:
    year = (payload.year if payload else None) or date.today().year
    result = service.auto_select_candidates(year)
    return SelectionSummary(year=year, **result.as_dict())


@router.get("", response_model=CandidateList)
def list_candidates(
    year: int | None = Query(default=None),
    review_target: bool | None = Query(default=None),
    promotion_type: PromotionType | None = Query(default=None),
    service: CandidateService = Depends(get_candidate_service),
) -> CandidateList:
    year = year or date.today().year
    rows = service.list_candidates(year, review_target=review_target, promotion_type=promotion_type)
    candidates = [
        CandidateEntry(
            candidate_id=row.candidate.candidate_id,
            user_id=row.candidate.user_id,
            name=row.name,
            department=row.department,
            team=row.team,
            level=row.level,
            year=row.candidate.year,
            point_met=row.candidate.point_met,
            credit_met=row.candidate.credit_met,
            promotion_type=row.candidate.promotion_type,
            is_review_target=row.candidate.is_review_target,
            source=row.candidate.source,
        )
        for row in rows
    ]
    return CandidateList(year=year, total=len(candidates), candidates=candidates)
