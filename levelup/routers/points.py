"""Route serving the live point listing."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from levelup.models import Level
from levelup.schemas import EmployeePointEntry, PointListing
from levelup.services import PointsListingService

from .dependencies import get_db_session

router = APIRouter(prefix="/points", tags=["points"])


def get_points_listing_service(session: Session = Depends(get_db_session)) -> PointsListingService:
    return PointsListingService(session)


@router.get("", response_model=PointListing)
def list_points(
    base_year: int | None = Query(default=None),
    level: Level | None = Query(default=None),
    keyword: str | None = Query(default=None),
    is_met: bool | None = Query(default=None),
    page: int = Query(default=1),
    page_size: int = Query(default=20, le=100),
    service: PointsListingService = Depends(get_points_listing_service),
) -> PointListing:
    try:
        point_page = service.page_point_rows(
            page=page,
            page_size=page_size,
            base_year=base_year,
            level=level,
            keyword=keyword,
            is_met=is_met,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return PointListing(
        base_year=point_page.base_year,
        total=point_page.total,
        page=point_page.page,
        page_size=point_page.page_size,
        employees=[
            EmployeePointEntry(
                user_id=row.user_id,
                name=row.name,
                department=row.department,
                team=row.team,
                level=row.level,
                years_of_service=row.years_of_service,
                scores=row.scores,
                auto_filled_years=list(row.auto_filled_years),
                total_merit=row.total_merit,
                total_penalty=row.total_penalty,
                adjustment=row.adjustment,
                cumulative=row.cumulative,
                is_met=row.is_met,
                credit_score=row.credit_score,
                total_points=row.total_points,
            )
            for row in point_page.items
        ],
    )
