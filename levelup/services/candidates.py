"""Read access to stored candidate verdicts."""
from __future__ import annotations

from sqlalchemy.orm import Session

from levelup.models import PromotionType
from levelup.repositories import CandidateListingRow, PromotionRepository


class CandidateService:
    def __init__(self, session: Session, repository: PromotionRepository | None = None) -> None:
        self._repository = repository or PromotionRepository(session)

    def list_candidates(
        self,
        year: int,
        *,
        review_target: bool | None = None,
        promotion_type: PromotionType | None = None,
    ) -> list[CandidateListingRow]:
        return self._repository.list_candidates(
            year, review_target=review_target, promotion_type=promotion_type
        )
