from fastapi import APIRouter, Depends

from rentals.api.dependencies import get_ledger
from rentals.api.schemas.ratings import RatingEventResponse, RatingResponse
from rentals.application.rental_ledger import RentalLedger
from rentals.domain.entities.rating_aggregator import SubjectKind

router = APIRouter()


@router.get("/ratings/{subject_kind}/{subject_id}", response_model=RatingResponse)
async def get_rating(
    subject_kind: SubjectKind,
    subject_id: str,
    ledger: RentalLedger = Depends(get_ledger),
) -> RatingResponse:
    snapshot = await ledger.get_rating(subject_kind, subject_id)
    return RatingResponse.from_snapshot(subject_kind, subject_id, snapshot)


@router.get("/ratings/{subject_kind}/{subject_id}/events", response_model=list[RatingEventResponse])
async def list_rating_events(
    subject_kind: SubjectKind,
    subject_id: str,
    ledger: RentalLedger = Depends(get_ledger),
) -> list[RatingEventResponse]:
    events = await ledger.list_rating_events(subject_kind, subject_id)
    return [RatingEventResponse.from_entity(e) for e in events]
