from fastapi import APIRouter, Depends, Query, status

from rentals.api.dependencies import get_ledger
from rentals.api.schemas.ratings import RatingResponse
from rentals.api.schemas.requests import (
    CompletionRequest,
    DecisionRequest,
    ExpireResponse,
    ReservationRequestResponse,
    SubmitRequestRequest,
)
from rentals.application.rental_ledger import RentalLedger
from rentals.domain.entities.rating_aggregator import SubjectKind
from rentals.domain.entities.reservation_request import RequestStatus

router = APIRouter()


@router.post(
    "/requests",
    response_model=ReservationRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_request(
    payload: SubmitRequestRequest,
    ledger: RentalLedger = Depends(get_ledger),
) -> ReservationRequestResponse:
    request = await ledger.submit_request(
        item_id=payload.item_id,
        requester_id=payload.requester_id,
        start=payload.start,
        end=payload.end,
        notes=payload.notes,
    )
    return ReservationRequestResponse.from_entity(request)


@router.post("/requests/expire", response_model=ExpireResponse)
async def expire_stale_requests(
    owner_id: str | None = Query(default=None),
    ledger: RentalLedger = Depends(get_ledger),
) -> ExpireResponse:
    """Reject every pending request whose period is already over."""
    return ExpireResponse(expired=await ledger.expire_stale_requests(owner_id=owner_id))


@router.get("/requests/{request_id}", response_model=ReservationRequestResponse)
async def get_request(request_id: str, ledger: RentalLedger = Depends(get_ledger)) -> ReservationRequestResponse:
    return ReservationRequestResponse.from_entity(await ledger.get_request(request_id))


@router.post("/requests/{request_id}/decision", response_model=ReservationRequestResponse)
async def decide_request(
    request_id: str,
    payload: DecisionRequest,
    ledger: RentalLedger = Depends(get_ledger),
) -> ReservationRequestResponse:
    """
    Owner accepts or rejects a pending request.

    Accepting a period that is no longer free answers 409 and leaves the
    request pending.
    """
    request = await ledger.decide(request_id, accept=payload.accept, reason=payload.reason)
    return ReservationRequestResponse.from_entity(request)


@router.post("/requests/{request_id}/cancel", response_model=ReservationRequestResponse)
async def cancel_request(
    request_id: str,
    ledger: RentalLedger = Depends(get_ledger),
) -> ReservationRequestResponse:
    return ReservationRequestResponse.from_entity(await ledger.cancel(request_id))


@router.post("/requests/{request_id}/completion", response_model=RatingResponse)
async def record_completion(
    request_id: str,
    payload: CompletionRequest,
    ledger: RentalLedger = Depends(get_ledger),
) -> RatingResponse:
    snapshot = await ledger.record_completion(
        request_id,
        score=payload.score,
        subject_kind=payload.subject_kind,
        author_id=payload.author_id,
        comment=payload.comment,
    )
    request = await ledger.get_request(request_id)
    subject_id = request.item_id if payload.subject_kind == SubjectKind.ITEM else request.requester_id
    return RatingResponse.from_snapshot(payload.subject_kind, subject_id, snapshot)


@router.get("/owners/{owner_id}/requests", response_model=list[ReservationRequestResponse])
async def list_owner_requests(
    owner_id: str,
    request_status: RequestStatus | None = Query(default=None, alias="status"),
    ledger: RentalLedger = Depends(get_ledger),
) -> list[ReservationRequestResponse]:
    requests = await ledger.list_requests_for_owner(owner_id, status=request_status)
    return [ReservationRequestResponse.from_entity(r) for r in requests]


@router.get("/users/{requester_id}/requests", response_model=list[ReservationRequestResponse])
async def list_requester_requests(
    requester_id: str,
    request_status: RequestStatus | None = Query(default=None, alias="status"),
    ledger: RentalLedger = Depends(get_ledger),
) -> list[ReservationRequestResponse]:
    requests = await ledger.list_requests_for_requester(requester_id, status=request_status)
    return [ReservationRequestResponse.from_entity(r) for r in requests]
