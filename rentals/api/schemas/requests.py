from datetime import datetime

from pydantic import BaseModel, ConfigDict, condecimal, constr

from rentals.domain.entities.rating_aggregator import SubjectKind
from rentals.domain.entities.reservation_request import RequestStatus, ReservationRequest

Money = condecimal(max_digits=12, decimal_places=2)


class SubmitRequestRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    item_id: constr(strip_whitespace=True, min_length=1, max_length=64)
    requester_id: constr(strip_whitespace=True, min_length=1, max_length=128)
    start: datetime
    end: datetime
    notes: str | None = None


class DecisionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    accept: bool
    reason: constr(max_length=500) | None = None


class CompletionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    score: float
    subject_kind: SubjectKind = SubjectKind.ITEM
    author_id: str | None = None
    comment: str | None = None


class ExpireResponse(BaseModel):
    expired: int


class ReservationRequestResponse(BaseModel):
    id: str
    item_id: str
    requester_id: str
    owner_id: str
    start: datetime
    end: datetime
    rental_days: int
    unit_price: Money
    total_price: Money
    currency_code: str
    status: RequestStatus
    rejection_reason: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    decided_at: datetime | None = None
    cancelled_at: datetime | None = None
    item_rated: bool
    renter_rated: bool

    @classmethod
    def from_entity(cls, request: ReservationRequest) -> "ReservationRequestResponse":
        return cls(
            id=request.id,
            item_id=request.item_id,
            requester_id=request.requester_id,
            owner_id=request.owner_id,
            start=request.requested_range.start,
            end=request.requested_range.end,
            rental_days=request.rental_days,
            unit_price=request.unit_price.amount,
            total_price=request.computed_total.amount,
            currency_code=request.unit_price.currency_code,
            status=request.status,
            rejection_reason=request.rejection_reason,
            notes=request.notes,
            created_at=request.created_at,
            decided_at=request.decided_at,
            cancelled_at=request.cancelled_at,
            item_rated=request.item_rated,
            renter_rated=request.renter_rated,
        )
