"""
Typed codecs between domain entities and store documents.

Documents use the camelCase field names of the external document store.
Decoding never fills in defaults for required fields: a missing or
mistyped field raises RecordDecodeError.
"""

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from rentals.domain.entities.availability_calendar import AvailabilityCalendar, BlockedRange
from rentals.domain.entities.item import Item
from rentals.domain.entities.rating_aggregator import RatingAggregator, SubjectKind
from rentals.domain.entities.rating_event import RatingEvent
from rentals.domain.entities.reservation_request import RequestStatus, ReservationRequest
from rentals.domain.errors import DomainError, RecordDecodeError
from rentals.domain.value_objects.date_range import DateRange
from rentals.domain.value_objects.money import Money

DocumentT = TypeVar("DocumentT", bound=BaseModel)


class _Document(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class BlockedRangeDocument(_Document):
    start: datetime
    end: datetime
    request_id: str


class ItemDocument(_Document):
    owner_id: str
    name: str
    description: str | None = None
    category: str | None = None
    price: Decimal
    currency_code: str
    available: bool
    created_at: datetime
    unavailable_ranges: list[BlockedRangeDocument]
    rating_mean: float = Field(ge=0, le=5)
    rating_count: int = Field(ge=0)
    calendar_version: int = Field(ge=0)
    rating_version: int = Field(ge=0)


class UserRatingDocument(_Document):
    rating_mean: float = Field(ge=0, le=5)
    rating_count: int = Field(ge=0)
    rating_version: int = Field(ge=0)


class ReservationRequestDocument(_Document):
    item_id: str
    requester_id: str
    owner_id: str
    start_date: datetime
    end_date: datetime
    unit_price: Decimal
    total_price: Decimal
    currency_code: str
    status: RequestStatus
    rejection_reason: str | None = None
    notes: str | None = None
    created_at: datetime
    decided_at: datetime | None = None
    cancelled_at: datetime | None = None
    item_rated: bool
    renter_rated: bool
    lock_version: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_status_fields(self) -> "ReservationRequestDocument":
        if (self.status == RequestStatus.REJECTED) != (self.rejection_reason is not None):
            raise ValueError("rejectionReason must be present iff status is REJECTED")
        if (self.status == RequestStatus.PENDING) != (self.decided_at is None):
            raise ValueError("decidedAt must be present iff status is not PENDING")
        if (self.status == RequestStatus.CANCELLED) != (self.cancelled_at is not None):
            raise ValueError("cancelledAt must be present iff status is CANCELLED")
        return self


class RatingEventDocument(_Document):
    subject_id: str
    subject_kind: SubjectKind
    score: float = Field(ge=1, le=5)
    related_request_id: str
    author_id: str | None = None
    comment: str | None = None
    created_at: datetime


def _validate(model: type[DocumentT], record_type: str, record_id: str | None, data: Mapping[str, Any]) -> DocumentT:
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise RecordDecodeError(record_type, record_id, str(exc)) from exc


def _dump(document: BaseModel) -> dict[str, Any]:
    return document.model_dump(by_alias=True)


# === Items ===


def encode_new_item(item: Item) -> dict[str, Any]:
    """Full document for a freshly listed item: empty calendar, no ratings."""
    return _dump(
        ItemDocument(
            owner_id=item.owner_id,
            name=item.name,
            description=item.description,
            category=item.category,
            price=item.price.amount,
            currency_code=item.price.currency_code,
            available=item.available,
            created_at=item.created_at,
            unavailable_ranges=[],
            rating_mean=0.0,
            rating_count=0,
            calendar_version=0,
            rating_version=0,
        )
    )


def encode_item_listing(item: Item) -> dict[str, Any]:
    """Owner-editable fields only."""
    return {
        "name": item.name,
        "description": item.description,
        "category": item.category,
        "price": item.price.amount,
        "currencyCode": item.price.currency_code,
        "available": item.available,
    }


def decode_item(item_id: str, data: Mapping[str, Any]) -> Item:
    doc = _validate(ItemDocument, "item", item_id, data)
    try:
        price = Money(amount=doc.price, currency_code=doc.currency_code)
    except ValueError as exc:
        raise RecordDecodeError("item", item_id, str(exc)) from exc
    return Item(
        id=item_id,
        owner_id=doc.owner_id,
        name=doc.name,
        price=price,
        available=doc.available,
        description=doc.description,
        category=doc.category,
        created_at=doc.created_at,
    )


def encode_calendar(calendar: AvailabilityCalendar) -> list[dict[str, Any]]:
    return [
        _dump(BlockedRangeDocument(start=b.range.start, end=b.range.end, request_id=b.request_id))
        for b in calendar.blocked_ranges()
    ]


def decode_calendar(item_id: str, data: Mapping[str, Any]) -> AvailabilityCalendar:
    doc = _validate(ItemDocument, "item", item_id, data)
    try:
        blocked = [
            BlockedRange(request_id=r.request_id, range=DateRange(start=r.start, end=r.end))
            for r in doc.unavailable_ranges
        ]
        return AvailabilityCalendar.from_blocked(item_id, blocked, lock_version=doc.calendar_version)
    except DomainError as exc:
        raise RecordDecodeError("item", item_id, exc.message) from exc


def decode_item_rating(item_id: str, data: Mapping[str, Any]) -> RatingAggregator:
    doc = _validate(ItemDocument, "item", item_id, data)
    return RatingAggregator(
        subject_id=item_id,
        subject_kind=SubjectKind.ITEM,
        count=doc.rating_count,
        mean=doc.rating_mean,
        lock_version=doc.rating_version,
    )


# === User ratings ===


def encode_user_rating(aggregator: RatingAggregator) -> dict[str, Any]:
    return _dump(
        UserRatingDocument(
            rating_mean=aggregator.mean,
            rating_count=aggregator.count,
            rating_version=aggregator.lock_version,
        )
    )


def decode_user_rating(user_id: str, data: Mapping[str, Any]) -> RatingAggregator:
    doc = _validate(UserRatingDocument, "user_rating", user_id, data)
    return RatingAggregator(
        subject_id=user_id,
        subject_kind=SubjectKind.USER,
        count=doc.rating_count,
        mean=doc.rating_mean,
        lock_version=doc.rating_version,
    )


# === Reservation requests ===


def encode_request(request: ReservationRequest) -> dict[str, Any]:
    return _dump(
        ReservationRequestDocument(
            item_id=request.item_id,
            requester_id=request.requester_id,
            owner_id=request.owner_id,
            start_date=request.requested_range.start,
            end_date=request.requested_range.end,
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
            lock_version=request.lock_version,
        )
    )


def decode_request(request_id: str, data: Mapping[str, Any]) -> ReservationRequest:
    doc = _validate(ReservationRequestDocument, "reservation_request", request_id, data)
    try:
        requested_range = DateRange(start=doc.start_date, end=doc.end_date)
        unit_price = Money(amount=doc.unit_price, currency_code=doc.currency_code)
        total = Money(amount=doc.total_price, currency_code=doc.currency_code)
    except (DomainError, ValueError) as exc:
        raise RecordDecodeError("reservation_request", request_id, str(exc)) from exc
    return ReservationRequest(
        id=request_id,
        item_id=doc.item_id,
        requester_id=doc.requester_id,
        owner_id=doc.owner_id,
        requested_range=requested_range,
        unit_price=unit_price,
        computed_total=total,
        status=doc.status,
        rejection_reason=doc.rejection_reason,
        notes=doc.notes,
        created_at=doc.created_at,
        decided_at=doc.decided_at,
        cancelled_at=doc.cancelled_at,
        item_rated=doc.item_rated,
        renter_rated=doc.renter_rated,
        lock_version=doc.lock_version,
    )


# === Rating events ===


def encode_rating_event(event: RatingEvent) -> dict[str, Any]:
    return _dump(
        RatingEventDocument(
            subject_id=event.subject_id,
            subject_kind=event.subject_kind,
            score=event.score,
            related_request_id=event.related_request_id,
            author_id=event.author_id,
            comment=event.comment,
            created_at=event.created_at,
        )
    )


def decode_rating_event(event_id: str, data: Mapping[str, Any]) -> RatingEvent:
    doc = _validate(RatingEventDocument, "rating_event", event_id, data)
    return RatingEvent(
        id=event_id,
        subject_id=doc.subject_id,
        subject_kind=doc.subject_kind,
        score=doc.score,
        related_request_id=doc.related_request_id,
        created_at=doc.created_at,
        author_id=doc.author_id,
        comment=doc.comment,
    )
