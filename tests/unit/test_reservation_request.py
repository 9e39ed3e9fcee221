from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from rentals.domain.entities.availability_calendar import AvailabilityCalendar
from rentals.domain.entities.rating_aggregator import SubjectKind
from rentals.domain.entities.reservation_request import (
    ALLOWED_TRANSITIONS,
    RequestStatus,
    ReservationRequest,
)
from rentals.domain.errors import ConflictError, InvalidPriceError, InvalidStateTransitionError
from rentals.domain.value_objects.date_range import DateRange
from rentals.domain.value_objects.money import Money

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_request(request_id: str = "req-1", start: int = 3, end: int = 5, price: str = "50.00") -> ReservationRequest:
    return ReservationRequest.create(
        request_id=request_id,
        item_id="item-1",
        requester_id="renter-1",
        owner_id="owner-1",
        requested_range=DateRange(start=NOW + timedelta(days=start), end=NOW + timedelta(days=end)),
        unit_price=Money.of(price, "BRL"),
        created_at=NOW,
    )


class TestCreate:
    def test_create_is_pending_with_total(self):
        request = make_request()
        assert request.status == RequestStatus.PENDING
        assert request.is_pending
        assert request.rental_days == 2
        assert request.computed_total.amount == Decimal("100.00")
        assert request.decided_at is None

    def test_partial_day_is_charged_as_full_day(self):
        request = ReservationRequest.create(
            request_id="req-1",
            item_id="item-1",
            requester_id="renter-1",
            owner_id="owner-1",
            requested_range=DateRange(start=NOW, end=NOW + timedelta(hours=30)),
            unit_price=Money.of("40", "BRL"),
            created_at=NOW,
        )
        assert request.computed_total.amount == Decimal("80.00")

    def test_zero_price_fails(self):
        with pytest.raises(InvalidPriceError):
            make_request(price="0")


class TestTransitions:
    """Tabla de transiciones PENDING -> ACCEPTED/REJECTED, ACCEPTED -> CANCELLED."""

    def test_transition_table(self):
        assert ALLOWED_TRANSITIONS[RequestStatus.PENDING] == {RequestStatus.ACCEPTED, RequestStatus.REJECTED}
        assert ALLOWED_TRANSITIONS[RequestStatus.ACCEPTED] == {RequestStatus.CANCELLED}
        assert not ALLOWED_TRANSITIONS[RequestStatus.REJECTED]
        assert not ALLOWED_TRANSITIONS[RequestStatus.CANCELLED]

    def test_accept_blocks_calendar(self):
        request = make_request()
        calendar = AvailabilityCalendar(item_id="item-1")
        request.accept(calendar, NOW)
        assert request.status == RequestStatus.ACCEPTED
        assert request.decided_at == NOW
        assert calendar.is_blocked_by("req-1")

    def test_accept_conflict_keeps_pending(self):
        calendar = AvailabilityCalendar(item_id="item-1")
        make_request("req-a").accept(calendar, NOW)
        request = make_request("req-b", start=4, end=6)
        with pytest.raises(ConflictError):
            request.accept(calendar, NOW)
        assert request.status == RequestStatus.PENDING
        assert request.decided_at is None

    def test_reject_sets_reason(self):
        request = make_request()
        request.reject("Instrument under repair", NOW)
        assert request.status == RequestStatus.REJECTED
        assert request.rejection_reason == "Instrument under repair"

    def test_reject_without_reason_stores_empty_string(self):
        request = make_request()
        request.reject(None, NOW)
        assert request.rejection_reason == ""

    @pytest.mark.parametrize("first", ["accept", "reject"])
    def test_decided_request_cannot_be_decided_again(self, first):
        request = make_request()
        calendar = AvailabilityCalendar(item_id="item-1")
        if first == "accept":
            request.accept(calendar, NOW)
        else:
            request.reject("no", NOW)

        with pytest.raises(InvalidStateTransitionError):
            request.accept(calendar, NOW)
        with pytest.raises(InvalidStateTransitionError):
            request.reject("again", NOW)

    def test_cancel_accepted_frees_calendar(self):
        request = make_request()
        calendar = AvailabilityCalendar(item_id="item-1")
        request.accept(calendar, NOW)
        assert request.cancel(calendar, NOW) is True
        assert request.status == RequestStatus.CANCELLED
        assert request.cancelled_at == NOW
        assert len(calendar) == 0

    def test_cancel_twice_is_noop(self):
        request = make_request()
        calendar = AvailabilityCalendar(item_id="item-1")
        request.accept(calendar, NOW)
        request.cancel(calendar, NOW)
        assert request.cancel(calendar, NOW + timedelta(hours=1)) is False
        assert request.cancelled_at == NOW

    @pytest.mark.parametrize("status", [RequestStatus.PENDING, RequestStatus.REJECTED])
    def test_cancel_not_accepted_fails(self, status):
        request = make_request()
        if status == RequestStatus.REJECTED:
            request.reject("no", NOW)
        with pytest.raises(InvalidStateTransitionError):
            request.cancel(AvailabilityCalendar(item_id="item-1"), NOW)


class TestCompletionHelpers:
    def test_has_ended_uses_exclusive_end(self):
        request = make_request(start=0, end=1)
        end = request.requested_range.end
        assert not request.has_ended(end - timedelta(seconds=1))
        assert request.has_ended(end)

    def test_has_ended_accepts_naive_now(self):
        request = make_request(start=0, end=1)
        assert request.has_ended(datetime(2030, 1, 1))

    def test_rating_flags_are_per_kind(self):
        request = make_request()
        request.mark_rated(SubjectKind.ITEM)
        assert request.is_rated(SubjectKind.ITEM)
        assert not request.is_rated(SubjectKind.USER)
