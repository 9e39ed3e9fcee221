from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from rentals.domain.entities.availability_calendar import AvailabilityCalendar
from rentals.domain.entities.item import Item
from rentals.domain.entities.reservation_request import RequestStatus, ReservationRequest
from rentals.domain.errors import RecordDecodeError
from rentals.domain.value_objects.date_range import DateRange
from rentals.domain.value_objects.money import Money
from rentals.infrastructure.documents import (
    decode_calendar,
    decode_item,
    decode_item_rating,
    decode_request,
    decode_user_rating,
    encode_new_item,
    encode_request,
)

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def item_doc() -> dict:
    item = Item(
        id="item-1",
        owner_id="owner-1",
        name="Fender Stratocaster",
        price=Money.of("45.00", "BRL"),
        category="guitar",
        created_at=NOW,
    )
    return encode_new_item(item)


@pytest.fixture
def request_doc() -> dict:
    request = ReservationRequest.create(
        request_id="req-1",
        item_id="item-1",
        requester_id="renter-1",
        owner_id="owner-1",
        requested_range=DateRange(start=NOW, end=NOW + timedelta(days=2)),
        unit_price=Money.of("45.00", "BRL"),
        created_at=NOW,
    )
    return encode_request(request)


class TestItemDocument:
    def test_new_item_uses_camel_case(self, item_doc):
        assert item_doc["ownerId"] == "owner-1"
        assert item_doc["unavailableRanges"] == []
        assert item_doc["calendarVersion"] == 0
        assert item_doc["ratingCount"] == 0

    def test_decode_item(self, item_doc):
        item = decode_item("item-1", item_doc)
        assert item.name == "Fender Stratocaster"
        assert item.price.amount == Decimal("45.00")
        assert item.available is True

    def test_decode_calendar(self, item_doc):
        item_doc["unavailableRanges"] = [
            {"start": NOW + timedelta(days=3), "end": NOW + timedelta(days=4), "requestId": "req-9"}
        ]
        item_doc["calendarVersion"] = 3
        calendar = decode_calendar("item-1", item_doc)
        assert isinstance(calendar, AvailabilityCalendar)
        assert calendar.lock_version == 3
        assert calendar.is_blocked_by("req-9")

    def test_decode_item_rating(self, item_doc):
        item_doc.update({"ratingMean": 4.5, "ratingCount": 2, "ratingVersion": 2})
        aggregator = decode_item_rating("item-1", item_doc)
        assert aggregator.count == 2
        assert aggregator.mean == 4.5
        assert aggregator.lock_version == 2

    def test_missing_field_fails_fast(self, item_doc):
        del item_doc["price"]
        with pytest.raises(RecordDecodeError) as exc_info:
            decode_item("item-1", item_doc)
        assert exc_info.value.code == "RECORD_DECODE_ERROR"
        assert exc_info.value.record_id == "item-1"

    def test_mistyped_field_fails_fast(self, item_doc):
        item_doc["ratingCount"] = "many"
        with pytest.raises(RecordDecodeError):
            decode_item_rating("item-1", item_doc)

    def test_unknown_field_fails_fast(self, item_doc):
        item_doc["colour"] = "sunburst"
        with pytest.raises(RecordDecodeError):
            decode_item("item-1", item_doc)

    def test_overlapping_stored_ranges_fail(self, item_doc):
        item_doc["unavailableRanges"] = [
            {"start": NOW, "end": NOW + timedelta(days=3), "requestId": "a"},
            {"start": NOW + timedelta(days=1), "end": NOW + timedelta(days=4), "requestId": "b"},
        ]
        with pytest.raises(RecordDecodeError):
            decode_calendar("item-1", item_doc)

    def test_mean_out_of_range_fails(self, item_doc):
        item_doc["ratingMean"] = 7.0
        with pytest.raises(RecordDecodeError):
            decode_item_rating("item-1", item_doc)


class TestRequestDocument:
    def test_decode_pending(self, request_doc):
        request = decode_request("req-1", request_doc)
        assert request.status == RequestStatus.PENDING
        assert request.computed_total.amount == Decimal("90.00")
        assert request.requested_range.start == NOW

    def test_rejected_without_reason_fails(self, request_doc):
        request_doc.update({"status": "REJECTED", "decidedAt": NOW})
        with pytest.raises(RecordDecodeError):
            decode_request("req-1", request_doc)

    def test_pending_with_decided_at_fails(self, request_doc):
        request_doc["decidedAt"] = NOW
        with pytest.raises(RecordDecodeError):
            decode_request("req-1", request_doc)

    def test_cancelled_without_cancelled_at_fails(self, request_doc):
        request_doc.update({"status": "CANCELLED", "decidedAt": NOW})
        with pytest.raises(RecordDecodeError):
            decode_request("req-1", request_doc)

    def test_unknown_status_fails(self, request_doc):
        request_doc["status"] = "EXPIRED"
        with pytest.raises(RecordDecodeError):
            decode_request("req-1", request_doc)

    def test_inverted_range_fails(self, request_doc):
        request_doc["endDate"] = NOW - timedelta(days=1)
        with pytest.raises(RecordDecodeError):
            decode_request("req-1", request_doc)


class TestUserRatingDocument:
    def test_decode_user_rating(self):
        aggregator = decode_user_rating("user-1", {"ratingMean": 3.5, "ratingCount": 4, "ratingVersion": 4})
        assert aggregator.count == 4

    def test_missing_count_fails(self):
        with pytest.raises(RecordDecodeError):
            decode_user_rating("user-1", {"ratingMean": 3.5, "ratingVersion": 1})
