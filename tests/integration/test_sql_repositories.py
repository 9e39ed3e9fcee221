"""
Integration tests for the SQL adapters on SQLite in-memory (aiosqlite).

Verifica que los repositorios SQL cumplen el mismo contrato que el store
in-memory: compare-and-swap por versión, zonas horarias UTC y el ciclo
completo del ledger dentro de transacciones reales.
"""

from decimal import Decimal

import pytest
import pytest_asyncio

from rentals.application.rental_ledger import RentalLedger
from rentals.domain.entities.availability_calendar import AvailabilityCalendar
from rentals.domain.entities.rating_aggregator import RatingAggregator, SubjectKind
from rentals.domain.entities.reservation_request import RequestStatus
from rentals.domain.errors import ConflictError, InvalidStateTransitionError, OptimisticLockError
from rentals.domain.value_objects.date_range import DateRange
from rentals.infrastructure.db.repositories import (
    ItemRepoSQL,
    RatingRepoSQL,
    ReservationRequestRepoSQL,
)
from rentals.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from tests.conftest import NOW, day


@pytest_asyncio.fixture
async def sql_ledger(db_session, clock, id_generator) -> RentalLedger:
    return RentalLedger(
        item_repo=ItemRepoSQL(db_session),
        request_repo=ReservationRequestRepoSQL(db_session),
        rating_repo=RatingRepoSQL(db_session),
        transaction_manager=SQLAlchemyTransactionManager(db_session),
        clock=clock,
        id_generator=id_generator,
    )


class TestItemRepoSQL:
    @pytest.mark.asyncio
    async def test_item_round_trip_keeps_utc_and_cents(self, sql_ledger):
        item = await sql_ledger.register_item(owner_id="owner-1", name="Yamaha P-45", price="79.90")
        fetched = await sql_ledger.get_item(item.id)
        assert fetched.price.amount == Decimal("79.90")
        assert fetched.price.currency_code == "BRL"
        assert fetched.created_at == NOW
        assert fetched.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_stale_calendar_save_fails(self, sql_ledger, db_session):
        item = await sql_ledger.register_item(owner_id="owner-1", name="Yamaha P-45", price="80")
        repo = ItemRepoSQL(db_session)
        tx = SQLAlchemyTransactionManager(db_session)

        async with tx.start():
            first = await repo.get_calendar(item.id)
            second = await repo.get_calendar(item.id)
            first.block("req-1", DateRange(start=day(1), end=day(2)))
            await repo.save_calendar(first)
            assert first.lock_version == 1

        second.block("req-2", DateRange(start=day(5), end=day(6)))
        with pytest.raises(OptimisticLockError) as exc_info:
            async with tx.start():
                await repo.save_calendar(second)
        assert exc_info.value.actual_version == 1

        calendar = await repo.get_calendar(item.id)
        assert [e.request_id for e in calendar.blocked_ranges()] == ["req-1"]
        assert calendar.blocked_ranges()[0].range.start == day(1)

    @pytest.mark.asyncio
    async def test_missing_item_calendar_is_none(self, db_session):
        assert await ItemRepoSQL(db_session).get_calendar("missing") is None

    @pytest.mark.asyncio
    async def test_save_calendar_of_missing_item_fails(self, db_session):
        with pytest.raises(OptimisticLockError):
            await ItemRepoSQL(db_session).save_calendar(AvailabilityCalendar(item_id="missing"))


class TestLedgerOnSQL:
    @pytest.mark.asyncio
    async def test_request_lifecycle(self, sql_ledger, clock):
        item = await sql_ledger.register_item(owner_id="owner-1", name="Gibson SG", price="50")
        a = await sql_ledger.submit_request(item.id, "renter-1", day(3), day(5))
        b = await sql_ledger.submit_request(item.id, "renter-2", day(4), day(6))
        assert a.computed_total.amount == Decimal("100.00")

        await sql_ledger.decide(a.id, accept=True)
        with pytest.raises(ConflictError):
            await sql_ledger.decide(b.id, accept=True)
        assert (await sql_ledger.get_request(b.id)).status == RequestStatus.PENDING

        stored = await sql_ledger.get_request(a.id)
        assert stored.status == RequestStatus.ACCEPTED
        assert stored.requested_range.start == day(3)
        assert stored.lock_version == 1

        await sql_ledger.cancel(a.id)
        assert await sql_ledger.check_availability(item.id, day(3), day(5))
        await sql_ledger.decide(b.id, accept=True)
        assert [e.request_id for e in (await sql_ledger.get_calendar(item.id)).blocked_ranges()] == [b.id]

    @pytest.mark.asyncio
    async def test_decide_twice_fails(self, sql_ledger):
        item = await sql_ledger.register_item(owner_id="owner-1", name="Gibson SG", price="50")
        request = await sql_ledger.submit_request(item.id, "renter-1", day(3), day(5))
        await sql_ledger.decide(request.id, accept=False, reason="Not available")
        with pytest.raises(InvalidStateTransitionError):
            await sql_ledger.decide(request.id, accept=True)
        assert (await sql_ledger.get_request(request.id)).rejection_reason == "Not available"

    @pytest.mark.asyncio
    async def test_ratings(self, sql_ledger, clock):
        item = await sql_ledger.register_item(owner_id="owner-1", name="Gibson SG", price="50")
        request = await sql_ledger.submit_request(item.id, "renter-1", day(1), day(2))
        await sql_ledger.decide(request.id, accept=True)
        clock.advance(days=3)

        snapshot = await sql_ledger.record_completion(request.id, 4.5)
        assert (snapshot.count, snapshot.mean) == (1, 4.5)
        repeat = await sql_ledger.record_completion(request.id, 1)
        assert repeat.count == 1

        renter = await sql_ledger.record_completion(request.id, 5, subject_kind=SubjectKind.USER)
        assert (renter.count, renter.mean) == (1, 5.0)

        events = await sql_ledger.list_rating_events(SubjectKind.ITEM, item.id)
        assert [e.score for e in events] == [4.5]
        assert events[0].created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_expire(self, sql_ledger, clock):
        item = await sql_ledger.register_item(owner_id="owner-1", name="Gibson SG", price="50")
        request = await sql_ledger.submit_request(item.id, "renter-1", day(1), day(2))
        clock.advance(days=3)
        assert await sql_ledger.expire_stale_requests() == 1
        assert (await sql_ledger.get_request(request.id)).status == RequestStatus.REJECTED


class TestRatingRepoSQL:
    @pytest.mark.asyncio
    async def test_stale_user_rating_save_fails(self, db_session):
        repo = RatingRepoSQL(db_session)
        first = await repo.get_aggregator(SubjectKind.USER, "user-1")
        second = RatingAggregator(subject_id="user-1", subject_kind=SubjectKind.USER)

        first.fold(5)
        await repo.save_aggregator(first)
        await db_session.commit()

        second.fold(1)
        with pytest.raises(OptimisticLockError):
            await repo.save_aggregator(second)
        await db_session.rollback()

        stored = await repo.get_aggregator(SubjectKind.USER, "user-1")
        assert (stored.count, stored.mean, stored.lock_version) == (1, 5.0, 1)

    @pytest.mark.asyncio
    async def test_stale_item_rating_save_fails(self, sql_ledger, db_session):
        item = await sql_ledger.register_item(owner_id="owner-1", name="Gibson SG", price="50")
        repo = RatingRepoSQL(db_session)
        first = await repo.get_aggregator(SubjectKind.ITEM, item.id)
        second = await repo.get_aggregator(SubjectKind.ITEM, item.id)

        first.fold(4)
        await repo.save_aggregator(first)
        await db_session.commit()

        second.fold(1)
        with pytest.raises(OptimisticLockError) as exc_info:
            await repo.save_aggregator(second)
        assert exc_info.value.actual_version == 1
        await db_session.rollback()

        stored = await repo.get_aggregator(SubjectKind.ITEM, item.id)
        assert (stored.count, stored.mean, stored.lock_version) == (1, 4.0, 1)
