from typing import Any, Mapping, Sequence

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentals.application.interfaces.reservation_request_repo import ReservationRequestRepo
from rentals.domain.entities.reservation_request import RequestStatus, ReservationRequest
from rentals.domain.errors import OptimisticLockError
from rentals.domain.value_objects.date_range import DateRange
from rentals.domain.value_objects.money import Money
from rentals.infrastructure.db.tables import reservation_requests
from rentals.infrastructure.db.timestamps import as_utc


def _row_to_request(row: Mapping[str, Any]) -> ReservationRequest:
    return ReservationRequest(
        id=row["id"],
        item_id=row["item_id"],
        requester_id=row["requester_id"],
        owner_id=row["owner_id"],
        requested_range=DateRange(start=as_utc(row["start_at"]), end=as_utc(row["end_at"])),
        unit_price=Money(amount=row["unit_price"], currency_code=row["currency_code"]),
        computed_total=Money(amount=row["total_price"], currency_code=row["currency_code"]),
        status=RequestStatus(row["status"]),
        rejection_reason=row["rejection_reason"],
        notes=row["notes"],
        created_at=as_utc(row["created_at"]),
        decided_at=as_utc(row["decided_at"]),
        cancelled_at=as_utc(row["cancelled_at"]),
        item_rated=bool(row["item_rated"]),
        renter_rated=bool(row["renter_rated"]),
        lock_version=row["lock_version"],
    )


def _mutable_values(request: ReservationRequest) -> dict[str, Any]:
    return {
        "status": request.status.value,
        "rejection_reason": request.rejection_reason,
        "decided_at": request.decided_at,
        "cancelled_at": request.cancelled_at,
        "item_rated": request.item_rated,
        "renter_rated": request.renter_rated,
    }


class ReservationRequestRepoSQL(ReservationRequestRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, request_id: str) -> ReservationRequest | None:
        stmt = select(reservation_requests).where(reservation_requests.c.id == request_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        return _row_to_request(row)

    async def create(self, request: ReservationRequest) -> None:
        stmt = insert(reservation_requests).values(
            id=request.id,
            item_id=request.item_id,
            requester_id=request.requester_id,
            owner_id=request.owner_id,
            start_at=request.requested_range.start,
            end_at=request.requested_range.end,
            unit_price=request.unit_price.amount,
            total_price=request.computed_total.amount,
            currency_code=request.unit_price.currency_code,
            notes=request.notes,
            created_at=request.created_at,
            lock_version=request.lock_version,
            **_mutable_values(request),
        )
        await self._session.execute(stmt)

    async def save(self, request: ReservationRequest) -> None:
        stmt = (
            update(reservation_requests)
            .where(
                reservation_requests.c.id == request.id,
                reservation_requests.c.lock_version == request.lock_version,
            )
            .values(
                lock_version=reservation_requests.c.lock_version + 1,
                **_mutable_values(request),
            )
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            actual_stmt = select(reservation_requests.c.lock_version).where(
                reservation_requests.c.id == request.id
            )
            actual = (await self._session.execute(actual_stmt)).scalar()
            raise OptimisticLockError(
                entity="reservation_request",
                entity_id=request.id,
                expected_version=request.lock_version,
                actual_version=actual,
            )
        request.lock_version += 1

    async def query(
        self,
        item_id: str | None = None,
        owner_id: str | None = None,
        requester_id: str | None = None,
        status: RequestStatus | None = None,
    ) -> Sequence[ReservationRequest]:
        where_clause = []
        if item_id is not None:
            where_clause.append(reservation_requests.c.item_id == item_id)
        if owner_id is not None:
            where_clause.append(reservation_requests.c.owner_id == owner_id)
        if requester_id is not None:
            where_clause.append(reservation_requests.c.requester_id == requester_id)
        if status is not None:
            where_clause.append(reservation_requests.c.status == status.value)
        stmt = (
            select(reservation_requests)
            .where(*where_clause)
            .order_by(reservation_requests.c.created_at, reservation_requests.c.id)
        )
        result = await self._session.execute(stmt)
        return [_row_to_request(row) for row in result.mappings().all()]
