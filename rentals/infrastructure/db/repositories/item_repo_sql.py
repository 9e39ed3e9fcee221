from typing import Any, Mapping, Sequence

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentals.application.interfaces.item_repo import ItemRepo
from rentals.domain.entities.availability_calendar import AvailabilityCalendar, BlockedRange
from rentals.domain.entities.item import Item
from rentals.domain.errors import ItemNotFoundError, OptimisticLockError
from rentals.domain.value_objects.date_range import DateRange
from rentals.domain.value_objects.money import Money
from rentals.infrastructure.db.tables import item_unavailable_ranges, items
from rentals.infrastructure.db.timestamps import as_utc


def _row_to_item(row: Mapping[str, Any]) -> Item:
    return Item(
        id=row["id"],
        owner_id=row["owner_id"],
        name=row["name"],
        price=Money(amount=row["price"], currency_code=row["currency_code"]),
        available=bool(row["available"]),
        description=row["description"],
        category=row["category"],
        created_at=as_utc(row["created_at"]),
    )


class ItemRepoSQL(ItemRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, item_id: str) -> Item | None:
        stmt = select(items).where(items.c.id == item_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        return _row_to_item(row)

    async def create(self, item: Item) -> None:
        stmt = insert(items).values(
            id=item.id,
            owner_id=item.owner_id,
            name=item.name,
            description=item.description,
            category=item.category,
            price=item.price.amount,
            currency_code=item.price.currency_code,
            available=item.available,
            created_at=item.created_at,
            rating_mean=0.0,
            rating_count=0,
            calendar_version=0,
            rating_version=0,
        )
        await self._session.execute(stmt)

    async def update_listing(self, item: Item) -> None:
        stmt = (
            update(items)
            .where(items.c.id == item.id)
            .values(
                name=item.name,
                description=item.description,
                category=item.category,
                price=item.price.amount,
                currency_code=item.price.currency_code,
                available=item.available,
            )
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise ItemNotFoundError(item.id)

    async def list_by_owner(self, owner_id: str) -> Sequence[Item]:
        stmt = (
            select(items)
            .where(items.c.owner_id == owner_id)
            .order_by(items.c.created_at, items.c.id)
        )
        result = await self._session.execute(stmt)
        return [_row_to_item(row) for row in result.mappings().all()]

    async def get_calendar(self, item_id: str) -> AvailabilityCalendar | None:
        version_stmt = select(items.c.calendar_version).where(items.c.id == item_id)
        version = (await self._session.execute(version_stmt)).scalar()
        if version is None:
            return None

        ranges_stmt = (
            select(item_unavailable_ranges)
            .where(item_unavailable_ranges.c.item_id == item_id)
            .order_by(item_unavailable_ranges.c.start_at)
        )
        result = await self._session.execute(ranges_stmt)
        blocked = [
            BlockedRange(
                request_id=row["request_id"],
                range=DateRange(start=as_utc(row["start_at"]), end=as_utc(row["end_at"])),
            )
            for row in result.mappings().all()
        ]
        return AvailabilityCalendar.from_blocked(item_id, blocked, lock_version=version)

    async def save_calendar(self, calendar: AvailabilityCalendar) -> None:
        # The version bump takes the row lock; the range rows follow in the same transaction.
        stmt = (
            update(items)
            .where(
                items.c.id == calendar.item_id,
                items.c.calendar_version == calendar.lock_version,
            )
            .values(calendar_version=items.c.calendar_version + 1)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            actual_stmt = select(items.c.calendar_version).where(items.c.id == calendar.item_id)
            actual = (await self._session.execute(actual_stmt)).scalar()
            raise OptimisticLockError(
                entity="calendar",
                entity_id=calendar.item_id,
                expected_version=calendar.lock_version,
                actual_version=actual,
            )

        await self._session.execute(
            delete(item_unavailable_ranges).where(
                item_unavailable_ranges.c.item_id == calendar.item_id
            )
        )
        rows = [
            {
                "item_id": calendar.item_id,
                "request_id": b.request_id,
                "start_at": b.range.start,
                "end_at": b.range.end,
            }
            for b in calendar.blocked_ranges()
        ]
        if rows:
            await self._session.execute(insert(item_unavailable_ranges), rows)
        calendar.lock_version += 1
