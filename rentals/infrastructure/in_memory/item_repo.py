from typing import Sequence

from rentals.application.interfaces.item_repo import ItemRepo
from rentals.domain.entities.availability_calendar import AvailabilityCalendar
from rentals.domain.entities.item import Item
from rentals.domain.errors import ItemNotFoundError, OptimisticLockError
from rentals.infrastructure.documents import (
    decode_calendar,
    decode_item,
    encode_calendar,
    encode_item_listing,
    encode_new_item,
)
from rentals.infrastructure.in_memory.document_store import InMemoryDocumentStore

ITEMS = "items"


class InMemoryItemRepo(ItemRepo):
    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store

    async def get(self, item_id: str) -> Item | None:
        doc = self._store.get(ITEMS, item_id)
        if doc is None:
            return None
        return decode_item(item_id, doc)

    async def create(self, item: Item) -> None:
        if not self._store.insert(ITEMS, item.id, encode_new_item(item)):
            raise ValueError("Item id already exists")

    async def update_listing(self, item: Item) -> None:
        if not self._store.update(ITEMS, item.id, encode_item_listing(item)):
            raise ItemNotFoundError(item.id)

    async def list_by_owner(self, owner_id: str) -> Sequence[Item]:
        items = [decode_item(doc_id, doc) for doc_id, doc in self._store.where(ITEMS, ownerId=owner_id)]
        return sorted(items, key=lambda i: (i.created_at, i.id))

    async def get_calendar(self, item_id: str) -> AvailabilityCalendar | None:
        doc = self._store.get(ITEMS, item_id)
        if doc is None:
            return None
        return decode_calendar(item_id, doc)

    async def save_calendar(self, calendar: AvailabilityCalendar) -> None:
        applied = self._store.update(
            ITEMS,
            calendar.item_id,
            {
                "unavailableRanges": encode_calendar(calendar),
                "calendarVersion": calendar.lock_version + 1,
            },
            expected={"calendarVersion": calendar.lock_version},
        )
        if not applied:
            current = self._store.get(ITEMS, calendar.item_id)
            raise OptimisticLockError(
                entity="calendar",
                entity_id=calendar.item_id,
                expected_version=calendar.lock_version,
                actual_version=current.get("calendarVersion") if current else None,
            )
        calendar.lock_version += 1
