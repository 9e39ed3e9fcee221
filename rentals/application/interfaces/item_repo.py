from typing import Sequence

from rentals.domain.entities.availability_calendar import AvailabilityCalendar
from rentals.domain.entities.item import Item


class ItemRepo:
    async def get(self, item_id: str) -> Item | None:
        raise NotImplementedError

    async def create(self, item: Item) -> None:
        raise NotImplementedError

    async def update_listing(self, item: Item) -> None:
        """Persists owner-editable listing fields (name, price, available, ...)."""
        raise NotImplementedError

    async def list_by_owner(self, owner_id: str) -> Sequence[Item]:
        raise NotImplementedError

    async def get_calendar(self, item_id: str) -> AvailabilityCalendar | None:
        raise NotImplementedError

    async def save_calendar(self, calendar: AvailabilityCalendar) -> None:
        """
        Compare-and-swap write of the blocked ranges.

        Succeeds only if the stored calendar version still equals
        `calendar.lock_version`; bumps `calendar.lock_version` on success.

        Raises:
            OptimisticLockError: the calendar changed since it was loaded.
        """
        raise NotImplementedError
