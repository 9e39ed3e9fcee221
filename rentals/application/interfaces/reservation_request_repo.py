from typing import Sequence

from rentals.domain.entities.reservation_request import RequestStatus, ReservationRequest


class ReservationRequestRepo:
    async def get(self, request_id: str) -> ReservationRequest | None:
        raise NotImplementedError

    async def create(self, request: ReservationRequest) -> None:
        raise NotImplementedError

    async def save(self, request: ReservationRequest) -> None:
        """
        Compare-and-swap write on `request.lock_version`.

        Bumps `request.lock_version` on success.

        Raises:
            OptimisticLockError: the request changed since it was loaded.
        """
        raise NotImplementedError

    async def query(
        self,
        item_id: str | None = None,
        owner_id: str | None = None,
        requester_id: str | None = None,
        status: RequestStatus | None = None,
    ) -> Sequence[ReservationRequest]:
        """Equality query, ordered by creation time."""
        raise NotImplementedError
