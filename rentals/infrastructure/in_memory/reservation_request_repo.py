from typing import Sequence

from rentals.application.interfaces.reservation_request_repo import ReservationRequestRepo
from rentals.domain.entities.reservation_request import RequestStatus, ReservationRequest
from rentals.domain.errors import OptimisticLockError
from rentals.infrastructure.documents import decode_request, encode_request
from rentals.infrastructure.in_memory.document_store import InMemoryDocumentStore

REQUESTS = "reservationRequests"


class InMemoryReservationRequestRepo(ReservationRequestRepo):
    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store

    async def get(self, request_id: str) -> ReservationRequest | None:
        doc = self._store.get(REQUESTS, request_id)
        if doc is None:
            return None
        return decode_request(request_id, doc)

    async def create(self, request: ReservationRequest) -> None:
        if not self._store.insert(REQUESTS, request.id, encode_request(request)):
            raise ValueError("Reservation request id already exists")

    async def save(self, request: ReservationRequest) -> None:
        data = encode_request(request)
        data["lockVersion"] = request.lock_version + 1
        applied = self._store.update(
            REQUESTS,
            request.id,
            data,
            expected={"lockVersion": request.lock_version},
        )
        if not applied:
            current = self._store.get(REQUESTS, request.id)
            raise OptimisticLockError(
                entity="reservation_request",
                entity_id=request.id,
                expected_version=request.lock_version,
                actual_version=current.get("lockVersion") if current else None,
            )
        request.lock_version += 1

    async def query(
        self,
        item_id: str | None = None,
        owner_id: str | None = None,
        requester_id: str | None = None,
        status: RequestStatus | None = None,
    ) -> Sequence[ReservationRequest]:
        rows = self._store.where(
            REQUESTS,
            itemId=item_id,
            ownerId=owner_id,
            requesterId=requester_id,
            status=status,
        )
        requests = [decode_request(doc_id, doc) for doc_id, doc in rows]
        return sorted(requests, key=lambda r: (r.created_at, r.id))
