from rentals.infrastructure.in_memory.document_store import InMemoryDocumentStore
from rentals.infrastructure.in_memory.item_repo import InMemoryItemRepo
from rentals.infrastructure.in_memory.rating_repo import InMemoryRatingRepo
from rentals.infrastructure.in_memory.reservation_request_repo import (
    InMemoryReservationRequestRepo,
)
from rentals.infrastructure.in_memory.transaction_manager import InMemoryTransactionManager

__all__ = [
    "InMemoryDocumentStore",
    "InMemoryItemRepo",
    "InMemoryRatingRepo",
    "InMemoryReservationRequestRepo",
    "InMemoryTransactionManager",
]
