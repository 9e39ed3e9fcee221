from typing import Sequence

from rentals.application.interfaces.rating_repo import RatingRepo
from rentals.domain.entities.rating_aggregator import RatingAggregator, SubjectKind
from rentals.domain.entities.rating_event import RatingEvent
from rentals.domain.errors import ItemNotFoundError, OptimisticLockError
from rentals.infrastructure.documents import (
    decode_item_rating,
    decode_rating_event,
    decode_user_rating,
    encode_rating_event,
    encode_user_rating,
)
from rentals.infrastructure.in_memory.document_store import InMemoryDocumentStore
from rentals.infrastructure.in_memory.item_repo import ITEMS

USER_RATINGS = "userRatings"
RATING_EVENTS = "ratingEvents"


class InMemoryRatingRepo(RatingRepo):
    """Item aggregates live on the item document; user aggregates in their own collection."""

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store

    async def get_aggregator(self, kind: SubjectKind, subject_id: str) -> RatingAggregator:
        if kind == SubjectKind.ITEM:
            doc = self._store.get(ITEMS, subject_id)
            if doc is None:
                raise ItemNotFoundError(subject_id)
            return decode_item_rating(subject_id, doc)

        doc = self._store.get(USER_RATINGS, subject_id)
        if doc is None:
            return RatingAggregator(subject_id=subject_id, subject_kind=SubjectKind.USER)
        return decode_user_rating(subject_id, doc)

    async def save_aggregator(self, aggregator: RatingAggregator) -> None:
        expected = aggregator.lock_version
        if aggregator.subject_kind == SubjectKind.ITEM:
            collection = ITEMS
            applied = self._store.update(
                ITEMS,
                aggregator.subject_id,
                {
                    "ratingMean": aggregator.mean,
                    "ratingCount": aggregator.count,
                    "ratingVersion": expected + 1,
                },
                expected={"ratingVersion": expected},
            )
        else:
            collection = USER_RATINGS
            data = encode_user_rating(aggregator)
            data["ratingVersion"] = expected + 1
            if expected == 0:
                applied = self._store.insert(USER_RATINGS, aggregator.subject_id, data)
            else:
                applied = self._store.update(
                    USER_RATINGS,
                    aggregator.subject_id,
                    data,
                    expected={"ratingVersion": expected},
                )

        if not applied:
            current = self._store.get(collection, aggregator.subject_id)
            raise OptimisticLockError(
                entity=f"{aggregator.subject_kind.value.lower()}_rating",
                entity_id=aggregator.subject_id,
                expected_version=expected,
                actual_version=current.get("ratingVersion") if current else None,
            )
        aggregator.lock_version += 1

    async def add_event(self, event: RatingEvent) -> None:
        if not self._store.insert(RATING_EVENTS, event.id, encode_rating_event(event)):
            raise ValueError("Rating event id already exists")

    async def list_events(self, kind: SubjectKind, subject_id: str) -> Sequence[RatingEvent]:
        rows = self._store.where(RATING_EVENTS, subjectKind=kind, subjectId=subject_id)
        events = [decode_rating_event(doc_id, doc) for doc_id, doc in rows]
        return sorted(events, key=lambda e: (e.created_at, e.id))
