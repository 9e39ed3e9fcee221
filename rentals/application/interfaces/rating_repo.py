from typing import Sequence

from rentals.domain.entities.rating_aggregator import RatingAggregator, SubjectKind
from rentals.domain.entities.rating_event import RatingEvent


class RatingRepo:
    async def get_aggregator(self, kind: SubjectKind, subject_id: str) -> RatingAggregator:
        """Returns the stored aggregate, or an empty one (count=0, version 0)."""
        raise NotImplementedError

    async def save_aggregator(self, aggregator: RatingAggregator) -> None:
        """
        Compare-and-swap write on `aggregator.lock_version`.

        Raises:
            OptimisticLockError: another fold landed first.
        """
        raise NotImplementedError

    async def add_event(self, event: RatingEvent) -> None:
        raise NotImplementedError

    async def list_events(self, kind: SubjectKind, subject_id: str) -> Sequence[RatingEvent]:
        raise NotImplementedError
