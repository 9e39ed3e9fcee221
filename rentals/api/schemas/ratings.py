from datetime import datetime

from pydantic import BaseModel

from rentals.domain.entities.rating_aggregator import RatingSnapshot, SubjectKind
from rentals.domain.entities.rating_event import RatingEvent


class RatingResponse(BaseModel):
    subject_kind: SubjectKind
    subject_id: str
    count: int
    mean: float

    @classmethod
    def from_snapshot(
        cls, subject_kind: SubjectKind, subject_id: str, snapshot: RatingSnapshot
    ) -> "RatingResponse":
        return cls(
            subject_kind=subject_kind,
            subject_id=subject_id,
            count=snapshot.count,
            mean=snapshot.mean,
        )


class RatingEventResponse(BaseModel):
    id: str
    subject_id: str
    subject_kind: SubjectKind
    score: float
    related_request_id: str
    author_id: str | None = None
    comment: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, event: RatingEvent) -> "RatingEventResponse":
        return cls(
            id=event.id,
            subject_id=event.subject_id,
            subject_kind=event.subject_kind,
            score=event.score,
            related_request_id=event.related_request_id,
            author_id=event.author_id,
            comment=event.comment,
            created_at=event.created_at,
        )
