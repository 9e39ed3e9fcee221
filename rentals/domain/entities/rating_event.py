"""Entidad RatingEvent - calificación registrada al terminar un alquiler."""

from dataclasses import dataclass
from datetime import datetime

from rentals.domain.entities.rating_aggregator import SubjectKind


@dataclass
class RatingEvent:
    """Una calificación por solicitud y tipo de sujeto."""

    id: str
    subject_id: str
    subject_kind: SubjectKind
    score: float
    related_request_id: str
    created_at: datetime
    author_id: str | None = None
    comment: str | None = None
