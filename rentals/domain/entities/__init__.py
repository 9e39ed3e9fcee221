"""Entidades del dominio de alquileres."""

from rentals.domain.entities.availability_calendar import AvailabilityCalendar, BlockedRange
from rentals.domain.entities.item import Item
from rentals.domain.entities.rating_aggregator import (
    RatingAggregator,
    RatingSnapshot,
    SubjectKind,
    validate_score,
)
from rentals.domain.entities.rating_event import RatingEvent
from rentals.domain.entities.reservation_request import (
    ALLOWED_TRANSITIONS,
    RequestStatus,
    ReservationRequest,
)

__all__ = [
    # Calendar
    "AvailabilityCalendar",
    "BlockedRange",
    # Item
    "Item",
    # Ratings
    "RatingAggregator",
    "RatingSnapshot",
    "SubjectKind",
    "validate_score",
    "RatingEvent",
    # ReservationRequest
    "ReservationRequest",
    "RequestStatus",
    "ALLOWED_TRANSITIONS",
]
