"""
Capa de Dominio - Motor de disponibilidad y reservas.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.

Estructura:
- entities/: Entidades del dominio (ReservationRequest, AvailabilityCalendar, ...)
- value_objects/: Objetos de valor inmutables (DateRange, Money)
- errors.py: Excepciones específicas del dominio
"""

from rentals.domain.entities import (
    AvailabilityCalendar,
    BlockedRange,
    Item,
    RatingAggregator,
    RatingEvent,
    RatingSnapshot,
    RequestStatus,
    ReservationRequest,
    SubjectKind,
)
from rentals.domain.errors import (
    ConflictError,
    DomainError,
    DuplicateRequestError,
    InvalidPriceError,
    InvalidRangeError,
    InvalidScoreError,
    InvalidStateTransitionError,
    ItemNotFoundError,
    ItemUnavailableError,
    NotFoundError,
    OptimisticLockError,
    RecordDecodeError,
    RequestNotFoundError,
    ValidationError,
)
from rentals.domain.value_objects import DateRange, Money

__all__ = [
    # Entities
    "AvailabilityCalendar",
    "BlockedRange",
    "Item",
    "RatingAggregator",
    "RatingEvent",
    "RatingSnapshot",
    "RequestStatus",
    "ReservationRequest",
    "SubjectKind",
    # Value Objects
    "DateRange",
    "Money",
    # Errors
    "DomainError",
    "ConflictError",
    "DuplicateRequestError",
    "InvalidPriceError",
    "InvalidRangeError",
    "InvalidScoreError",
    "InvalidStateTransitionError",
    "ItemNotFoundError",
    "ItemUnavailableError",
    "NotFoundError",
    "OptimisticLockError",
    "RecordDecodeError",
    "RequestNotFoundError",
    "ValidationError",
]
