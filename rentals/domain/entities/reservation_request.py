"""Entidad ReservationRequest - Agregado raíz del ciclo de vida de una reserva."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from rentals.domain.entities.availability_calendar import AvailabilityCalendar
from rentals.domain.entities.rating_aggregator import SubjectKind
from rentals.domain.errors import InvalidPriceError, InvalidStateTransitionError
from rentals.domain.value_objects.date_range import DateRange
from rentals.domain.value_objects.money import Money


class RequestStatus(str, Enum):
    """Estados posibles de una solicitud de reserva."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


# Única fuente de verdad de las transiciones legales.
ALLOWED_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.ACCEPTED, RequestStatus.REJECTED}),
    RequestStatus.ACCEPTED: frozenset({RequestStatus.CANCELLED}),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
}


@dataclass
class ReservationRequest:
    """
    Solicitud de alquiler de un ítem por un período.

    Se crea en PENDING y el propietario la decide una única vez:
    PENDING -> ACCEPTED o PENDING -> REJECTED. Una solicitud aceptada
    puede cancelarse después (ACCEPTED -> CANCELLED), liberando el
    calendario. Una solicitud pendiente no reserva nada.
    """

    # Identificadores
    id: str
    item_id: str
    requester_id: str
    owner_id: str

    # Período y precio
    requested_range: DateRange
    unit_price: Money
    computed_total: Money

    # Estado
    status: RequestStatus = RequestStatus.PENDING
    rejection_reason: str | None = None
    notes: str | None = None

    # Timestamps
    created_at: datetime | None = None
    decided_at: datetime | None = None
    cancelled_at: datetime | None = None

    # Calificaciones ya registradas (una por tipo)
    item_rated: bool = False
    renter_rated: bool = False

    # Control de concurrencia
    lock_version: int = 0

    # === Propiedades calculadas ===

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        """Ya no admite decisiones del propietario."""
        return self.status != RequestStatus.PENDING

    @property
    def rental_days(self) -> int:
        return self.requested_range.duration_in_whole_days()

    def has_ended(self, now: datetime) -> bool:
        """El período terminó (el fin es excluyente)."""
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return self.requested_range.end <= now

    def is_rated(self, kind: SubjectKind) -> bool:
        if kind == SubjectKind.ITEM:
            return self.item_rated
        return self.renter_rated

    # === Métodos de negocio ===

    def _transition(self, target: RequestStatus, operation: str) -> None:
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidStateTransitionError(
                request_id=self.id,
                current_status=self.status.value,
                operation=operation,
            )
        self.status = target

    def ensure_can_transition(self, target: RequestStatus, operation: str) -> None:
        """Falla si la transición no es legal, sin modificar la solicitud."""
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidStateTransitionError(
                request_id=self.id,
                current_status=self.status.value,
                operation=operation,
            )

    def accept(self, calendar: AvailabilityCalendar, decided_at: datetime) -> None:
        """
        Acepta la solicitud bloqueando su período en el calendario.

        Si el calendario rechaza el bloqueo con ConflictError la solicitud
        sigue en PENDING y el error se propaga: el propietario decide qué
        hacer, nunca se rechaza automáticamente.
        """
        self.ensure_can_transition(RequestStatus.ACCEPTED, "aceptar")
        calendar.block(self.id, self.requested_range)
        self._transition(RequestStatus.ACCEPTED, "aceptar")
        self.decided_at = decided_at

    def reject(self, reason: str | None, decided_at: datetime) -> None:
        """Rechaza la solicitud; el motivo puede ser vacío."""
        self._transition(RequestStatus.REJECTED, "rechazar")
        self.rejection_reason = reason or ""
        self.decided_at = decided_at

    def cancel(self, calendar: AvailabilityCalendar, cancelled_at: datetime) -> bool:
        """
        Cancela una solicitud aceptada y libera su período.

        Repetir la cancelación sobre una solicitud ya cancelada solo vuelve a
        liberar el calendario (operación idempotente).

        Returns:
            True si la solicitud pasó a CANCELLED en esta llamada.
        """
        if self.status == RequestStatus.CANCELLED:
            calendar.unblock(self.id)
            return False
        self._transition(RequestStatus.CANCELLED, "cancelar")
        calendar.unblock(self.id)
        self.cancelled_at = cancelled_at
        return True

    def mark_rated(self, kind: SubjectKind) -> None:
        if kind == SubjectKind.ITEM:
            self.item_rated = True
        else:
            self.renter_rated = True

    @classmethod
    def create(
        cls,
        request_id: str,
        item_id: str,
        requester_id: str,
        owner_id: str,
        requested_range: DateRange,
        unit_price: Money,
        created_at: datetime,
        notes: str | None = None,
    ) -> "ReservationRequest":
        """
        Factory para crear una solicitud pendiente.

        Calcula el total como precio diario por días completos, redondeado a
        centavos. No toca el calendario.
        """
        if not unit_price.is_positive():
            raise InvalidPriceError(f"El precio diario debe ser mayor a cero: {unit_price}")
        total = unit_price.multiply(requested_range.duration_in_whole_days())
        return cls(
            id=request_id,
            item_id=item_id,
            requester_id=requester_id,
            owner_id=owner_id,
            requested_range=requested_range,
            unit_price=unit_price,
            computed_total=total,
            status=RequestStatus.PENDING,
            notes=notes,
            created_at=created_at,
        )
