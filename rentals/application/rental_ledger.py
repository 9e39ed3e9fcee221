"""
RentalLedger - orquestador del ciclo de vida de alquileres.

Coordina calendario, solicitudes y calificaciones de cada ítem sobre los
repositorios. Cada caso de uso corre dentro de una transacción y las
escrituras de calendario y promedios son compare-and-swap sobre su versión:
una carrera perdida se reporta de inmediato, nunca se reintenta.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from rentals.application.interfaces.clock import Clock
from rentals.application.interfaces.id_generator import IdGenerator
from rentals.application.interfaces.item_repo import ItemRepo
from rentals.application.interfaces.rating_repo import RatingRepo
from rentals.application.interfaces.reservation_request_repo import ReservationRequestRepo
from rentals.application.interfaces.transaction_manager import TransactionManager
from rentals.domain.entities.availability_calendar import AvailabilityCalendar
from rentals.domain.entities.item import Item
from rentals.domain.entities.rating_aggregator import RatingSnapshot, SubjectKind, validate_score
from rentals.domain.entities.rating_event import RatingEvent
from rentals.domain.entities.reservation_request import RequestStatus, ReservationRequest
from rentals.domain.errors import (
    ConflictError,
    DuplicateRequestError,
    InvalidPriceError,
    InvalidStateTransitionError,
    ItemNotFoundError,
    ItemUnavailableError,
    OptimisticLockError,
    RequestNotFoundError,
    ValidationError,
)
from rentals.domain.value_objects.date_range import DateRange
from rentals.domain.value_objects.money import Money

DEFAULT_EXPIRED_REASON = "Requested period expired"


class RentalLedger:
    def __init__(
        self,
        item_repo: ItemRepo,
        request_repo: ReservationRequestRepo,
        rating_repo: RatingRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        id_generator: IdGenerator,
        currency_code: str = "BRL",
        reject_duplicate_pending_requests: bool = True,
        expired_request_reason: str = DEFAULT_EXPIRED_REASON,
    ) -> None:
        self._item_repo = item_repo
        self._request_repo = request_repo
        self._rating_repo = rating_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._id_generator = id_generator
        self._currency_code = currency_code
        self._reject_duplicates = reject_duplicate_pending_requests
        self._expired_reason = expired_request_reason
        self._logger = logging.getLogger(__name__)

    # === Ítems ===

    async def register_item(
        self,
        owner_id: str,
        name: str,
        price: Decimal | int | str,
        description: str | None = None,
        category: str | None = None,
        available: bool = True,
    ) -> Item:
        """Publica un ítem con su precio diario y un calendario vacío."""
        unit_price = Money.of(price, self._currency_code)
        if not unit_price.is_positive():
            raise InvalidPriceError(f"El precio diario debe ser mayor a cero: {unit_price}")
        if not name or not name.strip():
            raise ValidationError("name", "no puede estar vacío")

        item = Item(
            id=self._id_generator.generate_id(),
            owner_id=owner_id,
            name=name.strip(),
            price=unit_price,
            available=available,
            description=description,
            category=category,
            created_at=self._clock.now(),
        )
        async with self._transaction_manager.start():
            await self._item_repo.create(item)
        self._logger.info("Item registered", extra={"item_id": item.id, "owner_id": owner_id})
        return item

    async def get_item(self, item_id: str) -> Item:
        item = await self._item_repo.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    async def list_items_for_owner(self, owner_id: str) -> Sequence[Item]:
        return await self._item_repo.list_by_owner(owner_id)

    async def set_item_availability(self, item_id: str, available: bool) -> Item:
        """El propietario habilita o retira el ítem; no toca el calendario."""
        async with self._transaction_manager.start():
            item = await self.get_item(item_id)
            item.set_availability(available)
            await self._item_repo.update_listing(item)
        self._logger.info(
            "Item availability changed", extra={"item_id": item_id, "available": available}
        )
        return item

    # === Calendario ===

    async def get_calendar(self, item_id: str) -> AvailabilityCalendar:
        calendar = await self._item_repo.get_calendar(item_id)
        if calendar is None:
            raise ItemNotFoundError(item_id)
        return calendar

    async def check_availability(self, item_id: str, start: datetime, end: datetime) -> bool:
        calendar = await self.get_calendar(item_id)
        return calendar.is_free(DateRange(start=start, end=end))

    # === Solicitudes ===

    async def submit_request(
        self,
        item_id: str,
        requester_id: str,
        start: datetime,
        end: datetime,
        notes: str | None = None,
    ) -> ReservationRequest:
        """
        Crea una solicitud PENDING al precio diario actual del ítem.

        No consulta el calendario: varias solicitudes pendientes pueden
        competir por el mismo período y gana la primera que se acepte.
        """
        requested_range = DateRange(start=start, end=end)

        async with self._transaction_manager.start():
            item = await self.get_item(item_id)
            if not item.available:
                self._logger.warning(
                    "Request for unavailable item refused",
                    extra={"item_id": item_id, "requester_id": requester_id},
                )
                raise ItemUnavailableError(item_id)
            if requester_id == item.owner_id:
                raise ValidationError("requester_id", "el propietario no puede alquilar su propio ítem")

            if self._reject_duplicates:
                pending = await self._request_repo.query(
                    item_id=item_id,
                    requester_id=requester_id,
                    status=RequestStatus.PENDING,
                )
                for existing in pending:
                    if existing.requested_range.overlaps(requested_range):
                        self._logger.warning(
                            "Duplicate pending request refused",
                            extra={"existing_request_id": existing.id, "requester_id": requester_id},
                        )
                        raise DuplicateRequestError(item_id, requester_id, existing.id)

            request = ReservationRequest.create(
                request_id=self._id_generator.generate_id(),
                item_id=item.id,
                requester_id=requester_id,
                owner_id=item.owner_id,
                requested_range=requested_range,
                unit_price=item.price,
                created_at=self._clock.now(),
                notes=notes,
            )
            await self._request_repo.create(request)

        self._logger.info(
            "Reservation request submitted",
            extra={
                "request_id": request.id,
                "item_id": item_id,
                "requester_id": requester_id,
                "total": str(request.computed_total),
            },
        )
        return request

    async def get_request(self, request_id: str) -> ReservationRequest:
        request = await self._request_repo.get(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    async def list_requests(
        self,
        item_id: str | None = None,
        owner_id: str | None = None,
        requester_id: str | None = None,
        status: RequestStatus | None = None,
    ) -> Sequence[ReservationRequest]:
        return await self._request_repo.query(
            item_id=item_id,
            owner_id=owner_id,
            requester_id=requester_id,
            status=status,
        )

    async def list_requests_for_item(
        self, item_id: str, status: RequestStatus | None = None
    ) -> Sequence[ReservationRequest]:
        return await self.list_requests(item_id=item_id, status=status)

    async def list_requests_for_owner(
        self, owner_id: str, status: RequestStatus | None = None
    ) -> Sequence[ReservationRequest]:
        return await self.list_requests(owner_id=owner_id, status=status)

    async def list_requests_for_requester(
        self, requester_id: str, status: RequestStatus | None = None
    ) -> Sequence[ReservationRequest]:
        return await self.list_requests(requester_id=requester_id, status=status)

    async def decide(
        self,
        request_id: str,
        accept: bool,
        reason: str | None = None,
    ) -> ReservationRequest:
        """
        Aplica la decisión del propietario.

        Aceptar vuelve a validar contra el calendario vigente. Si el período
        ya fue tomado se lanza ConflictError y la solicitud queda PENDING.
        """
        operation = "aceptar" if accept else "rechazar"

        async with self._transaction_manager.start():
            request = await self.get_request(request_id)
            if request.is_terminal:
                raise InvalidStateTransitionError(request.id, request.status.value, operation)

            now = self._clock.now()
            if accept:
                calendar = await self.get_calendar(request.item_id)
                try:
                    request.accept(calendar, now)
                except ConflictError as exc:
                    self._logger.warning(
                        "Reservation request conflicts with calendar",
                        extra={
                            "request_id": request.id,
                            "item_id": request.item_id,
                            "conflicting_request_ids": exc.conflicting_request_ids,
                        },
                    )
                    raise
                try:
                    await self._item_repo.save_calendar(calendar)
                except OptimisticLockError as exc:
                    self._logger.warning(
                        "Calendar changed concurrently",
                        extra={"request_id": request.id, "item_id": request.item_id},
                    )
                    raise ConflictError(
                        item_id=request.item_id,
                        start=request.requested_range.start,
                        end=request.requested_range.end,
                        message=f"El calendario del ítem {request.item_id} cambió mientras se aceptaba la solicitud {request.id}",
                    ) from exc
            else:
                request.reject(reason, now)

            await self._save_decision(request, operation)

        self._logger.info(
            "Reservation request decided",
            extra={"request_id": request.id, "status": request.status.value},
        )
        return request

    async def cancel(self, request_id: str) -> ReservationRequest:
        """Cancela una solicitud aceptada y libera su período."""
        async with self._transaction_manager.start():
            request = await self.get_request(request_id)
            calendar = await self.get_calendar(request.item_id)
            changed = request.cancel(calendar, self._clock.now())
            if changed:
                try:
                    await self._item_repo.save_calendar(calendar)
                except OptimisticLockError as exc:
                    raise ConflictError(
                        item_id=request.item_id,
                        start=request.requested_range.start,
                        end=request.requested_range.end,
                        message=f"El calendario del ítem {request.item_id} cambió mientras se cancelaba la solicitud {request.id}",
                    ) from exc
                await self._save_decision(request, "cancelar")

        if changed:
            self._logger.info("Reservation cancelled", extra={"request_id": request.id})
        else:
            self._logger.info("Reservation already cancelled", extra={"request_id": request.id})
        return request

    async def expire_stale_requests(self, owner_id: str | None = None) -> int:
        """
        Rechaza las solicitudes pendientes cuyo período ya terminó.

        Returns:
            Cantidad de solicitudes rechazadas.
        """
        expired = 0
        async with self._transaction_manager.start():
            now = self._clock.now()
            pending = await self._request_repo.query(owner_id=owner_id, status=RequestStatus.PENDING)
            for request in pending:
                if not request.has_ended(now):
                    continue
                request.reject(self._expired_reason, now)
                await self._save_decision(request, "rechazar")
                expired += 1

        if expired:
            self._logger.info(
                "Stale reservation requests expired",
                extra={"owner_id": owner_id, "expired": expired},
            )
        return expired

    async def _save_decision(self, request: ReservationRequest, operation: str) -> None:
        try:
            await self._request_repo.save(request)
        except OptimisticLockError as exc:
            # Otro cliente decidió primero: la vista del llamador está vencida.
            raise InvalidStateTransitionError(request.id, "STALE", operation) from exc

    # === Calificaciones ===

    async def record_completion(
        self,
        request_id: str,
        score: float | int | Decimal,
        subject_kind: SubjectKind = SubjectKind.ITEM,
        author_id: str | None = None,
        comment: str | None = None,
    ) -> RatingSnapshot:
        """
        Registra la calificación de un alquiler terminado.

        ITEM califica al ítem (autor por defecto: el locatario); USER califica
        al locatario (autor por defecto: el propietario). Cada solicitud
        aporta como máximo una calificación por tipo: repetir la llamada no
        modifica nada y retorna el promedio vigente.
        """
        value = validate_score(score)

        async with self._transaction_manager.start():
            request = await self.get_request(request_id)
            if request.status != RequestStatus.ACCEPTED or not request.has_ended(self._clock.now()):
                raise InvalidStateTransitionError(request.id, request.status.value, "calificar")

            subject_id = request.item_id if subject_kind == SubjectKind.ITEM else request.requester_id
            aggregator = await self._rating_repo.get_aggregator(subject_kind, subject_id)

            if request.is_rated(subject_kind):
                self._logger.info(
                    "Rating already recorded for request",
                    extra={"request_id": request.id, "subject_kind": subject_kind.value},
                )
                return aggregator.snapshot()

            aggregator.fold(value)
            await self._rating_repo.save_aggregator(aggregator)

            default_author = request.requester_id if subject_kind == SubjectKind.ITEM else request.owner_id
            await self._rating_repo.add_event(
                RatingEvent(
                    id=self._id_generator.generate_id(),
                    subject_id=subject_id,
                    subject_kind=subject_kind,
                    score=value,
                    related_request_id=request.id,
                    created_at=self._clock.now(),
                    author_id=author_id or default_author,
                    comment=comment,
                )
            )
            request.mark_rated(subject_kind)
            await self._request_repo.save(request)

        self._logger.info(
            "Rating recorded",
            extra={
                "request_id": request.id,
                "subject_kind": subject_kind.value,
                "subject_id": subject_id,
                "count": aggregator.count,
            },
        )
        return aggregator.snapshot()

    async def get_rating(self, subject_kind: SubjectKind, subject_id: str) -> RatingSnapshot:
        if subject_kind == SubjectKind.ITEM:
            await self.get_item(subject_id)
        aggregator = await self._rating_repo.get_aggregator(subject_kind, subject_id)
        return aggregator.snapshot()

    async def list_rating_events(self, subject_kind: SubjectKind, subject_id: str) -> Sequence[RatingEvent]:
        return await self._rating_repo.list_events(subject_kind, subject_id)
