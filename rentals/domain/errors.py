"""Excepciones de dominio para el motor de alquileres."""

from datetime import datetime


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de Rango / Calendario ===


class InvalidRangeError(DomainError):
    """Rango de fechas inválido (start >= end o valores no comparables)."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_DATE_RANGE")


class ConflictError(DomainError):
    """El período solicitado ya no está libre en el calendario del ítem."""

    def __init__(
        self,
        item_id: str,
        start: datetime,
        end: datetime,
        conflicting_request_ids: list[str] | None = None,
        message: str | None = None,
    ):
        conflicting = conflicting_request_ids or []
        default = f"El período {start.isoformat()} -> {end.isoformat()} ya no está libre para el ítem {item_id}"
        if conflicting:
            default += f" (bloqueado por: {', '.join(conflicting)})"
        super().__init__(message=message or default, code="CALENDAR_CONFLICT")
        self.item_id = item_id
        self.start = start
        self.end = end
        self.conflicting_request_ids = conflicting


# === Errores de Solicitud ===


class InvalidStateTransitionError(DomainError):
    """El estado actual de la solicitud no permite la operación."""

    def __init__(self, request_id: str, current_status: str, operation: str):
        super().__init__(
            message=f"No se puede {operation} la solicitud {request_id}: estado actual '{current_status}'",
            code="INVALID_STATE_TRANSITION",
        )
        self.request_id = request_id
        self.current_status = current_status
        self.operation = operation


class DuplicateRequestError(DomainError):
    """El solicitante ya tiene una solicitud pendiente que se superpone."""

    def __init__(self, item_id: str, requester_id: str, existing_request_id: str):
        super().__init__(
            message=f"El usuario {requester_id} ya tiene la solicitud pendiente "
            f"{existing_request_id} para el ítem {item_id} en ese período",
            code="DUPLICATE_REQUEST",
        )
        self.item_id = item_id
        self.requester_id = requester_id
        self.existing_request_id = existing_request_id


class OptimisticLockError(DomainError):
    """Conflicto de concurrencia al actualizar un documento versionado."""

    def __init__(self, entity: str, entity_id: str, expected_version: int, actual_version: int | None):
        super().__init__(
            message=f"Conflicto de concurrencia en {entity} {entity_id}: "
            f"versión esperada {expected_version}, versión actual {actual_version}",
            code="OPTIMISTIC_LOCK_ERROR",
        )
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version


# === Errores de No Encontrado ===


class NotFoundError(DomainError):
    """El recurso referenciado no existe (o ya no está disponible)."""

    def __init__(self, resource: str, resource_id: str, code: str = "NOT_FOUND"):
        super().__init__(message=f"{resource} no encontrado: {resource_id}", code=code)
        self.resource = resource
        self.resource_id = resource_id


class RequestNotFoundError(NotFoundError):
    """La solicitud de reserva no existe."""

    def __init__(self, request_id: str):
        super().__init__(resource="Solicitud", resource_id=request_id, code="REQUEST_NOT_FOUND")
        self.request_id = request_id


class ItemNotFoundError(NotFoundError):
    """El ítem no existe."""

    def __init__(self, item_id: str):
        super().__init__(resource="Ítem", resource_id=item_id, code="ITEM_NOT_FOUND")
        self.item_id = item_id


class ItemUnavailableError(DomainError):
    """El propietario retiró el ítem del alquiler."""

    def __init__(self, item_id: str):
        super().__init__(
            message=f"El ítem {item_id} no está disponible para alquiler",
            code="ITEM_UNAVAILABLE",
        )
        self.item_id = item_id


# === Errores de Validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validación fallida en '{field}': {message}",
            code="VALIDATION_ERROR",
        )
        self.field = field


class InvalidPriceError(DomainError):
    """Precio unitario inválido."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_PRICE")


class InvalidScoreError(DomainError):
    """Calificación fuera de rango."""

    def __init__(self, score: object):
        super().__init__(
            message=f"Calificación inválida: {score} (se espera 1 a 5 en pasos de 0.5)",
            code="INVALID_SCORE",
        )
        self.score = score


# === Errores de Persistencia ===


class RecordDecodeError(DomainError):
    """Un documento almacenado no tiene la forma esperada."""

    def __init__(self, record_type: str, record_id: str | None, details: str):
        super().__init__(
            message=f"Documento {record_type} {record_id or '?'} inválido: {details}",
            code="RECORD_DECODE_ERROR",
        )
        self.record_type = record_type
        self.record_id = record_id
        self.details = details
