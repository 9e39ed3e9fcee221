"""Entidad AvailabilityCalendar - períodos bloqueados de un ítem."""

import bisect
from dataclasses import dataclass, field

from rentals.domain.errors import ConflictError
from rentals.domain.value_objects.date_range import DateRange


@dataclass(frozen=True)
class BlockedRange:
    """Período bloqueado por una solicitud aceptada."""

    request_id: str
    range: DateRange


@dataclass
class AvailabilityCalendar:
    """
    Calendario de disponibilidad de un ítem.

    Mantiene los períodos bloqueados ordenados por inicio y sin superposición.
    Cada período corresponde exactamente a una solicitud aceptada; los
    períodos vecinos nunca se fusionan para poder liberarlos al cancelar.

    `lock_version` es la versión con la que se cargó el calendario; el
    repositorio la usa como token de compare-and-swap al guardar.
    """

    item_id: str
    lock_version: int = 0
    _entries: list[BlockedRange] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        entries = sorted(self._entries, key=lambda e: e.range.start)
        self._entries = []
        for entry in entries:
            self.block(entry.request_id, entry.range)

    # === Consultas ===

    def overlapping(self, date_range: DateRange) -> list[BlockedRange]:
        """Retorna los períodos bloqueados que se superponen con `date_range`."""
        # Los inicios y los fines están ordenados porque no hay superposición.
        idx = bisect.bisect_left(self._entries, date_range.end, key=lambda e: e.range.start)
        found: list[BlockedRange] = []
        while idx > 0 and self._entries[idx - 1].range.end > date_range.start:
            idx -= 1
            found.append(self._entries[idx])
        found.reverse()
        return found

    def is_free(self, date_range: DateRange) -> bool:
        """Verifica que el período no choque con ningún bloqueo."""
        return not self.overlapping(date_range)

    def is_blocked_by(self, request_id: str) -> bool:
        return any(e.request_id == request_id for e in self._entries)

    def blocked_ranges(self) -> list[BlockedRange]:
        """Copia de los períodos bloqueados en orden de inicio."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    # === Mutaciones ===

    def block(self, request_id: str, date_range: DateRange) -> None:
        """
        Bloquea el período para la solicitud indicada.

        Siempre vuelve a verificar la disponibilidad, aunque el llamador ya
        lo haya hecho.

        Raises:
            ConflictError: si el período ya no está libre o la solicitud ya
                tiene un bloqueo.
        """
        clashes = self.overlapping(date_range)
        if clashes or self.is_blocked_by(request_id):
            raise ConflictError(
                item_id=self.item_id,
                start=date_range.start,
                end=date_range.end,
                conflicting_request_ids=[e.request_id for e in clashes] or [request_id],
            )
        bisect.insort(
            self._entries,
            BlockedRange(request_id=request_id, range=date_range),
            key=lambda e: e.range.start,
        )

    def unblock(self, request_id: str) -> bool:
        """
        Libera el período de la solicitud.

        Es idempotente: si no hay bloqueo para esa solicitud no hace nada.

        Returns:
            True si se eliminó un bloqueo.
        """
        for idx, entry in enumerate(self._entries):
            if entry.request_id == request_id:
                del self._entries[idx]
                return True
        return False

    @classmethod
    def from_blocked(
        cls, item_id: str, blocked: list[BlockedRange], lock_version: int = 0
    ) -> "AvailabilityCalendar":
        """Reconstruye el calendario desde lo persistido."""
        return cls(item_id=item_id, lock_version=lock_version, _entries=list(blocked))
