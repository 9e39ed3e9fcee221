"""Value Object DateRange - intervalo semiabierto [start, end) de un alquiler."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from rentals.domain.errors import InvalidRangeError

SECONDS_PER_DAY = 86400


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class DateRange:
    """
    Value Object inmutable que representa un período de alquiler.

    El intervalo es semiabierto: `start` incluido, `end` excluido, así que dos
    rangos que se tocan en un borde no se superponen. Las fechas sin zona
    horaria se interpretan como UTC.

    Attributes:
        start: Inicio del alquiler (retiro).
        end: Fin del alquiler (devolución).
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.start, datetime) or not isinstance(self.end, datetime):
            raise InvalidRangeError(
                f"start y end deben ser datetime: {type(self.start).__name__}, {type(self.end).__name__}"
            )
        object.__setattr__(self, "start", _as_utc(self.start))
        object.__setattr__(self, "end", _as_utc(self.end))
        if self.start >= self.end:
            raise InvalidRangeError(
                f"start debe ser anterior a end: {self.start.isoformat()} >= {self.end.isoformat()}"
            )

    @property
    def duration(self) -> timedelta:
        """Retorna la duración del rango."""
        return self.end - self.start

    def duration_in_whole_days(self) -> int:
        """
        Calcula los días a cobrar.

        Regla de negocio: cualquier fracción de día cuenta como día completo
        y se cobra como mínimo un día.
        """
        days = math.ceil(self.duration.total_seconds() / SECONDS_PER_DAY)
        return max(1, days)

    def overlaps(self, other: "DateRange") -> bool:
        """Verifica si este rango se superpone con otro."""
        return self.start < other.end and other.start < self.end

    def contains(self, instant: datetime) -> bool:
        """Verifica si un instante cae dentro del rango."""
        return self.start <= _as_utc(instant) < self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()} -> {self.end.isoformat()}"
