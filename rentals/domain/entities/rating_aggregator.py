"""Entidad RatingAggregator - promedio incremental de calificaciones."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from rentals.domain.errors import InvalidScoreError

MIN_SCORE = 1.0
MAX_SCORE = 5.0


class SubjectKind(str, Enum):
    """Tipo de sujeto calificado."""

    ITEM = "ITEM"
    USER = "USER"


@dataclass(frozen=True)
class RatingSnapshot:
    """Lectura para mostrar: el promedio va redondeado a un decimal."""

    count: int
    mean: float


def validate_score(score: float | int | Decimal) -> float:
    """
    Valida una calificación de 1 a 5 en pasos de media estrella.

    Returns:
        La calificación como float.

    Raises:
        InvalidScoreError: si está fuera de rango o no es múltiplo de 0.5.
    """
    if isinstance(score, bool) or not isinstance(score, (int, float, Decimal)):
        raise InvalidScoreError(score)
    value = float(score)
    if not MIN_SCORE <= value <= MAX_SCORE or (value * 2) != int(value * 2):
        raise InvalidScoreError(score)
    return value


@dataclass
class RatingAggregator:
    """
    Conteo y promedio de calificaciones de un ítem o de un usuario.

    Solo admite agregar calificaciones (`fold`); nunca se quitan ni se
    editan. El promedio se guarda con precisión completa.
    """

    subject_id: str
    subject_kind: SubjectKind = SubjectKind.ITEM
    count: int = 0
    mean: float = 0.0
    lock_version: int = 0

    def fold(self, score: float | int | Decimal) -> None:
        """Incorpora una calificación con actualización incremental O(1)."""
        value = validate_score(score)
        self.mean = self.mean + (value - self.mean) / (self.count + 1)
        self.count += 1

    def snapshot(self) -> RatingSnapshot:
        return RatingSnapshot(count=self.count, mean=round(self.mean, 1))
