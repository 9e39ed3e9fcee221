"""Entidad Item - instrumento publicado para alquiler."""

from dataclasses import dataclass
from datetime import datetime

from rentals.domain.value_objects.money import Money


@dataclass
class Item:
    """
    Ítem publicado por un propietario.

    El calendario y el promedio de calificaciones viven en el mismo
    documento pero se cargan y guardan por separado, cada uno con su
    propia versión.
    """

    id: str
    owner_id: str
    name: str
    price: Money
    available: bool = True
    description: str | None = None
    category: str | None = None
    created_at: datetime | None = None

    def set_availability(self, available: bool) -> None:
        self.available = available
