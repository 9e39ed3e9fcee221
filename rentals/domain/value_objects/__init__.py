"""Value Objects del dominio de alquileres."""

from rentals.domain.value_objects.date_range import DateRange
from rentals.domain.value_objects.money import Money

__all__ = [
    "DateRange",
    "Money",
]
