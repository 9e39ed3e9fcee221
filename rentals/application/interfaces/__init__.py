"""Interfaces (Puertos) de la capa de aplicación."""

from rentals.application.interfaces.clock import Clock, FakeClock, SystemClock
from rentals.application.interfaces.id_generator import (
    FakeIdGenerator,
    IdGenerator,
    UuidIdGenerator,
)
from rentals.application.interfaces.item_repo import ItemRepo
from rentals.application.interfaces.rating_repo import RatingRepo
from rentals.application.interfaces.reservation_request_repo import ReservationRequestRepo
from rentals.application.interfaces.transaction_manager import TransactionManager

__all__ = [
    "Clock",
    "FakeClock",
    "SystemClock",
    "IdGenerator",
    "UuidIdGenerator",
    "FakeIdGenerator",
    "ItemRepo",
    "RatingRepo",
    "ReservationRequestRepo",
    "TransactionManager",
]
