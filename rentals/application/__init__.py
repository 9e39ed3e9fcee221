"""Capa de aplicación: puertos y orquestación de casos de uso."""

from rentals.application.rental_ledger import RentalLedger

__all__ = ["RentalLedger"]
