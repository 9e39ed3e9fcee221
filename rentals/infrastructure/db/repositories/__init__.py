from rentals.infrastructure.db.repositories.item_repo_sql import ItemRepoSQL
from rentals.infrastructure.db.repositories.rating_repo_sql import RatingRepoSQL
from rentals.infrastructure.db.repositories.reservation_request_repo_sql import (
    ReservationRequestRepoSQL,
)

__all__ = [
    "ItemRepoSQL",
    "RatingRepoSQL",
    "ReservationRequestRepoSQL",
]
