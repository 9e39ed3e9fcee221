from collections.abc import AsyncIterator
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from rentals.application.interfaces.clock import SystemClock
from rentals.application.interfaces.id_generator import UuidIdGenerator
from rentals.application.rental_ledger import RentalLedger
from rentals.config import Settings, get_settings
from rentals.infrastructure.db.engine import build_engine, build_sessionmaker
from rentals.infrastructure.db.repositories import (
    ItemRepoSQL,
    RatingRepoSQL,
    ReservationRequestRepoSQL,
)
from rentals.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from rentals.infrastructure.in_memory import (
    InMemoryDocumentStore,
    InMemoryItemRepo,
    InMemoryRatingRepo,
    InMemoryReservationRequestRepo,
    InMemoryTransactionManager,
)


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    return build_engine(get_settings())


@lru_cache(maxsize=1)
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return build_sessionmaker(get_engine())


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncIterator[AsyncSession | None]:
    if settings.use_in_memory:
        yield None
        return
    async with get_sessionmaker()() as session:
        yield session


@lru_cache(maxsize=1)
def _in_memory_bundle():
    store = InMemoryDocumentStore()
    return {
        "store": store,
        "item_repo": InMemoryItemRepo(store),
        "request_repo": InMemoryReservationRequestRepo(store),
        "rating_repo": InMemoryRatingRepo(store),
        "tx_manager": InMemoryTransactionManager(store),
    }


def get_ledger(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
) -> RentalLedger:
    if settings.use_in_memory:
        bundle = _in_memory_bundle()
        item_repo = bundle["item_repo"]
        request_repo = bundle["request_repo"]
        rating_repo = bundle["rating_repo"]
        tx_manager = bundle["tx_manager"]
    else:
        if not session:
            raise RuntimeError("DB session not available")
        item_repo = ItemRepoSQL(session)
        request_repo = ReservationRequestRepoSQL(session)
        rating_repo = RatingRepoSQL(session)
        tx_manager = SQLAlchemyTransactionManager(session)

    return RentalLedger(
        item_repo=item_repo,
        request_repo=request_repo,
        rating_repo=rating_repo,
        transaction_manager=tx_manager,
        clock=SystemClock(),
        id_generator=UuidIdGenerator(),
        currency_code=settings.currency_code,
        reject_duplicate_pending_requests=settings.reject_duplicate_pending_requests,
        expired_request_reason=settings.expired_request_reason,
    )
