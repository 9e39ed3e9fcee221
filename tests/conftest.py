"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Ledger sobre el store in-memory con reloj e ids deterministas
- Sesión SQLite in-memory con el esquema creado
- Cliente HTTP de prueba (FastAPI TestClient)
"""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rentals.application.interfaces.clock import FakeClock
from rentals.application.interfaces.id_generator import FakeIdGenerator
from rentals.application.rental_ledger import RentalLedger
from rentals.infrastructure.db.tables import metadata
from rentals.infrastructure.in_memory import (
    InMemoryDocumentStore,
    InMemoryItemRepo,
    InMemoryRatingRepo,
    InMemoryReservationRequestRepo,
    InMemoryTransactionManager,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Lunes 1 de junio de 2026, 12:00 UTC
NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def day(offset: int, hour: int = 12) -> datetime:
    """Fecha relativa a NOW, útil para armar rangos legibles."""
    return (NOW + timedelta(days=offset)).replace(hour=hour)


# ============================================================================
# LEDGER IN-MEMORY
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def id_generator() -> FakeIdGenerator:
    return FakeIdGenerator()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def ledger(store: InMemoryDocumentStore, clock: FakeClock, id_generator: FakeIdGenerator) -> RentalLedger:
    return RentalLedger(
        item_repo=InMemoryItemRepo(store),
        request_repo=InMemoryReservationRequestRepo(store),
        rating_repo=InMemoryRatingRepo(store),
        transaction_manager=InMemoryTransactionManager(store),
        clock=clock,
        id_generator=id_generator,
    )


# ============================================================================
# BASE DE DATOS
# ============================================================================


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


# ============================================================================
# CLIENTE HTTP
# ============================================================================


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    from rentals.api.dependencies import _in_memory_bundle
    from rentals.main import app

    _in_memory_bundle.cache_clear()
    with TestClient(app) as test_client:
        yield test_client
    _in_memory_bundle.cache_clear()
