import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from rentals.application.interfaces.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class SQLAlchemyTransactionManager(TransactionManager):
    """Runs each use case in one database transaction; nested starts join it."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._active = False

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._active:
            yield
            return
        if self._session.in_transaction():
            # Reads outside a use case autobegin a transaction; close it first.
            await self._session.commit()
        self._active = True
        try:
            async with self._session.begin():
                yield
        except Exception as exc:
            logger.info(
                "Transaction rolled back",
                extra={"error_type": type(exc).__name__},
            )
            raise
        finally:
            self._active = False
