import asyncio
from contextlib import asynccontextmanager
from contextvars import ContextVar

from rentals.application.interfaces.transaction_manager import TransactionManager
from rentals.infrastructure.in_memory.document_store import InMemoryDocumentStore

_inside_transaction: ContextVar[bool] = ContextVar("_inside_transaction", default=False)


class InMemoryTransactionManager(TransactionManager):
    """
    Serializable transactions over the in-memory store.

    One transaction runs at a time; on error the store is restored to the
    state it had when the transaction began. Nested starts join the outer
    transaction.
    """

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def start(self):
        if _inside_transaction.get():
            yield
            return
        async with self._lock:
            snapshot = self._store.snapshot()
            token = _inside_transaction.set(True)
            try:
                yield
            except BaseException:
                self._store.restore(snapshot)
                raise
            finally:
                _inside_transaction.reset(token)
