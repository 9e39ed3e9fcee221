import asyncio

import pytest

from rentals.infrastructure.in_memory import InMemoryDocumentStore, InMemoryTransactionManager


@pytest.fixture
def store() -> InMemoryDocumentStore:
    s = InMemoryDocumentStore()
    s.insert("items", "item-1", {"name": "Cello", "calendarVersion": 0, "tags": ["strings"]})
    return s


class TestInMemoryDocumentStore:
    def test_insert_existing_id_fails(self, store):
        assert store.insert("items", "item-1", {"name": "Viola"}) is False
        assert store.get("items", "item-1")["name"] == "Cello"

    def test_reads_are_copies(self, store):
        doc = store.get("items", "item-1")
        doc["tags"].append("bow")
        assert store.get("items", "item-1")["tags"] == ["strings"]

    def test_conditional_update(self, store):
        assert store.update("items", "item-1", {"calendarVersion": 1}, expected={"calendarVersion": 0})
        assert not store.update("items", "item-1", {"calendarVersion": 2}, expected={"calendarVersion": 0})
        assert store.get("items", "item-1")["calendarVersion"] == 1

    def test_update_missing_document(self, store):
        assert store.update("items", "missing", {"name": "x"}) is False

    def test_where_skips_none_filters(self, store):
        store.insert("items", "item-2", {"name": "Harp", "calendarVersion": 3})
        assert [doc_id for doc_id, _ in store.where("items", calendarVersion=3, name=None)] == ["item-2"]
        assert len(store.where("items")) == 2


class TestInMemoryTransactionManager:
    @pytest.mark.asyncio
    async def test_rollback_restores_store(self, store):
        tx = InMemoryTransactionManager(store)
        with pytest.raises(RuntimeError):
            async with tx.start():
                store.update("items", "item-1", {"name": "Double bass"})
                raise RuntimeError("boom")
        assert store.get("items", "item-1")["name"] == "Cello"

    @pytest.mark.asyncio
    async def test_nested_start_joins_outer(self, store):
        tx = InMemoryTransactionManager(store)
        async with tx.start():
            async with tx.start():
                store.update("items", "item-1", {"name": "Viola"})
        assert store.get("items", "item-1")["name"] == "Viola"

    @pytest.mark.asyncio
    async def test_transactions_are_serialized(self, store):
        tx = InMemoryTransactionManager(store)
        order = []

        async def work(name: str):
            async with tx.start():
                order.append(f"{name}-start")
                await asyncio.sleep(0)
                order.append(f"{name}-end")

        await asyncio.gather(work("a"), work("b"))
        assert order == ["a-start", "a-end", "b-start", "b-end"]
