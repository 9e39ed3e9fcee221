"""In-memory document store with the contract of the external store."""

import copy
from collections.abc import Mapping
from typing import Any

Document = dict[str, Any]


class InMemoryDocumentStore:
    """
    Collections of camelCase documents keyed by generated id.

    Supports point reads and writes, conditional (compare-and-swap) updates
    and equality queries. Every read returns a copy so callers never alias
    stored state.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}

    def _collection(self, name: str) -> dict[str, Document]:
        return self._collections.setdefault(name, {})

    def get(self, collection: str, doc_id: str) -> Document | None:
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def insert(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> bool:
        """Creates the document; returns False if the id is taken."""
        docs = self._collection(collection)
        if doc_id in docs:
            return False
        docs[doc_id] = copy.deepcopy(dict(data))
        return True

    def update(
        self,
        collection: str,
        doc_id: str,
        fields: Mapping[str, Any],
        expected: Mapping[str, Any] | None = None,
    ) -> bool:
        """
        Merges `fields` into the document if every `expected` field still
        holds the given value. Returns False if the document is missing or
        the precondition failed.
        """
        doc = self._collection(collection).get(doc_id)
        if doc is None:
            return False
        for key, value in (expected or {}).items():
            if doc.get(key) != value:
                return False
        doc.update(copy.deepcopy(dict(fields)))
        return True

    def where(self, collection: str, **equals: Any) -> list[tuple[str, Document]]:
        """Documents whose fields equal all given values (None filters are skipped)."""
        filters = {k: v for k, v in equals.items() if v is not None}
        return [
            (doc_id, copy.deepcopy(doc))
            for doc_id, doc in self._collection(collection).items()
            if all(doc.get(k) == v for k, v in filters.items())
        ]

    def snapshot(self) -> dict[str, dict[str, Document]]:
        return copy.deepcopy(self._collections)

    def restore(self, snapshot: dict[str, dict[str, Document]]) -> None:
        self._collections = snapshot
