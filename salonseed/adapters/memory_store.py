"""
In-memory document store for dry runs without a MongoDB server.
"""

import copy
from typing import Any, Dict, List, Mapping, Sequence

from ..domain.exceptions import StoreError


class InMemoryStore:
    """
    Mock store that mimics the subset of collection behaviour the seeders use.

    Documents are kept in insertion order, keyed by ``_id``. A batch that
    contains an ``_id`` already present (or repeated inside the batch) is
    rejected as a whole, like a unique-index violation on the server.
    """

    def __init__(self, name: str = "memory"):
        self.name = name
        self._documents: Dict[Any, Dict[str, Any]] = {}
        self.insert_calls: List[int] = []

    def insert_many(self, records: Sequence[Mapping[str, Any]]) -> int:
        batch_ids = [record.get("_id") for record in records]
        clashes = [doc_id for doc_id in batch_ids if doc_id in self._documents]
        if clashes or len(set(batch_ids)) != len(batch_ids):
            raise StoreError(
                f"Duplicate key in '{self.name}': {clashes or batch_ids}"
            )

        for record in records:
            self._documents[record["_id"]] = copy.deepcopy(dict(record))
        self.insert_calls.append(len(records))
        return len(records)

    def delete_all(self) -> int:
        deleted = len(self._documents)
        self._documents.clear()
        return deleted

    def count_documents(self, filter: Mapping[str, Any] | None = None) -> int:
        """Count documents whose fields equal every key in ``filter``."""
        if not filter:
            return len(self._documents)
        return sum(1 for doc in self._documents.values() if self._matches(doc, filter))

    def update_fields(self, doc_id: Any, fields: Mapping[str, Any]) -> int:
        doc = self._documents.get(doc_id)
        if doc is None:
            return 0
        doc.update(copy.deepcopy(dict(fields)))
        return 1

    def find_all(self, projection: Mapping[str, Any] | None = None) -> List[Dict[str, Any]]:
        docs = [copy.deepcopy(doc) for doc in self._documents.values()]
        if not projection:
            return docs

        wanted = [key for key, include in projection.items() if include]
        return [
            {key: doc[key] for key in ["_id", *wanted] if key in doc}
            for doc in docs
        ]

    @staticmethod
    def _matches(doc: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
        return all(doc.get(key) == value for key, value in filter.items())
