"""
MongoDB adapters built on pymongo.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Sequence

import certifi
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from ..config import MongoConfig
from ..domain.exceptions import ConnectionFailedError, StoreError

logger = logging.getLogger(__name__)


def connect(config: MongoConfig) -> Database:
    """
    Open a client, check the server answers, and return the database handle.

    The handle is passed explicitly to the stores; nothing is kept globally.

    Raises:
        ConnectionFailedError: If the client cannot be built or the ping fails
    """
    options: Dict[str, Any] = {
        "serverSelectionTimeoutMS": config.timeout_ms,
        "connectTimeoutMS": config.timeout_ms,
        "socketTimeoutMS": config.timeout_ms,
    }
    if config.tls:
        options["tls"] = True
        options["tlsCAFile"] = certifi.where()

    client: MongoClient | None = None
    try:
        client = MongoClient(config.uri, **options)
        client.admin.command("ping")
    except ServerSelectionTimeoutError as exc:
        client.close()
        raise ConnectionFailedError(
            "Cannot reach MongoDB.\n"
            "• Check that the server is running and reachable.\n"
            "• Verify MONGODB_URI in your .env or mongodb.uri in config.yaml.\n"
            f"Underlying error: {exc}"
        ) from exc
    except PyMongoError as exc:
        # Malformed URI, unresolvable SRV host, or rejected credentials
        if client is not None:
            client.close()
        raise ConnectionFailedError(
            f"Cannot connect to MongoDB with the configured URI: {exc}"
        ) from exc

    logger.debug("Connected to MongoDB database %s", config.database)
    return client[config.database]


class MongoCollectionStore:
    """
    Document store backed by a single pymongo collection.

    Driver errors are translated into StoreError so callers never need to
    import pymongo.
    """

    def __init__(self, collection: Collection):
        self.collection = collection

    @property
    def name(self) -> str:
        return self.collection.name

    def insert_many(self, records: Sequence[Mapping[str, Any]]) -> int:
        """Insert documents in one call and return how many were inserted."""
        if not records:
            return 0
        try:
            result = self.collection.insert_many([dict(r) for r in records], ordered=True)
        except PyMongoError as exc:
            raise StoreError(f"insert_many into '{self.name}' failed: {exc}") from exc
        return len(result.inserted_ids)

    def delete_all(self) -> int:
        try:
            result = self.collection.delete_many({})
        except PyMongoError as exc:
            raise StoreError(f"delete_many on '{self.name}' failed: {exc}") from exc
        return result.deleted_count

    def count_documents(self, filter: Mapping[str, Any] | None = None) -> int:
        try:
            return self.collection.count_documents(dict(filter or {}))
        except PyMongoError as exc:
            raise StoreError(f"count_documents on '{self.name}' failed: {exc}") from exc

    def update_fields(self, doc_id: Any, fields: Mapping[str, Any]) -> int:
        """$set ``fields`` on the document with ``_id == doc_id``; returns matched count."""
        try:
            result = self.collection.update_one({"_id": doc_id}, {"$set": dict(fields)})
        except PyMongoError as exc:
            raise StoreError(f"update_one on '{self.name}' failed: {exc}") from exc
        return result.matched_count

    def find_all(self, projection: Mapping[str, Any] | None = None) -> List[Dict[str, Any]]:
        try:
            return list(self.collection.find({}, dict(projection) if projection else None))
        except PyMongoError as exc:
            raise StoreError(f"find on '{self.name}' failed: {exc}") from exc
