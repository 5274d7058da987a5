"""
Adapters layer - Document stores (MongoDB and in-memory).
"""

from .memory_store import InMemoryStore
from .mongo_store import MongoCollectionStore, connect

__all__ = ["InMemoryStore", "MongoCollectionStore", "connect"]
