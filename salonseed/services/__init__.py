"""
Service layer helpers that orchestrate stores and domain logic.
"""

from .reference_seeder import ReferenceDataSeeder, load_json_array, load_reference_data
from .salon_maintenance import SalonMaintenance, TypePatchResult
from .slot_seeder import (
    BatchOutcome,
    DocumentStoreProtocol,
    SeedResult,
    SlotSeedService,
    chunk,
)
from .summary import collection_counts

__all__ = [
    "BatchOutcome",
    "DocumentStoreProtocol",
    "ReferenceDataSeeder",
    "SalonMaintenance",
    "SeedResult",
    "SlotSeedService",
    "TypePatchResult",
    "chunk",
    "collection_counts",
    "load_json_array",
    "load_reference_data",
]
