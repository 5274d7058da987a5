"""
Document count summary used for verification after a seeding run.
"""

from typing import Dict, Mapping

from .slot_seeder import DocumentStoreProtocol

SUMMARY_ORDER = ("users", "salons", "services", "customers", "time_slots")


def collection_counts(stores: Mapping[str, DocumentStoreProtocol]) -> Dict[str, int]:
    """Count documents per collection plus the slots still marked available."""
    counts = {name: stores[name].count_documents() for name in SUMMARY_ORDER if name in stores}

    if "time_slots" in stores:
        counts["available_slots"] = stores["time_slots"].count_documents({"isAvailable": True})

    return counts
