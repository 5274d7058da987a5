"""
One-off salon maintenance: delete-and-reimport and the ``type`` field patch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

from ..config import SALON_TYPES
from .slot_seeder import DocumentStoreProtocol

logger = logging.getLogger(__name__)


@dataclass
class TypePatchResult:
    """Outcome of applying a salon type mapping."""
    matched: List[str] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)
    counts_by_type: Dict[str, int] = field(default_factory=dict)
    salons: List[Dict[str, Any]] = field(default_factory=list)


class SalonMaintenance:
    """
    Operator actions on the salons collection.

    Reseeding is two separate steps on purpose; nothing ties the delete
    and the reimport together.
    """

    def __init__(self, store: DocumentStoreProtocol) -> None:
        self._store = store

    def delete_all(self) -> int:
        deleted = self._store.delete_all()
        logger.info("Deleted %d salon(s)", deleted)
        return deleted

    def reimport(self, salons: Sequence[Mapping[str, Any]]) -> int:
        """Insert salon documents; returns the salon count afterwards."""
        if salons:
            self._store.insert_many(salons)
        total = self._store.count_documents()
        logger.info("Imported %d salon(s), collection now holds %d", len(salons), total)
        return total

    def patch_types(self, salon_types: Mapping[str, str]) -> TypePatchResult:
        """
        Set ``type`` on each salon in the mapping.

        Salons missing from the store are reported as unmatched rather than
        treated as errors: the mapping may cover more salons than were seeded.
        """
        result = TypePatchResult()

        for salon_id, salon_type in salon_types.items():
            if self._store.update_fields(salon_id, {"type": salon_type}):
                result.matched.append(salon_id)
            else:
                result.unmatched.append(salon_id)
                logger.warning("Salon %s not found, type %s not applied", salon_id, salon_type)

        result.counts_by_type = self.counts_by_type()
        result.salons = self._store.find_all({"_id": 1, "name": 1, "type": 1})
        return result

    def counts_by_type(self, types: Sequence[str] = SALON_TYPES) -> Dict[str, int]:
        return {salon_type: self._store.count_documents({"type": salon_type}) for salon_type in types}
