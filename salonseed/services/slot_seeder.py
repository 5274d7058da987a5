"""
Application service for persisting generated time slots.

The service asks the domain-level ``SlotGenerator`` for the complete slot
set and writes it through a document store in fixed-size, strictly
sequential batches. The store is a simple protocol so the real MongoDB
adapter and the in-memory store are interchangeable, and tests can pass
a stub.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, TypeVar

from ..domain.exceptions import ConfigurationError, PersistenceError, StoreError
from ..domain.slot_generator import SlotGenerator

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100

T = TypeVar("T")


class DocumentStoreProtocol(Protocol):
    """Protocol describing the store behaviour needed by the seeders."""

    def insert_many(self, records: Sequence[Mapping[str, Any]]) -> int:
        """Insert all records in one call and return the inserted count."""

    def delete_all(self) -> int:
        """Delete every document and return the deleted count."""

    def count_documents(self, filter: Mapping[str, Any] | None = None) -> int:
        """Count documents matching ``filter`` (all when omitted)."""

    def update_fields(self, doc_id: Any, fields: Mapping[str, Any]) -> int:
        """Set ``fields`` on one document; return the matched count."""

    def find_all(self, projection: Mapping[str, Any] | None = None) -> List[Dict[str, Any]]:
        """Return every document, optionally projected."""


@dataclass(frozen=True)
class BatchOutcome:
    """One successfully written batch."""
    index: int
    size: int
    inserted: int


@dataclass
class SeedResult:
    """Structured report of a slot seeding run."""
    generated: int
    available: int
    batches: List[BatchOutcome] = field(default_factory=list)
    deleted: int = 0
    stored: Optional[int] = None

    @property
    def inserted(self) -> int:
        return sum(batch.inserted for batch in self.batches)

    @property
    def available_ratio(self) -> float:
        return self.available / self.generated if self.generated else 0.0


def chunk(records: Sequence[T], batch_size: int) -> List[Sequence[T]]:
    """
    Split records into consecutive chunks of at most ``batch_size``.

    Example: 672 records, batch_size 100 -> six chunks of 100, one of 72.
    """
    if batch_size <= 0:
        raise ConfigurationError(f"Batch size must be positive, got {batch_size}")
    return [records[i:i + batch_size] for i in range(0, len(records), batch_size)]


class SlotSeedService:
    """
    Orchestrates slot generation and batched persistence.

    Single pass, no retry and no rollback: if a batch fails, earlier
    batches stay in the store and a PersistenceError reports how many made it.
    """

    def __init__(
        self,
        store: DocumentStoreProtocol,
        slot_generator: SlotGenerator,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ConfigurationError(f"Batch size must be positive, got {batch_size}")

        self._store = store
        self._slot_generator = slot_generator
        self._batch_size = batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def seed(
        self,
        *,
        start_date: date,
        days: int,
        salon_ids: Sequence[str],
        replace_existing: bool = False,
        verify: bool = True,
        on_batch: Callable[[BatchOutcome, int], None] | None = None,
    ) -> SeedResult:
        """
        Generate all slots and write them to the store.

        Args:
            start_date: First day to generate
            days: Number of days
            salon_ids: Salons to generate slots for, in order
            replace_existing: Delete every existing slot before writing
            verify: Count stored documents after the last batch
            on_batch: Called after each successful batch with the outcome
                and the running inserted total

        Raises:
            ConfigurationError: Invalid inputs; nothing has been written
            PersistenceError: A batch write failed
        """
        slots = self._slot_generator.generate(
            start_date=start_date,
            days=days,
            salon_ids=salon_ids,
        )
        documents = [slot.to_document() for slot in slots]

        result = SeedResult(
            generated=len(slots),
            available=sum(1 for slot in slots if slot.is_available),
        )
        logger.info(
            "Generated %d slots (%d days x %d salons x %d per day)",
            result.generated, days, len(salon_ids), len(self._slot_generator.template),
        )

        if replace_existing:
            result.deleted = self._store.delete_all()
            logger.info("Deleted %d existing slot(s)", result.deleted)

        result.batches = self.write_batches(documents, on_batch=on_batch)

        if verify:
            result.stored = self._store.count_documents()
            if replace_existing and result.stored != result.inserted:
                logger.warning("Stored count %d differs from inserted %d", result.stored, result.inserted)

        logger.info("Inserted %d slots in %d batch(es)", result.inserted, len(result.batches))
        return result

    def write_batches(
        self,
        documents: Sequence[Mapping[str, Any]],
        on_batch: Callable[[BatchOutcome, int], None] | None = None,
    ) -> List[BatchOutcome]:
        """Write documents batch by batch, strictly in order."""
        outcomes: List[BatchOutcome] = []
        inserted_total = 0

        for index, batch in enumerate(chunk(documents, self._batch_size), start=1):
            try:
                inserted = self._store.insert_many(batch)
            except StoreError as exc:
                raise PersistenceError(
                    f"Batch {index} failed after {len(outcomes)} successful batch(es) "
                    f"and {inserted_total} inserted slot(s): {exc}",
                    batches_written=len(outcomes),
                    inserted_count=inserted_total,
                ) from exc

            outcome = BatchOutcome(index=index, size=len(batch), inserted=inserted)
            outcomes.append(outcome)
            inserted_total += inserted
            logger.debug("Batch %d: %d slot(s), running total %d", index, inserted, inserted_total)

            if on_batch is not None:
                on_batch(outcome, inserted_total)

        return outcomes
