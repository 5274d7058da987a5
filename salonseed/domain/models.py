"""
Domain models for slot templates and generated time slots.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Sequence, Tuple

from .exceptions import ConfigurationError

# 09:00 - 18:00 with the 13:00 - 14:00 lunch hour left out
DEFAULT_HOURS: Tuple[int, ...] = (9, 10, 11, 12, 14, 15, 16, 17)
DEFAULT_MINUTES: Tuple[int, ...] = (0, 30)


@dataclass(frozen=True)
class SlotTemplate:
    """
    Ordered (hour, minute) start times that make up one salon day.

    Invariant: at least one entry, no duplicates, valid clock values.
    """
    entries: Tuple[Tuple[int, int], ...]

    def __post_init__(self):
        if not self.entries:
            raise ConfigurationError("Slot template must contain at least one start time")

        seen = set()
        for hour, minute in self.entries:
            if not 0 <= hour <= 23:
                raise ConfigurationError(f"Hour must be between 0 and 23, got {hour}")
            if not 0 <= minute <= 59:
                raise ConfigurationError(f"Minute must be between 0 and 59, got {minute}")
            if (hour, minute) in seen:
                raise ConfigurationError(
                    f"Duplicate template entry {hour:02d}:{minute:02d}"
                )
            seen.add((hour, minute))

    @classmethod
    def from_hours(
        cls,
        hours: Sequence[int] = DEFAULT_HOURS,
        minutes: Sequence[int] = DEFAULT_MINUTES,
    ) -> "SlotTemplate":
        """Build a template from every (hour, minute) combination, hours outermost."""
        if not hours:
            raise ConfigurationError("Slot template hour list is empty")
        if not minutes:
            raise ConfigurationError("Slot template minute list is empty")
        return cls(entries=tuple((hour, minute) for hour in hours for minute in minutes))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(self.entries)


@dataclass(frozen=True)
class TimeSlot:
    """
    A bookable half-hour window at one salon on one day.

    The salon is referenced by identifier only; readers join on ``salon_id``.
    """
    id: str
    date: str
    start_time: str
    end_time: str
    is_available: bool
    salon_id: str

    def to_document(self) -> Dict[str, Any]:
        """Return the document shape stored in the ``time_slots`` collection."""
        return {
            "_id": self.id,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "isAvailable": self.is_available,
            "salonId": self.salon_id,
        }

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: slot001 | 2025-10-11 09:00 – 09:30 | salon1 | available
        """
        state = "available" if self.is_available else "booked"
        return (
            f"{self.id} | {self.date} {self.start_time} – {self.end_time} "
            f"| {self.salon_id} | {state}"
        )
