"""
Core logic for generating synthetic availability time slots.

Pure domain code: no database, no I/O. The only side input is the random
source used for the availability draw, which callers can inject.
"""

import random
from collections import Counter
from datetime import date
from typing import List, Sequence, Tuple

import pendulum
from pendulum import Date

from .exceptions import ConfigurationError
from .models import SlotTemplate, TimeSlot

DEFAULT_DURATION_MINUTES = 30
DEFAULT_AVAILABILITY_PROBABILITY = 0.7


class SlotGenerator:
    """
    Builds the full set of time slots for a date range and a list of salons.

    Order of generation:
    1. Days, ascending from the start date
    2. Salons, in the order given
    3. Template entries, in template order

    Slot ids are assigned sequentially over that whole ordering, starting at 1.
    """

    def __init__(
        self,
        template: SlotTemplate,
        duration_minutes: int = DEFAULT_DURATION_MINUTES,
        availability_probability: float = DEFAULT_AVAILABILITY_PROBABILITY,
        rng: random.Random | None = None,
        id_prefix: str = "slot",
        id_width: int = 3,
    ):
        if duration_minutes <= 0:
            raise ConfigurationError(
                f"Slot duration must be positive, got {duration_minutes}"
            )
        if not 0.0 <= availability_probability <= 1.0:
            raise ConfigurationError(
                f"Availability probability must be between 0 and 1, got {availability_probability}"
            )
        if id_width <= 0:
            raise ConfigurationError(f"Id width must be positive, got {id_width}")

        self.template = template
        self.duration_minutes = duration_minutes
        self.availability_probability = availability_probability
        self.rng = rng if rng is not None else random.SystemRandom()
        self.id_prefix = id_prefix
        self.id_width = id_width

        # Reject templates whose last slot would run past midnight
        for hour, minute in template:
            end_hour, _ = self._end_of(hour, minute)
            if end_hour > 23:
                raise ConfigurationError(
                    f"Slot starting at {self.format_time(hour, minute)} ends after midnight"
                )

    def generate(
        self,
        start_date: date,
        days: int,
        salon_ids: Sequence[str],
    ) -> List[TimeSlot]:
        """
        Generate every slot for ``days`` days starting at ``start_date``.

        Args:
            start_date: First calendar day (date or pendulum Date)
            days: Number of consecutive days to cover
            salon_ids: Salon identifiers, in generation order

        Returns:
            List of TimeSlot objects, len = days × salons × template entries

        Raises:
            ConfigurationError: If days is not positive or salon ids are empty/duplicated
        """
        self._validate_run(days, salon_ids)

        first_day = self._to_pendulum_date(start_date)
        slots: List[TimeSlot] = []
        counter = 1

        for day_offset in range(days):
            date_str = first_day.add(days=day_offset).to_date_string()

            for salon_id in salon_ids:
                for hour, minute in self.template:
                    end_hour, end_minute = self._end_of(hour, minute)

                    slots.append(
                        TimeSlot(
                            id=self.format_id(counter),
                            date=date_str,
                            start_time=self.format_time(hour, minute),
                            end_time=self.format_time(end_hour, end_minute),
                            is_available=self._draw_availability(),
                            salon_id=salon_id,
                        )
                    )
                    counter += 1

        return slots

    def expected_count(self, days: int, salon_count: int) -> int:
        """Number of slots a run of this shape produces."""
        return days * salon_count * len(self.template)

    def format_id(self, sequence: int) -> str:
        """Zero-padded slot id, e.g. 7 -> 'slot007'."""
        return f"{self.id_prefix}{sequence:0{self.id_width}d}"

    @staticmethod
    def format_time(hour: int, minute: int) -> str:
        """Format a clock time as 24-hour HH:MM."""
        return f"{hour:02d}:{minute:02d}"

    def _end_of(self, hour: int, minute: int) -> Tuple[int, int]:
        """
        Add the slot duration to a start time.

        Minute overflow carries into the hour: 11:30 + 30 -> 12:00.
        """
        extra_hours, end_minute = divmod(minute + self.duration_minutes, 60)
        return hour + extra_hours, end_minute

    def _draw_availability(self) -> bool:
        """One independent Bernoulli trial per slot."""
        return self.rng.random() < self.availability_probability

    @staticmethod
    def _validate_run(days: int, salon_ids: Sequence[str]) -> None:
        if days <= 0:
            raise ConfigurationError(f"Day count must be positive, got {days}")
        if not salon_ids:
            raise ConfigurationError("At least one salon id is required")

        duplicates = sorted(s for s, n in Counter(salon_ids).items() if n > 1)
        if duplicates:
            raise ConfigurationError(f"Duplicate salon ids: {', '.join(duplicates)}")

    @staticmethod
    def _to_pendulum_date(value: date) -> Date:
        if isinstance(value, Date):
            return value
        return pendulum.date(value.year, value.month, value.day)
