"""
Tests for the slot generator.
"""

import random
from collections import defaultdict
from datetime import date

import pendulum
import pytest

from salonseed.domain.exceptions import ConfigurationError
from salonseed.domain.models import SlotTemplate
from salonseed.domain.slot_generator import SlotGenerator

SALONS = ["salon1", "salon2", "salon3", "salon4", "salon5", "salon6"]


class SequenceRandom:
    """Random source returning a fixed, repeating sequence of draws."""

    def __init__(self, values):
        self._values = list(values)
        self._index = 0

    def random(self):
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


def _minutes(clock: str) -> int:
    hour, minute = clock.split(":")
    return int(hour) * 60 + int(minute)


def _generator(**kwargs) -> SlotGenerator:
    kwargs.setdefault("rng", random.Random(42))
    return SlotGenerator(template=SlotTemplate.from_hours(), **kwargs)


class TestSlotGenerator:
    """Tests for SlotGenerator."""

    def test_week_for_six_salons_yields_672_slots(self):
        """7 days × 6 salons × 16 slots per day."""
        generator = _generator()

        slots = generator.generate(start_date=date(2025, 10, 11), days=7, salon_ids=SALONS)

        assert len(slots) == 672
        assert generator.expected_count(days=7, salon_count=6) == 672

    def test_every_slot_lasts_thirty_minutes(self):
        slots = _generator().generate(start_date=date(2025, 10, 11), days=2, salon_ids=SALONS)

        for slot in slots:
            assert _minutes(slot.end_time) - _minutes(slot.start_time) == 30

    def test_half_past_rolls_over_to_next_hour(self):
        """11:30 ends at 12:00, 12:00 ends at 12:30."""
        generator = SlotGenerator(
            template=SlotTemplate(entries=((11, 30), (12, 0))),
            rng=random.Random(1),
        )

        slots = generator.generate(start_date=date(2025, 10, 11), days=1, salon_ids=["salon1"])

        assert (slots[0].start_time, slots[0].end_time) == ("11:30", "12:00")
        assert (slots[1].start_time, slots[1].end_time) == ("12:00", "12:30")

    def test_ids_are_sequential_and_zero_padded(self):
        slots = _generator().generate(start_date=date(2025, 10, 11), days=7, salon_ids=SALONS)

        assert slots[0].id == "slot001"
        assert slots[9].id == "slot010"
        assert slots[-1].id == "slot672"

        numbers = [int(slot.id[len("slot"):]) for slot in slots]
        assert numbers == list(range(1, 673))
        assert len({slot.id for slot in slots}) == len(slots)

    def test_id_prefix_and_width_are_configurable(self):
        generator = _generator(id_prefix="ts-", id_width=5)

        slots = generator.generate(start_date=date(2025, 10, 11), days=1, salon_ids=["salon1"])

        assert slots[0].id == "ts-00001"
        assert slots[-1].id == "ts-00016"

    def test_nested_order_days_then_salons_then_template(self):
        template = SlotTemplate(entries=((9, 0), (9, 30)))
        generator = SlotGenerator(template=template, rng=random.Random(3))

        slots = generator.generate(
            start_date=date(2025, 10, 11), days=2, salon_ids=["salon2", "salon1"]
        )

        assert [(s.date, s.salon_id, s.start_time) for s in slots] == [
            ("2025-10-11", "salon2", "09:00"),
            ("2025-10-11", "salon2", "09:30"),
            ("2025-10-11", "salon1", "09:00"),
            ("2025-10-11", "salon1", "09:30"),
            ("2025-10-12", "salon2", "09:00"),
            ("2025-10-12", "salon2", "09:30"),
            ("2025-10-12", "salon1", "09:00"),
            ("2025-10-12", "salon1", "09:30"),
        ]

    def test_each_salon_day_matches_template_exactly(self):
        template = SlotTemplate.from_hours()
        expected = {SlotGenerator.format_time(h, m) for h, m in template}
        slots = _generator().generate(start_date=date(2025, 10, 11), days=7, salon_ids=SALONS)

        starts = defaultdict(list)
        for slot in slots:
            starts[(slot.salon_id, slot.date)].append(slot.start_time)

        assert len(starts) == 42
        for start_times in starts.values():
            assert len(start_times) == len(set(start_times))
            assert set(start_times) == expected

    def test_dates_cross_month_boundary(self):
        slots = _generator().generate(
            start_date=pendulum.date(2025, 10, 30), days=3, salon_ids=["salon1"]
        )

        assert sorted({s.date for s in slots}) == ["2025-10-30", "2025-10-31", "2025-11-01"]

    def test_availability_is_strictly_below_probability(self):
        """A draw equal to p counts as booked."""
        generator = SlotGenerator(
            template=SlotTemplate(entries=((9, 0), (9, 30), (10, 0))),
            availability_probability=0.7,
            rng=SequenceRandom([0.69, 0.7, 0.71]),
        )

        slots = generator.generate(start_date=date(2025, 10, 11), days=1, salon_ids=["salon1"])

        assert [s.is_available for s in slots] == [True, False, False]

    def test_seeded_runs_are_reproducible(self):
        first = _generator(rng=random.Random(2025)).generate(date(2025, 10, 11), 7, SALONS)
        second = _generator(rng=random.Random(2025)).generate(date(2025, 10, 11), 7, SALONS)

        assert first == second

    def test_available_fraction_close_to_probability(self):
        """Over 10 000 slots the available share lands near 0.7."""
        generator = _generator(rng=random.Random(7))
        salons = [f"salon{i}" for i in range(1, 26)]

        slots = generator.generate(start_date=date(2025, 1, 1), days=25, salon_ids=salons)

        assert len(slots) == 10_000
        ratio = sum(s.is_available for s in slots) / len(slots)
        assert 0.68 <= ratio <= 0.72

    def test_probability_bounds_are_respected(self):
        always = _generator(availability_probability=1.0).generate(date(2025, 10, 11), 1, SALONS)
        never = _generator(availability_probability=0.0).generate(date(2025, 10, 11), 1, SALONS)

        assert all(s.is_available for s in always)
        assert not any(s.is_available for s in never)

    def test_default_random_source_is_used_when_none_given(self):
        generator = SlotGenerator(template=SlotTemplate.from_hours())

        assert isinstance(generator.rng, random.SystemRandom)


class TestSlotGeneratorValidation:
    """Invalid inputs fail before anything is produced."""

    def test_non_positive_days_raises_error(self):
        with pytest.raises(ConfigurationError, match="Day count must be positive"):
            _generator().generate(start_date=date(2025, 10, 11), days=0, salon_ids=SALONS)

    def test_empty_salon_list_raises_error(self):
        with pytest.raises(ConfigurationError, match="At least one salon"):
            _generator().generate(start_date=date(2025, 10, 11), days=1, salon_ids=[])

    def test_duplicate_salon_ids_raise_error(self):
        with pytest.raises(ConfigurationError, match="Duplicate salon ids: salon1"):
            _generator().generate(
                start_date=date(2025, 10, 11), days=1, salon_ids=["salon1", "salon2", "salon1"]
            )

    def test_every_duplicate_salon_id_is_reported_once(self):
        with pytest.raises(ConfigurationError, match="Duplicate salon ids: salon1, salon2$"):
            _generator().generate(
                start_date=date(2025, 10, 11),
                days=1,
                salon_ids=["salon2", "salon1", "salon2", "salon3", "salon1", "salon2"],
            )

    def test_probability_outside_unit_interval_raises_error(self):
        with pytest.raises(ConfigurationError, match="between 0 and 1"):
            _generator(availability_probability=1.5)

    def test_non_positive_duration_raises_error(self):
        with pytest.raises(ConfigurationError, match="duration must be positive"):
            _generator(duration_minutes=0)

    def test_slot_ending_after_midnight_raises_error(self):
        with pytest.raises(ConfigurationError, match="23:30 ends after midnight"):
            SlotGenerator(template=SlotTemplate(entries=((23, 30),)))
