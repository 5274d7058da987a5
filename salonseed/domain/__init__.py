"""
Domain layer - Pure slot generation logic without external dependencies.
"""

from .exceptions import (
    ConfigurationError,
    ConnectionFailedError,
    PersistenceError,
    SeedError,
    StoreError,
)
from .models import SlotTemplate, TimeSlot
from .slot_generator import SlotGenerator

__all__ = [
    "ConfigurationError",
    "ConnectionFailedError",
    "PersistenceError",
    "SeedError",
    "StoreError",
    "SlotTemplate",
    "TimeSlot",
    "SlotGenerator",
]
