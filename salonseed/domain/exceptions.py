"""
Domain-specific exception hierarchy for the seeding tools.
"""


class SeedError(Exception):
    """Base class for all application-level errors."""


class ConfigurationError(SeedError):
    """Raised when generator or seeding inputs are invalid. Nothing is written."""


class ConnectionFailedError(SeedError):
    """Raised when the database cannot be reached."""


class StoreError(SeedError):
    """Raised by store adapters when a driver call fails."""


class PersistenceError(SeedError):
    """
    Raised when a batch write fails part way through a run.

    Batches written before the failure stay in the store; the counts tell
    the operator how much of the run landed.
    """

    def __init__(self, message: str, batches_written: int, inserted_count: int):
        super().__init__(message)
        self.batches_written = batches_written
        self.inserted_count = inserted_count
