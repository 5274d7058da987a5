"""
Loading and inserting the literal reference documents (users, salons,
customers, services).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

import pendulum
import yaml

from ..domain.exceptions import ConfigurationError
from .slot_seeder import DocumentStoreProtocol

logger = logging.getLogger(__name__)

# Insertion order matters only for readability of the log output
REFERENCE_COLLECTIONS = ("users", "salons", "customers", "services")

SALON_DEFAULTS: Dict[str, Any] = {
    "reviews": [],
    "images": [],
    "services": [],
    "openTime": "09:00",
    "closeTime": "18:00",
    "available": True,
    "bookings": [],
    "slotsBooked": [],
}


def default_reference_path() -> Path:
    """Get the path of the bundled reference data file."""
    return Path(__file__).parent.parent / "data" / "reference_data.yaml"


def load_reference_data(path: Path | None = None) -> Dict[str, List[Dict[str, Any]]]:
    """
    Load reference documents from YAML.

    Salons are completed with the booking app's default fields and
    customer ``createdAt`` strings become datetimes.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the file is not a mapping of document lists
    """
    data_path = path or default_reference_path()
    if not data_path.exists():
        raise FileNotFoundError(f"Reference data file not found: {data_path}")

    try:
        with open(data_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {data_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError("Reference data must contain a mapping at the root level.")

    data: Dict[str, List[Dict[str, Any]]] = {}
    for name in REFERENCE_COLLECTIONS:
        documents = raw.get(name) or []
        if not isinstance(documents, list):
            raise ConfigurationError(f"Reference data '{name}' must be a list of documents")
        data[name] = [dict(doc) for doc in documents]

    data["salons"] = [complete_salon(doc) for doc in data["salons"]]
    for customer in data["customers"]:
        if isinstance(customer.get("createdAt"), str):
            customer["createdAt"] = pendulum.parse(customer["createdAt"])

    return data


def complete_salon(document: Mapping[str, Any]) -> Dict[str, Any]:
    """Fill in default salon fields that the document does not set."""
    salon = {key: (list(value) if isinstance(value, list) else value)
             for key, value in SALON_DEFAULTS.items()}
    salon.update(document)
    return salon


def load_json_array(path: Path) -> List[Dict[str, Any]]:
    """
    Load documents from a JSON array file, the format ``mongoimport --jsonArray`` takes.
    """
    if not path.exists():
        raise FileNotFoundError(f"Import file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            documents = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(documents, list) or not all(isinstance(d, dict) for d in documents):
        raise ConfigurationError(f"{path} must contain a JSON array of objects")

    return documents


class ReferenceDataSeeder:
    """Inserts each reference collection in a single insert_many call."""

    def __init__(
        self,
        stores: Mapping[str, DocumentStoreProtocol],
        data: Mapping[str, List[Dict[str, Any]]],
    ) -> None:
        missing = [name for name in REFERENCE_COLLECTIONS if name not in stores]
        if missing:
            raise ConfigurationError(f"No store configured for: {', '.join(missing)}")

        self._stores = stores
        self._data = data

    def seed(self) -> Dict[str, int]:
        """
        Insert users, salons, customers and services in that order.

        Returns:
            Document count per collection after insertion
        """
        counts: Dict[str, int] = {}

        for name in REFERENCE_COLLECTIONS:
            documents = self._data.get(name, [])
            store = self._stores[name]
            if documents:
                store.insert_many(documents)
            counts[name] = store.count_documents()
            logger.info("Inserted %d %s (collection now holds %d)", len(documents), name, counts[name])

        return counts
