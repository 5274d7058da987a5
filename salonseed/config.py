"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from datetime import date
from pathlib import Path
from typing import Dict, List

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from .domain.models import DEFAULT_HOURS, DEFAULT_MINUTES

SALON_TYPES = ("hair-salon", "barber-shop", "nail-salon", "bridal-salon")


class MongoConfig(BaseModel):
    """Connection settings for the MongoDB server."""
    uri: str = "mongodb://localhost:27017"
    database: str = "salon_booking"
    tls: bool = False
    timeout_ms: int = 20000

    @field_validator("timeout_ms")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("timeout_ms must be greater than zero")
        return value


class CollectionsConfig(BaseModel):
    """Collection names used by the booking application."""
    users: str = "users"
    salons: str = "salons"
    customers: str = "customers"
    services: str = "services"
    time_slots: str = "time_slots"


class SlotsConfig(BaseModel):
    """Settings for the time slot generator."""
    start_date: date = date(2025, 10, 11)
    days: int = 7
    salon_ids: List[str] = Field(
        default_factory=lambda: [f"salon{i}" for i in range(1, 7)]
    )
    hours: List[int] = Field(default_factory=lambda: list(DEFAULT_HOURS))
    minutes: List[int] = Field(default_factory=lambda: list(DEFAULT_MINUTES))
    duration_minutes: int = 30
    availability_probability: float = 0.7
    batch_size: int = 100
    id_prefix: str = "slot"
    id_width: int = 3

    @field_validator("days", "duration_minutes", "batch_size", "id_width")
    @classmethod
    def validate_positive(cls, value: int, info: ValidationInfo) -> int:
        """Counts and sizes must be positive."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be greater than zero, got {value}")
        return value

    @field_validator("availability_probability")
    @classmethod
    def validate_probability(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"availability_probability must be between 0 and 1, got {value}")
        return value

    @field_validator("hours")
    @classmethod
    def validate_hours(cls, value: List[int]) -> List[int]:
        """Validate hours are between 0 and 23 and the list is not empty."""
        if not value:
            raise ValueError("hours must contain at least one hour")
        invalid = [h for h in value if not 0 <= h <= 23]
        if invalid:
            raise ValueError(f"Hours must be between 0 and 23, got {invalid}")
        return value

    @field_validator("minutes")
    @classmethod
    def validate_minutes(cls, value: List[int]) -> List[int]:
        if not value:
            raise ValueError("minutes must contain at least one minute")
        invalid = [m for m in value if not 0 <= m <= 59]
        if invalid:
            raise ValueError(f"Minutes must be between 0 and 59, got {invalid}")
        return value

    @field_validator("salon_ids")
    @classmethod
    def validate_salon_ids(cls, value: List[str]) -> List[str]:
        """Ensure salon ids are present and unique."""
        if not value:
            raise ValueError("salon_ids must contain at least one salon")
        seen: set[str] = set()
        for salon_id in value:
            if salon_id in seen:
                raise ValueError(f"Duplicate salon id detected: {salon_id}")
            seen.add(salon_id)
        return value


def _default_salon_types() -> Dict[str, str]:
    return {
        "salon1": "hair-salon",
        "salon2": "hair-salon",
        "salon3": "barber-shop",
        "salon4": "bridal-salon",
        "salon5": "barber-shop",
        "salon6": "nail-salon",
        "salon7": "nail-salon",
        "salon8": "bridal-salon",
    }


class AppConfig(BaseModel):
    """Application configuration."""
    mongodb: MongoConfig = Field(default_factory=MongoConfig)
    collections: CollectionsConfig = Field(default_factory=CollectionsConfig)
    slots: SlotsConfig = Field(default_factory=SlotsConfig)
    salon_types: Dict[str, str] = Field(default_factory=_default_salon_types)

    @field_validator("salon_types")
    @classmethod
    def validate_salon_types(cls, value: Dict[str, str]) -> Dict[str, str]:
        """Only the types the booking frontend knows about are allowed."""
        unknown = sorted({t for t in value.values() if t not in SALON_TYPES})
        if unknown:
            raise ValueError(
                f"Unknown salon type(s): {', '.join(unknown)}. "
                f"Allowed: {', '.join(SALON_TYPES)}"
            )
        return value

    @model_validator(mode="after")
    def validate_collections_distinct(self) -> "AppConfig":
        """Two logical collections must not share one physical collection."""
        names = list(self.collections.model_dump().values())
        if len(set(names)) != len(names):
            raise ValueError("Collection names must be distinct")
        return self

    def apply_environment(self) -> "AppConfig":
        """
        Override connection settings from the environment (.env supported).

        MONGODB_URI and MONGO_DB win over the YAML values when set.
        """
        load_dotenv()

        uri = os.getenv("MONGODB_URI", "").strip()
        if uri:
            self.mongodb.uri = uri

        database = os.getenv("MONGO_DB", "").strip()
        if database:
            self.mongodb.database = database

        return self

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of salonseed/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path


def load_config(config_path: Path | None = None) -> AppConfig:
    """
    Load configuration for a CLI run.

    An explicitly given path must exist. Without one, the default location
    is tried and built-in defaults are used when no file is there.
    """
    if config_path is not None:
        config = AppConfig.load_from_yaml(config_path)
    else:
        default_path = get_default_config_path()
        config = AppConfig.load_from_yaml(default_path) if default_path.exists() else AppConfig()

    return config.apply_environment()
