"""
Tests for the CLI commands, run against in-memory stores.
"""

from datetime import date

import pytest
from pymongo.errors import ConfigurationError as DriverConfigurationError
from typer.testing import CliRunner

from salonseed import __version__
from salonseed.adapters import mongo_store
from salonseed.cli.app import _parse_start, app
from salonseed.config import AppConfig

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("salonseed.config.get_default_config_path", lambda: tmp_path / "config.yaml")
    monkeypatch.delenv("MONGODB_URI", raising=False)
    monkeypatch.delenv("MONGO_DB", raising=False)


def test_generate_slots_dry_run():
    result = runner.invoke(app, ["generate-slots", "--dry-run", "--seed", "11"])

    assert result.exit_code == 0, result.output
    assert "DRY RUN" in result.output
    assert "Batch 7: 72 slot(s) (total 672)" in result.output
    assert "672" in result.output


def test_generate_slots_with_options():
    result = runner.invoke(
        app,
        [
            "generate-slots", "--dry-run",
            "--start", "2025-11-01", "--days", "2",
            "-s", "salon7", "-s", "salon8",
            "--batch-size", "50",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Batch 2: 14 slot(s) (total 64)" in result.output


def test_parse_start_returns_date():
    config = AppConfig()

    assert _parse_start("2025-11-01", config) == date(2025, 11, 1)
    assert _parse_start(None, config) == config.slots.start_date


def test_generate_slots_invalid_days_fails():
    result = runner.invoke(app, ["generate-slots", "--dry-run", "--days", "0"])

    assert result.exit_code == 1
    assert "Day count must be positive" in result.output


def test_generate_slots_invalid_start_fails():
    result = runner.invoke(app, ["generate-slots", "--dry-run", "--start", "11.10.2025"])

    assert result.exit_code == 1


def test_seed_all_dry_run():
    result = runner.invoke(app, ["seed-all", "--dry-run", "--seed", "3"])

    assert result.exit_code == 0, result.output
    assert "Database population complete" in result.output
    assert "available_slots" in result.output


def test_reseed_salons_dry_run():
    result = runner.invoke(app, ["reseed-salons", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Deleted 0 salon(s)" in result.output
    assert "6 salon(s) in collection" in result.output


def test_patch_salon_types_dry_run_reports_missing():
    result = runner.invoke(app, ["patch-salon-types", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Updated 0 salon(s)" in result.output
    assert "salon8" in result.output


def test_summary_dry_run():
    result = runner.invoke(app, ["summary", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "DRY RUN" in result.output
    assert "available_slots" in result.output


def test_summary_bad_uri_exits_with_error(monkeypatch):
    def reject_uri(uri, **options):
        raise DriverConfigurationError("The DNS query name does not exist: _mongodb._tcp.bad")

    monkeypatch.setenv("MONGODB_URI", "mongodb+srv://bad uri")
    monkeypatch.setattr(mongo_store, "MongoClient", reject_uri)

    result = runner.invoke(app, ["summary"])

    assert result.exit_code == 1
    assert "Cannot connect to MongoDB" in result.output


def test_explicit_missing_config_fails(tmp_path):
    result = runner.invoke(app, ["generate-slots", "--dry-run", "--config", str(tmp_path / "nope.yaml")])

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
