"""
Main CLI application using Typer.
"""

import logging
import random
from datetime import date
from pathlib import Path
from typing import Annotated, Dict, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.memory_store import InMemoryStore
from ..adapters.mongo_store import MongoCollectionStore, connect
from ..config import AppConfig, load_config
from ..domain.exceptions import PersistenceError, SeedError
from ..domain.models import SlotTemplate
from ..domain.slot_generator import SlotGenerator
from ..services.reference_seeder import ReferenceDataSeeder, load_json_array, load_reference_data
from ..services.salon_maintenance import SalonMaintenance
from ..services.slot_seeder import BatchOutcome, DocumentStoreProtocol, SeedResult, SlotSeedService
from ..services.summary import collection_counts

app = typer.Typer(
    name="salonseed",
    help="Seed and patch the salon booking MongoDB database",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
DryRunOption = Annotated[bool, typer.Option("--dry-run", help="Use an in-memory store instead of MongoDB.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _open_stores(config: AppConfig, dry_run: bool) -> Dict[str, DocumentStoreProtocol]:
    """
    Build one store per logical collection.

    In dry-run mode every collection is an empty in-memory store.
    """
    names = config.collections.model_dump()

    if dry_run:
        console.print("[yellow]⚠  DRY RUN: using in-memory stores, MongoDB is not touched[/yellow]\n")
        return {key: InMemoryStore(name=name) for key, name in names.items()}

    db = connect(config.mongodb)
    return {key: MongoCollectionStore(db[name]) for key, name in names.items()}


def _build_slot_service(
    config: AppConfig,
    store: DocumentStoreProtocol,
    *,
    probability: Optional[float] = None,
    batch_size: Optional[int] = None,
    seed: Optional[int] = None,
) -> SlotSeedService:
    slots = config.slots
    generator = SlotGenerator(
        template=SlotTemplate.from_hours(slots.hours, slots.minutes),
        duration_minutes=slots.duration_minutes,
        availability_probability=slots.availability_probability if probability is None else probability,
        rng=random.Random(seed) if seed is not None else None,
        id_prefix=slots.id_prefix,
        id_width=slots.id_width,
    )
    return SlotSeedService(
        store=store,
        slot_generator=generator,
        batch_size=slots.batch_size if batch_size is None else batch_size,
    )


def _parse_start(start: Optional[str], config: AppConfig) -> date:
    if not start:
        return config.slots.start_date
    try:
        return pendulum.from_format(start, "YYYY-MM-DD").date()
    except ValueError as e:
        console.print(f"[red]Error parsing start date: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _print_batch(outcome: BatchOutcome, running_total: int) -> None:
    console.print(f"  [green]✓[/green] Batch {outcome.index}: {outcome.inserted} slot(s) (total {running_total})")


def _print_seed_result(result: SeedResult) -> None:
    table = Table(title="Time slot run", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold yellow")
    table.add_column("Value", justify="right")

    table.add_row("Generated", str(result.generated))
    table.add_row("Inserted", str(result.inserted))
    table.add_row("Batches", str(len(result.batches)))
    table.add_row("Available", f"{result.available} ({result.available_ratio:.0%})")
    if result.deleted:
        table.add_row("Deleted before run", str(result.deleted))
    if result.stored is not None:
        table.add_row("Stored in collection", str(result.stored))

    console.print()
    console.print(table)
    console.print()


def _print_counts(counts: Dict[str, int], title: str = "📊 Document Count Summary") -> None:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Collection", style="bold yellow")
    table.add_column("Documents", justify="right")

    for name, count in counts.items():
        table.add_row(name, str(count))

    console.print()
    console.print(table)
    console.print()


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    if isinstance(error, PersistenceError):
        console.print(
            f"[yellow]{error.batches_written} batch(es) / {error.inserted_count} slot(s) were written "
            "before the failure. Delete all slots and rerun to start clean.[/yellow]"
        )
    raise typer.Exit(1)


def _run_slots(
    config: AppConfig,
    stores: Dict[str, DocumentStoreProtocol],
    *,
    start: Optional[date] = None,
    days: Optional[int] = None,
    salon_ids: Optional[List[str]] = None,
    batch_size: Optional[int] = None,
    probability: Optional[float] = None,
    seed: Optional[int] = None,
    replace: bool = False,
) -> SeedResult:
    service = _build_slot_service(
        config,
        stores["time_slots"],
        probability=probability,
        batch_size=batch_size,
        seed=seed,
    )
    return service.seed(
        start_date=start or config.slots.start_date,
        days=config.slots.days if days is None else days,
        salon_ids=salon_ids or config.slots.salon_ids,
        replace_existing=replace,
        on_batch=_print_batch,
    )


@app.command()
def generate_slots(
    config_file: ConfigOption = None,
    start: Annotated[Optional[str], typer.Option("--start", help="First day (YYYY-MM-DD)")] = None,
    days: Annotated[Optional[int], typer.Option("--days", "-d", help="Number of days to generate")] = None,
    salons: Annotated[Optional[List[str]], typer.Option("--salon", "-s", help="Salon id (repeatable). Defaults to config.")] = None,
    batch_size: Annotated[Optional[int], typer.Option("--batch-size", help="Documents per insert_many call")] = None,
    probability: Annotated[Optional[float], typer.Option("--probability", "-p", help="Chance a slot starts out available")] = None,
    seed: Annotated[Optional[int], typer.Option("--seed", help="Random seed for a reproducible run")] = None,
    replace: Annotated[bool, typer.Option("--replace", help="Delete all existing slots first")] = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = False,
):
    """
    Generate availability time slots and insert them in batches.

    Examples:

        salonseed generate-slots
        salonseed generate-slots --start 2025-10-11 --days 7 -s salon1 -s salon2
        salonseed generate-slots --dry-run --seed 42
    """
    _configure_logging(verbose)
    try:
        config = load_config(config_file)
        start_date = _parse_start(start, config)
        stores = _open_stores(config, dry_run)

        console.print("[bold]📝 Generating time slots...[/bold]")
        result = _run_slots(
            config,
            stores,
            start=start_date,
            days=days,
            salon_ids=salons,
            batch_size=batch_size,
            probability=probability,
            seed=seed,
            replace=replace,
        )
        _print_seed_result(result)

    except (SeedError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def seed_reference(
    config_file: ConfigOption = None,
    data_file: Annotated[Optional[Path], typer.Option("--data", help="Reference data YAML. Defaults to the bundled file.")] = None,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = False,
):
    """
    Insert users, salons, customers and services.
    """
    _configure_logging(verbose)
    try:
        config = load_config(config_file)
        data = load_reference_data(data_file)
        stores = _open_stores(config, dry_run)

        counts = ReferenceDataSeeder(stores, data).seed()
        _print_counts(counts, title="Reference data")

    except (SeedError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def seed_all(
    config_file: ConfigOption = None,
    data_file: Annotated[Optional[Path], typer.Option("--data", help="Reference data YAML. Defaults to the bundled file.")] = None,
    seed: Annotated[Optional[int], typer.Option("--seed", help="Random seed for a reproducible run")] = None,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = False,
):
    """
    Populate the whole database: reference data, then time slots.
    """
    _configure_logging(verbose)
    try:
        config = load_config(config_file)
        data = load_reference_data(data_file)
        stores = _open_stores(config, dry_run)

        console.print("[bold cyan]🚀 Starting Salon Booking Database Population...[/bold cyan]\n")

        console.print("[bold]📝 Step 1: Inserting reference data...[/bold]")
        ReferenceDataSeeder(stores, data).seed()

        console.print("[bold]📝 Step 2: Generating time slots...[/bold]")
        result = _run_slots(config, stores, seed=seed)
        _print_seed_result(result)

        console.print("[green]✓ Database population complete![/green]")
        _print_counts(collection_counts(stores))

    except (SeedError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def reseed_salons(
    config_file: ConfigOption = None,
    from_file: Annotated[Optional[Path], typer.Option("--from-file", help="JSON array of salons to import instead of the bundled data")] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = False,
):
    """
    Delete every salon, then import salons again.
    """
    _configure_logging(verbose)
    try:
        config = load_config(config_file)
        salons = load_json_array(from_file) if from_file else load_reference_data()["salons"]

        if not yes and not dry_run:
            typer.confirm(
                f"Delete all documents in '{config.collections.salons}' and import {len(salons)} salon(s)?",
                abort=True,
            )

        stores = _open_stores(config, dry_run)
        maintenance = SalonMaintenance(stores["salons"])

        console.print("[bold]Step 1:[/bold] Deleting existing salons...")
        deleted = maintenance.delete_all()
        console.print(f"  Deleted {deleted} salon(s)")

        console.print("[bold]Step 2:[/bold] Importing salons...")
        total = maintenance.reimport(salons)
        console.print(f"[green]✓ {total} salon(s) in collection[/green]\n")

    except (SeedError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def patch_salon_types(
    config_file: ConfigOption = None,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = False,
):
    """
    Add the 'type' field to existing salons using the configured mapping.
    """
    _configure_logging(verbose)
    try:
        config = load_config(config_file)
        stores = _open_stores(config, dry_run)

        result = SalonMaintenance(stores["salons"]).patch_types(config.salon_types)

        console.print(f"[green]✓ Updated {len(result.matched)} salon(s)[/green]")
        if result.unmatched:
            console.print(f"[yellow]Not found: {', '.join(result.unmatched)}[/yellow]")

        table = Table(title="Current salon types", show_header=True, header_style="bold cyan")
        table.add_column("Id", style="bold yellow")
        table.add_column("Name")
        table.add_column("Type", style="dim")
        for salon in result.salons:
            table.add_row(str(salon.get("_id")), salon.get("name", ""), salon.get("type", "-"))
        console.print()
        console.print(table)

        _print_counts(result.counts_by_type, title="Count by type")

    except (SeedError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def summary(
    config_file: ConfigOption = None,
    dry_run: DryRunOption = False,
    verbose: VerboseOption = False,
):
    """
    Show document counts for every collection.
    """
    _configure_logging(verbose)
    try:
        config = load_config(config_file)
        stores = _open_stores(config, dry_run)
        _print_counts(collection_counts(stores))

    except (SeedError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]salonseed[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
