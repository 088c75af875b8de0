"""fixtureid CLI.

Commands:
- init: Initialize database schema
- reconcile: Assign fixture ids for one store's location-master export
- batch: Run reconcile for many stores from a manifest CSV
- fixtures: List the latest fixture records of a store
"""

from __future__ import annotations

import asyncio
import csv
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from fixtureid.config import get_config
from fixtureid.core.logging import configure_logging
from fixtureid.db.connection import close_db, get_session, init_db
from fixtureid.db.repository import FixtureRepository
from fixtureid.errors import LocationMasterError
from fixtureid.ingestion.block_types import (
    BlockTypeClient,
    FixtureTypeResolver,
    parse_block_type_mapping,
)
from fixtureid.models import ReconciliationPlan
from fixtureid.pipeline.make_live import StorePipeline, run_batch
from fixtureid.pipeline.types import RunStatus, StoreJob, StoreRunResult

app = typer.Typer(
    name="fixtureid",
    help="fixtureid - stable fixture identities across store re-exports",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def _setup() -> None:
    config = get_config()
    configure_logging(config.log_level, config.json_logs, config.log_file)


def _resolver_provider(mapping_file: Path | None):
    """Static resolver from a JSON file, or the block-type endpoint."""
    if mapping_file is not None:
        resolver = FixtureTypeResolver(
            parse_block_type_mapping(json.loads(mapping_file.read_text()))
        )

        async def _static() -> FixtureTypeResolver:
            return resolver

        return _static, None

    client = BlockTypeClient()
    return client.fetch_resolver, client


def _plan_table(plan: ReconciliationPlan) -> Table:
    table = Table(title=f"Fixture IDs - {plan.store_id} ({plan.path.value})")
    table.add_column("Fixture ID", style="cyan")
    table.add_column("Fixture Type")
    table.add_column("Brand", style="green")
    table.add_column("Floor", justify="right")
    table.add_column("Position")

    for f in plan.final_fixtures:
        table.add_row(
            f.fixture_id,
            f.fixture_type,
            f.brand,
            str(f.floor_index),
            f"({f.pos_x:.2f}, {f.pos_y:.2f}, {f.pos_z:.2f})",
        )
    return table


def _print_result(result: StoreRunResult, verbose: bool = True) -> None:
    if result.status == RunStatus.FAILED:
        console.print(f"[red]✗[/red] {result.store_id}: {result.message}")
        return
    if result.status == RunStatus.SKIPPED:
        console.print(f"[yellow]⚠[/yellow] {result.store_id}: {result.message}")
        return

    plan = result.plan
    if verbose:
        console.print(_plan_table(plan))
        if plan.archive_list:
            console.print(f"[yellow]Moved to STORAGE ({len(plan.archive_list)}):[/yellow]")
            for fixture_id in plan.archive_list:
                console.print(f"  {fixture_id}", style="dim")

    console.print(
        f"[bold green]✓[/bold green] {result.store_id}: {result.message} "
        f"(unchanged={plan.unchanged_count}, additions={plan.addition_count}, "
        f"reused={plan.reused_from_deletions + plan.reused_from_archive}, "
        f"new={plan.generated_count})"
    )


@app.command()
def init(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables"),
):
    """Initialize database schema."""
    config = get_config()
    console.print(f"[bold]Initializing database:[/bold] {config.db.url}")

    async def _init():
        await init_db(drop=drop)
        await close_db()

    asyncio.run(_init())
    console.print("[bold green]✓[/bold green] Database initialized")


@app.command()
def reconcile(
    csv_file: Path = typer.Argument(..., help="location-master.csv export"),
    store_id: str = typer.Option(..., "--store", help="Store code"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without writing"),
    output: Path | None = typer.Option(None, "--out", "-o", help="Write updated CSV here"),
    mapping_file: Path | None = typer.Option(
        None, "--mapping", help="Block-type mapping JSON (skips the API call)"
    ),
):
    """Assign fixture ids for one store."""
    if not csv_file.exists():
        raise typer.BadParameter(f"File not found: {csv_file}")

    async def _reconcile() -> StoreRunResult:
        provider, client = _resolver_provider(mapping_file)
        try:
            pipeline = StorePipeline(provider)
            return await pipeline.run(store_id, csv_file.read_text(encoding="utf-8-sig"), dry_run)
        finally:
            if client is not None:
                await client.aclose()
            await close_db()

    result = asyncio.run(_reconcile())
    _print_result(result)

    if result.updated_csv is not None and output is not None:
        output.write_text(result.updated_csv)
        console.print(f"Updated CSV written to {output}")

    if result.status == RunStatus.FAILED:
        raise typer.Exit(code=1)


def _load_manifest(manifest: Path) -> list[StoreJob]:
    """Manifest rows: store_id,csv_path (header optional)."""
    jobs = []
    with manifest.open(newline="") as fh:
        for row in csv.reader(fh):
            if len(row) < 2 or row[0].strip().lower() == "store_id":
                continue
            csv_path = Path(row[1].strip())
            if not csv_path.is_absolute():
                csv_path = manifest.parent / csv_path
            if not csv_path.exists():
                raise LocationMasterError(f"Location master not found: {csv_path}")
            jobs.append(StoreJob(row[0].strip(), csv_path.read_text(encoding="utf-8-sig")))
    return jobs


@app.command()
def batch(
    manifest: Path = typer.Argument(..., help="CSV manifest of store_id,csv_path"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without writing"),
    stop_on_error: bool = typer.Option(False, "--stop-on-error", help="Abort after first failure"),
    mapping_file: Path | None = typer.Option(None, "--mapping", help="Block-type mapping JSON"),
):
    """Assign fixture ids for many stores."""
    try:
        jobs = _load_manifest(manifest)
    except (OSError, LocationMasterError) as e:
        console.print(f"[bold red]✗ Invalid manifest:[/bold red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[bold]Processing {len(jobs)} store(s)[/bold]{' (dry run)' if dry_run else ''}")

    async def _batch():
        provider, client = _resolver_provider(mapping_file)
        try:
            pipeline = StorePipeline(provider)
            return await run_batch(
                pipeline, jobs, dry_run=dry_run, continue_on_error=not stop_on_error
            )
        finally:
            if client is not None:
                await client.aclose()
            await close_db()

    summary = asyncio.run(_batch())

    table = Table(title="Batch Results")
    table.add_column("Store", style="cyan")
    table.add_column("Status")
    table.add_column("Fixtures", justify="right")
    table.add_column("To STORAGE", justify="right")
    table.add_column("Message", style="dim")
    for r in summary.results:
        table.add_row(
            r.store_id,
            r.status.value,
            str(len(r.plan.final_fixtures)) if r.plan else "-",
            str(len(r.plan.archive_list)) if r.plan else "-",
            r.message,
        )
    console.print(table)
    console.print(
        f"\n[bold]Summary:[/bold] {summary.succeeded} succeeded, "
        f"{summary.failed} failed, {summary.skipped} skipped"
    )

    if summary.failed:
        raise typer.Exit(code=1)


@app.command()
def fixtures(
    store_id: str = typer.Option(..., "--store", help="Store code"),
    include_storage: bool = typer.Option(True, "--storage/--no-storage", help="Show STORAGE fixtures"),
):
    """List the latest fixture records of a store."""

    async def _list():
        try:
            async with get_session() as session:
                return await FixtureRepository(session).get_store_fixtures(store_id)
        finally:
            await close_db()

    records = asyncio.run(_list())
    if not include_storage:
        records = [r for r in records if r.is_active]

    if not records:
        console.print(f"[yellow]No fixtures found for store {store_id}[/yellow]")
        return

    table = Table(title=f"Fixtures - {store_id}")
    table.add_column("Fixture ID", style="cyan")
    table.add_column("Fixture Type")
    table.add_column("Brand", style="green")
    table.add_column("Floor", justify="right")
    table.add_column("Position")
    table.add_column("Created")
    for r in records:
        table.add_row(
            r.fixture_id,
            r.fixture_type,
            r.brand,
            str(r.floor_index),
            f"({r.pos_x:.2f}, {r.pos_y:.2f}, {r.pos_z:.2f})",
            r.created_at.isoformat(timespec="seconds"),
        )
    console.print(table)
    console.print(
        f"\n{sum(1 for r in records if r.is_active)} active, "
        f"{sum(1 for r in records if r.is_archived)} in STORAGE"
    )


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
