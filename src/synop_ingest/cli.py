#!/usr/bin/env python3
"""CLI for fetching SYNOP data from Météo-France and loading it into InfluxDB.

See https://donneespubliques.meteofrance.fr/?fond=produit&id_produit=90&id_rubrique=32

Usage:
    synop-ingest ingest --at 2023010106                          # One hourly snapshot
    synop-ingest ingest --from 202301 --to 202304                # Jan..Mar 2023 archives
    synop-ingest ingest --from 202301 --to 202302 --url http://localhost:8086 --db meteo
    synop-ingest stations                                        # Show the station list
    synop-ingest summary --from 202301 --to 202302               # Per-station summary
"""

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from pydantic import ValidationError
from rich.table import Table

from synop_ingest.config.settings import IngestConfig
from synop_ingest.data.frame import measures_to_frame, stations_to_frame, summarize_by_station
from synop_ingest.data.measure import Measure
from synop_ingest.data.station import stations_by_id
from synop_ingest.exceptions import SynopError, error_chain
from synop_ingest.fetch.cache import SynopCache
from synop_ingest.store.writer import InfluxSink, ingest_measures
from synop_ingest.utils.progress import (
    console,
    create_processing_progress,
    print_error,
    print_info,
    print_success,
    print_summary_table,
    print_warning,
    status_spinner,
)

app = typer.Typer(help="Fetch Météo-France SYNOP data and load it into a time-series store.")
logger = logging.getLogger(__name__)

# Exit code for invalid flag combinations
USAGE_ERROR = 2


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else (logging.WARNING if quiet else logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_config(config_file: Optional[Path], cache_dir: Optional[Path]) -> IngestConfig:
    """Load the configuration file, if any, and apply the cache dir override."""
    try:
        config = IngestConfig.from_file(config_file) if config_file else IngestConfig()
        if cache_dir is not None:
            config.fetch.cache_dir = cache_dir
    except (OSError, ValidationError) as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(1)
    return config


def check_mode(at: Optional[str], from_: Optional[str], to: Optional[str]) -> None:
    """Exactly one of --at or --from/--to must be given."""
    if at is None and from_ is None and to is None:
        print_error("Need to provide a date using --at or a range with --from and --to")
        raise typer.Exit(USAGE_ERROR)
    if at is not None and (from_ is not None or to is not None):
        print_error("--at is incompatible with --from and --to")
        raise typer.Exit(USAGE_ERROR)
    if at is None and (from_ is None or to is None):
        print_error("--from and --to must be given together")
        raise typer.Exit(USAGE_ERROR)


def fail(error: SynopError) -> NoReturn:
    """Print the full error chain and exit non-zero."""
    chain = error_chain(error)
    print_error(chain[0])
    for cause in chain[1:]:
        print_error(f"  caused by {cause}")
    logger.debug("Ingestion failed", exc_info=error)
    raise typer.Exit(1)


def fetch_measures(cache: SynopCache, at: Optional[str], from_: Optional[str], to: Optional[str]) -> list[Measure]:
    label = at if at is not None else f"[{from_}, {to})"
    with status_spinner(f"Fetching measures for {label}..."):
        measures = cache.fetch_measures(at=at, start=from_, end=to)
    print_info(f"Decoded {len(measures):,} measures for {label}")
    return measures


AtOption = typer.Option(None, "--at", help="Fetch measures at date, use YYYYMMDDHH (incompatible with --from/--to)")
FromOption = typer.Option(None, "--from", help="Fetch measures from month, use YYYYMM (needs --to)")
ToOption = typer.Option(None, "--to", help="Fetch measures to month excluded, use YYYYMM (needs --from)")
CacheDirOption = typer.Option(None, "--cache-dir", "-c", help="Where to store downloaded files")
ConfigOption = typer.Option(None, "--config", help="YAML or JSON configuration file")
VerboseOption = typer.Option(False, "--verbose", help="Verbose output")
QuietOption = typer.Option(False, "--quiet", "-q", help="Quiet output")


@app.command()
def ingest(
    at: Optional[str] = AtOption,
    from_: Optional[str] = FromOption,
    to: Optional[str] = ToOption,
    cache_dir: Optional[Path] = CacheDirOption,
    url: Optional[str] = typer.Option(None, "--url", help="InfluxDB URL; nothing is written when unset"),
    db: Optional[str] = typer.Option(None, "--db", help="InfluxDB database name"),
    user: Optional[str] = typer.Option(None, "--user", help="InfluxDB user"),
    password: Optional[str] = typer.Option(None, "--password", help="InfluxDB password"),
    measurement: Optional[str] = typer.Option(None, "--measurement", "-m", help="Series name of the points"),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", help="Points per write", min=1),
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
) -> None:
    """Fetch stations and measures, then write them as time-series points.

    This command:
    1. Downloads the station list and measure files not already cached
    2. Decodes them into typed records
    3. Writes one point per measure in batches, if a store URL is configured
    """
    setup_logging(verbose, quiet)
    check_mode(at, from_, to)
    config = load_config(config_file, cache_dir)

    overrides = {
        "url": url,
        "database": db,
        "user": user,
        "password": password,
        "measurement": measurement,
        "batch_size": batch_size,
    }
    try:
        for name, value in overrides.items():
            if value is not None:
                setattr(config.store, name, value)
    except ValidationError as e:
        print_error(f"Invalid store settings: {e}")
        raise typer.Exit(USAGE_ERROR)

    cache = SynopCache(config.fetch)
    try:
        with status_spinner("Fetching station list..."):
            station_map = stations_by_id(cache.fetch_stations())
        print_info(f"Loaded {len(station_map)} stations")

        measures = fetch_measures(cache, at, from_, to)

        if not config.store.enabled:
            print_warning("No store URL configured, skipping the write (use --url)")
            return

        try:
            sink = InfluxSink(config.store)
        except ValueError as e:
            print_error(f"Invalid store settings: {e}")
            raise typer.Exit(USAGE_ERROR)
        try:
            with create_processing_progress() as progress:
                task = progress.add_task("Writing points", total=len(measures))
                written = ingest_measures(
                    measures,
                    station_map,
                    sink,
                    measurement=config.store.measurement,
                    batch_size=config.store.batch_size,
                    on_flush=lambda size: progress.advance(task, size),
                )
        finally:
            sink.close()
    except SynopError as e:
        fail(e)

    print_summary_table(
        "Ingestion Summary",
        {
            "Stations": len(station_map),
            "Measures": f"{len(measures):,}",
            "Points written": f"{written:,}",
            "Series": config.store.measurement,
            "Database": config.store.database,
        },
    )
    print_success("Ingestion complete")


@app.command()
def stations(
    cache_dir: Optional[Path] = CacheDirOption,
    config_file: Optional[Path] = ConfigOption,
    limit: int = typer.Option(100, "--limit", "-n", help="Maximum number of stations to show"),
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
) -> None:
    """Show the SYNOP station list."""
    setup_logging(verbose, quiet)
    config = load_config(config_file, cache_dir)
    try:
        station_list = SynopCache(config.fetch).fetch_stations()
    except SynopError as e:
        fail(e)

    table = Table(title="SYNOP Stations")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Lat", justify="right")
    table.add_column("Lon", justify="right")
    table.add_column("Alt (m)", justify="right")
    for station in station_list[:limit]:
        table.add_row(
            station.id,
            station.name,
            f"{station.latitude:.4f}",
            f"{station.longitude:.4f}",
            f"{station.altitude:.0f}",
        )
    console.print(table)
    console.print(f"\n[dim]Showing {min(limit, len(station_list))} of {len(station_list)} stations[/dim]")


@app.command()
def summary(
    at: Optional[str] = AtOption,
    from_: Optional[str] = FromOption,
    to: Optional[str] = ToOption,
    cache_dir: Optional[Path] = CacheDirOption,
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
) -> None:
    """Show per-station observation counts and variable completeness."""
    setup_logging(verbose, quiet)
    check_mode(at, from_, to)
    config = load_config(config_file, cache_dir)

    cache = SynopCache(config.fetch)
    try:
        station_frame = stations_to_frame(cache.fetch_stations())
        measures = fetch_measures(cache, at, from_, to)
    except SynopError as e:
        fail(e)

    result = summarize_by_station(measures_to_frame(measures), station_frame)

    table = Table(title="Station Summary")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Obs", justify="right")
    table.add_column("Mean T (K)", justify="right")
    table.add_column("T %", justify="right", style="green")
    table.add_column("U %", justify="right", style="green")
    table.add_column("FF %", justify="right", style="green")
    for row in result.iter_rows(named=True):
        mean_temperature = row["mean_temperature"]
        table.add_row(
            row["station_id"],
            (row.get("name") or "")[:30],
            f"{row['observations']:,}",
            f"{mean_temperature:.2f}" if mean_temperature is not None else "",
            f"{row['temperature_completeness_pct']:.1f}%",
            f"{row['humidity_completeness_pct']:.1f}%",
            f"{row['wind_speed_completeness_pct']:.1f}%",
        )
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
