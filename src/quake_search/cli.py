"""CLI interface using Typer."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from requests import Session
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from quake_search import __version__
from quake_search.config import OutputFormat, QuakeSearchConfig
from quake_search.errors import QuakeSearchError
from quake_search.exporters import export_geojson, export_json
from quake_search.http import create_session
from quake_search.models import ResolvedLocation, SearchResult
from quake_search.pipeline import fetch_recent, search, search_by_country

Exporter = Callable[[SearchResult, Path], Path]
Runner = Callable[[QuakeSearchConfig, Session], SearchResult]

EXPORTERS: dict[str, Exporter] = {
    "json": export_json,
    "geojson": export_geojson,
}

app = typer.Typer(
    name="quake-search",
    help="Find recent earthquakes near a place or within a country.",
    add_completion=False,
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"quake-search {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )


def _magnitude_style(magnitude: float | None) -> str:
    if magnitude is None:
        return "-"
    if magnitude >= 6.0:
        return f"[red]{magnitude:.1f}[/red]"
    if magnitude >= 4.5:
        return f"[dark_orange]{magnitude:.1f}[/dark_orange]"
    return f"{magnitude:.1f}"


def _render(result: SearchResult, title: str) -> None:
    location = result.search_location
    if isinstance(location, ResolvedLocation):
        console.print(
            f"Resolved to [bold]{location.full_address}[/bold] "
            f"({location.latitude:.4f}, {location.longitude:.4f}) via {location.provider}"
        )

    if not result.earthquakes:
        console.print(f"[yellow]No earthquakes found ({result.search_method}).[/yellow]")
        return

    table = Table(title=title)
    table.add_column("Mag", justify="right")
    table.add_column("Place", style="bold")
    table.add_column("Time (UTC)", style="dim")
    table.add_column("Depth km", justify="right")
    table.add_column("ID", style="dim")

    for eq in result.earthquakes:
        when = datetime.fromtimestamp(eq.time_ms / 1000, tz=timezone.utc)
        table.add_row(
            _magnitude_style(eq.magnitude),
            eq.place or "-",
            when.strftime("%Y-%m-%d %H:%M"),
            f"{eq.depth_km:.1f}",
            eq.id,
        )

    console.print(table)
    shown = result.showing if result.showing is not None else result.total_found
    console.print(
        f"Method: {result.search_method}  "
        f"Total found: {result.total_found}  Showing: {shown}"
    )


def _finish(
    runner: Runner,
    title: str,
    output: Path | None,
    output_format: OutputFormat,
) -> None:
    try:
        config = QuakeSearchConfig()
        with create_session(
            retries=config.http_retries, user_agent=config.user_agent
        ) as session:
            result = runner(config, session)
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from None
    except QuakeSearchError as exc:
        console.print(f"[red]Search failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from None

    _render(result, title)
    if output is not None:
        EXPORTERS[output_format](result, output)
        console.print(f"\n{output_format.upper()} written to [bold]{output}[/bold]")


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Quake Search: earthquakes near a place or within a country."""


@app.command("search")
def search_command(
    location: Annotated[str, typer.Argument(help="Free-text place, e.g. 'Ridgecrest, CA'.")],
    radius: Annotated[
        float | None,
        typer.Option("--radius", "-r", help="Search radius in km for geocoded places."),
    ] = None,
    timeframe: Annotated[
        str | None,
        typer.Option("--timeframe", "-t", help="Feed window: hour, day, week, month."),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", help="Maximum events to show."),
    ] = 20,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Also write the result to this file."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output file format: json or geojson."),
    ] = "json",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Search for earthquakes near a place."""
    _configure_logging(verbose)
    _finish(
        lambda config, session: search(
            location, radius_km=radius, timeframe=timeframe, limit=limit,
            config=config, session=session,
        ),
        f"Earthquakes near {location}",
        output,
        output_format,
    )


@app.command("country")
def country_command(
    country: Annotated[str, typer.Argument(help="Country name or alias, e.g. 'USA'.")],
    timeframe: Annotated[
        str | None,
        typer.Option("--timeframe", "-t", help="Feed window: hour, day, week, month."),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", help="Maximum events to show."),
    ] = 50,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Also write the result to this file."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output file format: json or geojson."),
    ] = "json",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Search for earthquakes within a country."""
    _configure_logging(verbose)
    _finish(
        lambda config, session: search_by_country(
            country, timeframe=timeframe, limit=limit, config=config, session=session
        ),
        f"Earthquakes in {country}",
        output,
        output_format,
    )


@app.command("recent")
def recent_command(
    timeframe: Annotated[
        str,
        typer.Option("--timeframe", "-t", help="Feed window: hour, day, week, month."),
    ] = "day",
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", help="Maximum events to show."),
    ] = 20,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Also write the result to this file."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output file format: json or geojson."),
    ] = "json",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Show the strongest recent earthquakes."""
    _configure_logging(verbose)
    _finish(
        lambda config, session: fetch_recent(
            timeframe=timeframe, limit=limit, config=config, session=session
        ),
        f"Strongest earthquakes ({timeframe})",
        output,
        output_format,
    )
