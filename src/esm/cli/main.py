"""
Main CLI entry point for ESM Map Tasks.

Usage:
    esm locations 686917581749f351b9c82f5a
    esm progress 686917231749f351b9c82f4c --user 6869...
    esm normalize dump.json
"""

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from esm.entu.client import EntuClient, EntuError
from esm.models import Location, MarkerState, parse_entities
from esm.services.locations import display_name, normalize_location
from esm.services.workspace import load_task_workspace
from esm.settings import get_settings
from esm.utils.ids import InvalidEntityIdError

# Main app
app = typer.Typer(name="esm", help="ESM Map Tasks CLI")
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Inspect location-based tasks stored in Entu."""
    level = "DEBUG" if verbose else get_settings().log_level.upper()
    logging.basicConfig(level=level)


def make_client(token: str | None = None) -> EntuClient:
    """Build an Entu client from settings."""
    return EntuClient.from_settings(get_settings(), token=token)


def run_async(coro):
    """Helper to run async functions from Typer commands."""
    return asyncio.run(coro)


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=1)


def _locations_table(locations: list[Location], title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Coordinates")
    for location in locations:
        table.add_row(location.id, display_name(location), str(location.coordinates))
    return table


def _markers_table(markers: list[MarkerState]) -> Table:
    table = Table(title="Markers")
    table.add_column("Name")
    table.add_column("Visited")
    table.add_column("Selected")
    for marker in markers:
        table.add_row(
            display_name(marker.location),
            "✓" if marker.is_visited else "",
            "●" if marker.is_selected else "",
        )
    return table


# ============================================================================
# Commands
# ============================================================================


@app.command("locations")
def locations_command(
    map_id: str = typer.Argument(..., help="Map entity ID"),
    token: str = typer.Option(None, "--token", help="Entu JWT (overrides settings)"),
):
    """List the coordinate-valid locations of a map."""

    async def _fetch():
        async with make_client(token) as client:
            return await client.get_map_locations(map_id)

    try:
        locations = run_async(_fetch())
    except (InvalidEntityIdError, EntuError) as e:
        _fail(str(e))

    if not locations:
        typer.echo("No locations found.")
        return

    console.print(_locations_table(locations, f"Map {map_id}"))
    typer.echo(f"{len(locations)} location(s)")


@app.command("progress")
def progress_command(
    task_id: str = typer.Argument(..., help="Task entity ID"),
    user_id: str = typer.Option(None, "--user", "-u", help="Respondent user ID"),
    selected: str = typer.Option(None, "--selected", "-s", help="Location ID to highlight"),
    token: str = typer.Option(None, "--token", help="Entu JWT (overrides settings)"),
):
    """Show visit progress and marker state for a task."""
    settings = get_settings()

    async def _load():
        async with make_client(token) as client:
            return await load_task_workspace(
                client, task_id, user_id, tolerance=settings.coordinate_tolerance
            )

    try:
        workspace = run_async(_load())
    except (InvalidEntityIdError, EntuError) as e:
        _fail(str(e))

    if selected and workspace.select_location_id(selected) is None:
        typer.echo(f"Location {selected} is not on this task's map")

    progress = workspace.progress
    typer.echo(f"Task: {workspace.task.display_name} ({workspace.task.id})")
    typer.echo(
        f"Visited {progress.visited_count}/{progress.total_count} "
        f"locations ({progress.rounded_percent}%)"
    )
    if workspace.task.expected_responses:
        stats = workspace.stats
        typer.echo(f"Expected responses: {stats.actual}/{stats.expected} ({stats.percent}%)")

    if workspace.locations:
        console.print(_markers_table(workspace.markers))


@app.command("normalize")
def normalize_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON dump of entities"),
):
    """
    Check which location entities in a JSON dump can be placed on a map.

    Accepts either a list of entities or an Entu search result
    (`{"entities": [...]}`).
    """
    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        _fail(f"Could not read {file}: {e}")

    raws = data.get("entities", []) if isinstance(data, dict) else data
    if not isinstance(raws, list):
        _fail("Expected a list of entities or an object with an 'entities' list")

    accepted: list[Location] = []
    rejected: list[str] = []
    for entity in parse_entities(raws):
        location = normalize_location(entity)
        if location is None:
            rejected.append(entity.id)
        else:
            accepted.append(location)

    if accepted:
        console.print(_locations_table(accepted, "Valid locations"))
    typer.echo(f"Valid: {len(accepted)}")
    typer.echo(f"Rejected: {len(rejected)}")
    for entity_id in rejected:
        typer.echo(f"  - {entity_id}: missing or invalid coordinates")


if __name__ == "__main__":
    app()
