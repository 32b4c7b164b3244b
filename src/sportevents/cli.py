# src/sportevents/cli.py
"""
SportEvents Command Line Interface (CLI).

This module implements the terminal front end using `typer` and `rich`. It is
the presentation layer over :class:`~sportevents.loader.EventLoader` and
renders the three end states of a load distinctly:

- **Fresh**:    events from the server, or from a cache inside its window
- **Degraded**: events from a stale cache or an api-first fallback, with a banner
- **Failure**:  nothing to show; exit code 1

Usage
-----
    # Cache-first load (refreshes a stale cache in the background)
    $ sportevents events

    # Offline mode
    $ sportevents events --strategy cache-only

    # Pull-to-refresh, cache diagnostics, cache reset
    $ sportevents refresh
    $ sportevents status
    $ sportevents clear --yes
"""

from __future__ import annotations

import traceback
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm
from rich.table import Table

from sportevents.core.contracts.event import SportEvent
from sportevents.core.errors import EventsError
from sportevents.core.settings import load_settings
from sportevents.loader import EventLoader, LoadResult, LoadStrategy

# Ensure env vars (like SPORTEVENTS_API_URL) are loaded before any logic runs
load_dotenv()

app = typer.Typer(
    help="SportEvents: upcoming sports events, online or offline.",
    rich_markup_mode="markdown",
)
console = Console()


# --------------------------------------------------------------------------- #
# Helpers: Wiring & Rendering
# --------------------------------------------------------------------------- #


def _build_loader() -> EventLoader:
    """Build a loader from the current settings (patched in tests)."""
    return EventLoader.from_settings(load_settings())


def _describe_source(result: LoadResult) -> str:
    """Return a one-line provenance label for ``result``."""
    if not result.from_cache:
        return "[green]Fresh data from the server[/green]"
    if result.degraded:
        return "[yellow]Cached data (may be out of date)[/yellow]"
    return "[green]Cached data (up to date)[/green]"


def _render_events(events: list[SportEvent], limit: int) -> None:
    """Print the first ``limit`` events as a table."""
    if not events:
        console.print("[dim]No events.[/dim]")
        return

    table = Table(show_lines=False)
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Event", style="bold")
    table.add_column("City")
    table.add_column("Sport")
    table.add_column("Spots", justify="right")

    for ev in events[:limit]:
        table.add_row(
            ev.date.strftime("%Y-%m-%d %H:%M"),
            ev.name,
            ev.city_name,
            ev.sport_name,
            f"{ev.available_spots}/{ev.max_participants}",
        )
    console.print(table)

    hidden = len(events) - limit
    if hidden > 0:
        console.print(f"[dim]… and {hidden} more[/dim]")


def _render_result(result: LoadResult, limit: int) -> None:
    console.print(_describe_source(result))
    if result.notice:
        detail = f"\n[dim]{result.fallback_error}[/dim]" if result.fallback_error else ""
        console.print(Panel(f"{result.notice}{detail}", border_style="yellow"))
    _render_events(result.events, limit)


def _fail(label: str, exc: EventsError, verbose: bool) -> typer.Exit:
    """Print ``exc``; critical errors (nothing at all to show) get a recovery hint."""
    if exc.is_critical:
        console.print(f"\n[bold red]⛔ {label}:[/bold red] {exc}")
        console.print(
            "[dim]Nothing is cached yet. Run `sportevents refresh` once the "
            "server is reachable.[/dim]"
        )
    else:
        console.print(f"\n[bold red]❌ {label}:[/bold red] {exc}")
    if verbose:
        traceback.print_exc()
    return typer.Exit(code=1)


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def events(
    strategy: Annotated[
        LoadStrategy,
        typer.Option(
            "--strategy",
            "-s",
            case_sensitive=False,
            help="Loading strategy.",
        ),
    ] = LoadStrategy.CACHE_FIRST,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", min=1, help="Maximum number of events to show."),
    ] = 20,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show full error tracebacks."),
    ] = False,
) -> None:
    """
    Load events and show where they came from.

    With the default cache-first strategy a stale cache is shown immediately
    and refreshed in the background; the command waits for that refresh and
    reports it before exiting.
    """
    loader = _build_loader()
    subscription = loader.channel.subscribe(
        lambda fresh: console.print(
            f"[bold green]🔄 Updated in background:[/bold green] {len(fresh)} events"
        )
    )

    try:
        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task(f"[cyan]Loading events ({strategy.value})...", total=None)
                result = loader.load(strategy)
        except EventsError as exc:
            raise _fail("Load Error", exc, verbose) from exc

        _render_result(result, limit)

        if result.refresh is not None:
            console.print("[dim]Refreshing stale cache in the background...[/dim]")
    finally:
        loader.close()
        subscription.cancel()


@app.command()  # type: ignore[misc]
def refresh(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show full error tracebacks."),
    ] = False,
) -> None:
    """Fetch events from the server now and rewrite the cache."""
    with _build_loader() as loader:
        try:
            result = loader.refresh()
        except EventsError as exc:
            raise _fail("Refresh Error", exc, verbose) from exc
    console.print(f"[bold green]✅ Cached {len(result.events)} events.[/bold green]")


@app.command()  # type: ignore[misc]
def status() -> None:
    """Show what the cache holds and whether it is fresh."""
    with _build_loader() as loader:
        info = loader.cache_status()
        location = loader.cache.path

    last_update = (
        info.last_update.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        if info.last_update
        else "never"
    )
    body = (
        f"{info.description}\n"
        f"Events:       {info.record_count}\n"
        f"Fresh:        {'yes' if info.is_fresh else 'no'}\n"
        f"Last update:  {last_update}\n"
        f"Size:         {info.size_label}\n"
        f"File:         {location}"
    )
    console.print(Panel(body, title="Cache", border_style="cyan" if info.has_snapshot else "dim"))


@app.command()  # type: ignore[misc]
def clear(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation."),
    ] = False,
) -> None:
    """Delete the cached events and their timestamp."""
    if not yes and not Confirm.ask("Clear the events cache?", default=False):
        console.print("[dim]Cancelled.[/dim]")
        return

    with _build_loader() as loader:
        try:
            loader.clear_cache()
        except EventsError as exc:
            raise _fail("Clear Error", exc, verbose=False) from exc
    console.print("[bold green]🗑️ Cache cleared.[/bold green]")


if __name__ == "__main__":
    app()
