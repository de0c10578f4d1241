"""
llm-spend CLI - Command-line interface using typer.

Main entry point for all llm-spend commands.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from llm_spend.commands import (
    config_cmd,
    events,
    export,
    import_db,
    overview,
    projects,
    sessions,
    timeseries,
    watch,
)
from llm_spend.config.defaults import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, DEFAULT_SESSION_LIMIT
from llm_spend.config.settings import resolve_claude_dir, resolve_db_path
from llm_spend.storage.event_store import EventStore
from llm_spend.storage.spend_db import get_setting


app = typer.Typer(
    name="llm-spend",
    help="Local LLM cost reports for Claude Code usage logs",
    add_completion=False,
    no_args_is_help=False,
)

console = Console()


#region Options


def _validate_date(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got {value!r}")
    return value


FromOption = typer.Option(None, "--from", help="Start day, inclusive (YYYY-MM-DD)", callback=_validate_date)
ToOption = typer.Option(None, "--to", help="End day, inclusive (YYYY-MM-DD)", callback=_validate_date)
JsonOption = typer.Option(False, "--json", help="Print the API JSON payload")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _store(ctx: typer.Context) -> EventStore:
    return ctx.obj["store"]


#endregion


#region Commands


@app.callback(invoke_without_command=True)
def default_callback(
    ctx: typer.Context,
    claude_dir: Optional[Path] = typer.Option(
        None, "--claude-dir", help="Claude data directory (default: ~/.claude or LLM_SPEND_CLAUDE_DIR)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log skipped files and lines"),
):
    """
    Local LLM cost reports for Claude Code usage logs.

    Run without command to show the spend overview.
    """
    _configure_logging(verbose)
    ctx.obj = {"store": EventStore(resolve_claude_dir(claude_dir))}

    if ctx.invoked_subcommand is None:
        overview.run(console, _store(ctx))


@app.command(name="overview")
def overview_command(
    ctx: typer.Context,
    date_from: Optional[str] = FromOption,
    date_to: Optional[str] = ToOption,
    as_json: bool = JsonOption,
):
    """Show total spend and the per-model breakdown."""
    overview.run(console, _store(ctx), date_from, date_to, as_json=as_json)


@app.command(name="timeseries")
def timeseries_command(
    ctx: typer.Context,
    date_from: Optional[str] = FromOption,
    date_to: Optional[str] = ToOption,
    as_json: bool = JsonOption,
):
    """Show daily spend per model."""
    timeseries.run(console, _store(ctx), date_from, date_to, as_json=as_json)


@app.command(name="sessions")
def sessions_command(
    ctx: typer.Context,
    date_from: Optional[str] = FromOption,
    date_to: Optional[str] = ToOption,
    limit: int = typer.Option(DEFAULT_SESSION_LIMIT, "--limit", "-n", min=0, help="Number of sessions"),
    as_json: bool = JsonOption,
):
    """Show the most expensive sessions."""
    sessions.run(console, _store(ctx), date_from, date_to, limit=limit, as_json=as_json)


@app.command(name="projects")
def projects_command(
    ctx: typer.Context,
    date_from: Optional[str] = FromOption,
    date_to: Optional[str] = ToOption,
    as_json: bool = JsonOption,
):
    """Show spend per project."""
    projects.run(console, _store(ctx), date_from, date_to, as_json=as_json)


@app.command(name="events")
def events_command(
    ctx: typer.Context,
    page: int = typer.Option(DEFAULT_PAGE, "--page", "-p", min=1, help="Page number"),
    limit: int = typer.Option(DEFAULT_PAGE_LIMIT, "--limit", "-n", min=1, help="Events per page"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Only this model"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Only this provider"),
    session_id: Optional[str] = typer.Option(None, "--session", "-s", help="Only this session id"),
    sort: Optional[str] = typer.Option(None, "--sort", help="'cost' for most expensive first"),
    date_from: Optional[str] = FromOption,
    date_to: Optional[str] = ToOption,
    as_json: bool = JsonOption,
):
    """Browse individual requests (newest first by default)."""
    events.run(
        console,
        _store(ctx),
        page=page,
        limit=limit,
        model=model,
        provider=provider,
        date_from=date_from,
        date_to=date_to,
        session_id=session_id,
        sort=sort,
        as_json=as_json,
    )


@app.command(name="models")
def models_command(ctx: typer.Context, as_json: bool = JsonOption):
    """List every model seen in the logs."""
    events.run_models(console, _store(ctx), as_json=as_json)


@app.command(name="export")
def export_command(
    ctx: typer.Context,
    output: Path = typer.Option(..., "--output", "-o", help="Destination file"),
    format_type: str = typer.Option("json", "--format", "-f", help="json or csv"),
    date_from: Optional[str] = FromOption,
    date_to: Optional[str] = ToOption,
):
    """Export events to a JSON or CSV file."""
    try:
        export.run(console, _store(ctx), output, format_type, date_from, date_to)
    except (ValueError, OSError) as e:
        console.print(f"[red]Error exporting events: {e}[/red]")
        raise typer.Exit(code=1)


@app.command(name="import")
def import_command(
    ctx: typer.Context,
    db_path: Optional[Path] = typer.Option(None, "--db", help="Sink database path"),
    changed_only: bool = typer.Option(False, "--changed-only", help="Skip files unchanged since last import"),
):
    """Store usage events in the SQLite database."""
    try:
        import_db.run(console, _store(ctx).claude_dir, resolve_db_path(db_path), changed_only=changed_only)
    except Exception as e:
        console.print(f"[red]Error importing events: {e}[/red]")
        raise typer.Exit(code=1)


@app.command(name="watch")
def watch_command(
    ctx: typer.Context,
    debounce: float = typer.Option(2.0, "--debounce", help="Minimum seconds between reloads"),
):
    """Reload totals whenever Claude Code writes new logs."""
    store = _store(ctx)
    db_path = resolve_db_path()
    if db_path.exists() and get_setting("auto_import_on_start", db_path):
        import_db.run(console, store.claude_dir, db_path, changed_only=True)
    watch.run(console, store, debounce_seconds=debounce)


@app.command(name="config")
def config_command(
    action: str = typer.Argument(..., help="Action: show, set-claude-dir, clear-claude-dir, set-db-path, clear-db-path, set-retention"),
    value: Optional[str] = typer.Argument(None, help="Value for set actions"),
):
    """Manage configuration (log directory, database path, retention)."""
    if not config_cmd.run(console, action, value):
        raise typer.Exit(code=1)


#endregion


def main() -> None:
    """
    Main CLI entry point for llm-spend.

    Usage:
        llm-spend                       Show the spend overview
        llm-spend sessions --limit 5    Five most expensive sessions
        llm-spend events --sort cost    Most expensive requests
        llm-spend --help                Show help message

    Exit:
        Press Ctrl+C to stop `watch`
    """
    try:
        app()
    except KeyboardInterrupt:
        raise SystemExit(0)


if __name__ == "__main__":
    main()
