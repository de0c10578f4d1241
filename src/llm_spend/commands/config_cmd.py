"""
Configuration management command.

Allows users to view and modify llm-spend settings.
"""
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from llm_spend.config.settings import (
    CLAUDE_DIR_ENV_VAR,
    resolve_claude_dir,
    resolve_db_path,
)
from llm_spend.config.user_config import (
    clear_claude_dir,
    clear_db_path,
    get_claude_dir,
    get_db_path,
    set_claude_dir,
    set_db_path,
)
from llm_spend.storage.spend_db import get_all_settings, init_database, set_setting


ACTIONS = {
    "show": "Display all settings",
    "set-claude-dir <path>": "Set custom Claude data directory",
    "clear-claude-dir": "Clear custom Claude data directory",
    "set-db-path <path>": "Set custom sink database path",
    "clear-db-path": "Clear custom sink database path",
    "set-retention <days|none>": "Keep only the last N days in the sink",
}


def run(console: Console, action: str, value: Optional[str] = None) -> bool:
    """
    Handle configuration commands.

    Args:
        console: Rich console for output
        action: Configuration action to perform
        value: Optional value for set actions

    Returns:
        True if the action succeeded
    """
    if action == "show":
        _show_config(console)
        return True

    if action == "set-claude-dir":
        if not value:
            console.print("[red]Error: Directory path required[/red]")
            console.print("[yellow]Usage: llm-spend config set-claude-dir ~/.claude[/yellow]")
            return False
        try:
            set_claude_dir(value)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            return False
        console.print(f"[green]✓ Claude data directory set to: {get_claude_dir()}[/green]")
        return True

    if action == "clear-claude-dir":
        clear_claude_dir()
        console.print("[green]✓ Claude data directory cleared (using default)[/green]")
        return True

    if action == "set-db-path":
        if not value:
            console.print("[red]Error: Database path required[/red]")
            console.print("[yellow]Usage: llm-spend config set-db-path /path/to/llm-spend.db[/yellow]")
            return False
        try:
            set_db_path(value)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            return False
        console.print(f"[green]✓ Database path set to: {get_db_path()}[/green]")
        return True

    if action == "clear-db-path":
        clear_db_path()
        console.print("[green]✓ Database path cleared (using default)[/green]")
        return True

    if action == "set-retention":
        return _set_retention(console, value)

    console.print(f"[red]Unknown action: {action}[/red]")
    console.print("\n[yellow]Available actions:[/yellow]")
    for name, description in ACTIONS.items():
        console.print(f"  {name:26s} - {description}")
    return False


def _set_retention(console: Console, value: Optional[str]) -> bool:
    if not value:
        console.print("[red]Error: Number of days (or 'none') required[/red]")
        return False

    if value.lower() == "none":
        days = None
    else:
        try:
            days = int(value)
        except ValueError:
            days = 0
        if days <= 0:
            console.print(f"[red]Error: Retention must be a positive number of days, got {value!r}[/red]")
            return False

    db_path = resolve_db_path()
    init_database(db_path)
    set_setting("retention_days", days, db_path)
    if days is None:
        console.print("[green]✓ Retention disabled (keep all events)[/green]")
    else:
        console.print(f"[green]✓ Sink keeps the last {days} days of events[/green]")
    return True


def _show_config(console: Console) -> None:
    """Display all current configuration settings."""
    console.print("\n[bold cyan]llm-spend Configuration[/bold cyan]\n")

    table = Table(title="Log Source", show_header=False, box=None, padding=(0, 2))
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    if os.getenv(CLAUDE_DIR_ENV_VAR):
        table.add_row("Claude Dir (env)", str(resolve_claude_dir()))
    elif get_claude_dir():
        table.add_row("Claude Dir (custom)", str(resolve_claude_dir()))
    else:
        table.add_row("Claude Dir (default)", str(resolve_claude_dir()))

    console.print(table)
    console.print()

    table = Table(title="Sink Database", show_header=False, box=None, padding=(0, 2))
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    db_path = resolve_db_path()
    label = "DB Path (custom)" if get_db_path() else "DB Path (default)"
    table.add_row(label, str(db_path))

    if Path(db_path).exists():
        for key, value in sorted(get_all_settings(db_path).items()):
            table.add_row(key, "[dim]unset[/dim]" if value is None else str(value))
    else:
        table.add_row("", "[dim](not created yet; run 'llm-spend import')[/dim]")

    console.print(table)
    console.print()
