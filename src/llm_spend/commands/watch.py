#region Imports
import threading
from datetime import datetime

from rich.console import Console

from llm_spend.aggregation.summary import compute_overview
from llm_spend.models.pricing import format_cost
from llm_spend.storage.event_store import EventStore
from llm_spend.utils.file_watcher import watch_claude_files
#endregion


#region Functions


def run(console: Console, store: EventStore, debounce_seconds: float = 2.0) -> None:
    """
    Keep the event store fresh while Claude Code writes new logs.

    Reloads everything whenever a .jsonl file changes and prints the new
    totals. Runs until Ctrl+C.

    Args:
        console: Rich console for output
        store: Event store to refresh
        debounce_seconds: Minimum seconds between reloads
    """
    store.init()
    _print_totals(console, store)

    def on_change() -> None:
        store.refresh()
        _print_totals(console, store)

    watcher = watch_claude_files(store.claude_dir, on_change, debounce_seconds)
    try:
        watcher.start()
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return

    console.print(f"[dim]Watching {watcher.projects_dir} (Ctrl+C to stop)[/dim]")
    stop = threading.Event()
    try:
        while watcher.is_alive():
            stop.wait(1.0)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


def _print_totals(console: Console, store: EventStore) -> None:
    totals = compute_overview(store.get()).totals
    stamp = datetime.now().strftime("%H:%M:%S")
    console.print(
        f"[dim]{stamp}[/dim] {totals.total_requests:,} requests, "
        f"[bold green]{format_cost(totals.cost_usd)}[/bold green]"
    )


#endregion
