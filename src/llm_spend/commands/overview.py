#region Imports
from typing import Optional

from rich.console import Console
from rich.table import Table

from llm_spend.aggregation.summary import compute_overview
from llm_spend.models.pricing import format_cost
from llm_spend.storage.event_store import EventStore
#endregion


#region Functions


def run(
    console: Console,
    store: EventStore,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    as_json: bool = False,
) -> None:
    """
    Show total spend and the per-model breakdown.

    Args:
        console: Rich console for output
        store: Loaded event store
        date_from: Inclusive start day (YYYY-MM-DD)
        date_to: Inclusive end day (YYYY-MM-DD)
        as_json: Print the API payload instead of tables
    """
    overview = compute_overview(store.get(), date_from, date_to)

    if as_json:
        console.print_json(data=overview.to_dict())
        return

    totals = overview.totals
    if totals.total_requests == 0:
        console.print("[yellow]No usage events found for this range.[/yellow]")
        return

    summary = Table(title="Spend Overview", show_header=False, box=None, padding=(0, 2))
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", justify="right")
    summary.add_row("Requests", f"{totals.total_requests:,}")
    summary.add_row("Input tokens", f"{totals.input_tokens:,}")
    summary.add_row("Output tokens", f"{totals.output_tokens:,}")
    summary.add_row("Cache write tokens", f"{totals.cache_creation_tokens:,}")
    summary.add_row("Cache read tokens", f"{totals.cache_read_tokens:,}")
    summary.add_row("Cost", f"[bold green]{format_cost(totals.cost_usd)}[/bold green]")
    console.print(summary)
    console.print()

    table = Table(title="By Model")
    table.add_column("Model", style="cyan")
    table.add_column("Provider")
    table.add_column("Requests", justify="right")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Cache W", justify="right")
    table.add_column("Cache R", justify="right")
    table.add_column("Cost", justify="right", style="green")

    for row in overview.by_model:
        table.add_row(
            row.model,
            row.provider.value,
            f"{row.requests:,}",
            f"{row.input_tokens:,}",
            f"{row.output_tokens:,}",
            f"{row.cache_creation_tokens:,}",
            f"{row.cache_read_tokens:,}",
            format_cost(row.cost_usd),
        )

    console.print(table)


#endregion
