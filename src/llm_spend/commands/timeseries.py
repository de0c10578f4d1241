#region Imports
from typing import Optional

from rich.console import Console
from rich.table import Table

from llm_spend.aggregation.summary import compute_timeseries
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
    """Show daily spend per model."""
    points = compute_timeseries(store.get(), date_from, date_to)

    if as_json:
        console.print_json(data=[point.to_dict() for point in points])
        return

    if not points:
        console.print("[yellow]No usage events found for this range.[/yellow]")
        return

    table = Table(title="Daily Spend")
    table.add_column("Date", style="cyan")
    table.add_column("Model")
    table.add_column("Provider")
    table.add_column("Requests", justify="right")
    table.add_column("Cost", justify="right", style="green")

    previous_date = None
    for point in points:
        # Only print the date on the first row of each day
        date_label = point.date if point.date != previous_date else ""
        previous_date = point.date
        table.add_row(
            date_label,
            point.model,
            point.provider.value,
            f"{point.requests:,}",
            format_cost(point.cost_usd),
        )

    console.print(table)


#endregion
