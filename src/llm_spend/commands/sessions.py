#region Imports
from typing import Optional

from rich.console import Console
from rich.table import Table

from llm_spend.aggregation.summary import compute_top_sessions
from llm_spend.models.pricing import format_cost
from llm_spend.storage.event_store import EventStore
#endregion


#region Functions


def run(
    console: Console,
    store: EventStore,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    limit: int = 20,
    as_json: bool = False,
) -> None:
    """
    Show the most expensive sessions.

    Args:
        console: Rich console for output
        store: Loaded event store
        date_from: Inclusive start day (YYYY-MM-DD)
        date_to: Inclusive end day (YYYY-MM-DD)
        limit: Number of sessions to show
        as_json: Print the API payload instead of a table
    """
    sessions = compute_top_sessions(store.get(), date_from, date_to, limit=limit)

    if as_json:
        console.print_json(data=[session.to_dict() for session in sessions])
        return

    if not sessions:
        console.print("[yellow]No sessions found for this range.[/yellow]")
        return

    table = Table(title=f"Top {len(sessions)} Sessions by Cost")
    table.add_column("Session", style="cyan", no_wrap=True)
    table.add_column("Project")
    table.add_column("Started")
    table.add_column("Ended")
    table.add_column("Requests", justify="right")
    table.add_column("Models")
    table.add_column("Cost", justify="right", style="green")

    for session in sessions:
        table.add_row(
            (session.session_id or "unknown")[:8],
            session.project_path or "[dim]-[/dim]",
            session.started_at[:16].replace("T", " "),
            session.ended_at[:16].replace("T", " "),
            f"{session.requests:,}",
            ", ".join(session.models),
            format_cost(session.cost_usd),
        )

    console.print(table)


#endregion
