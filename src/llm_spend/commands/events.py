#region Imports
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from llm_spend.aggregation.summary import compute_events, list_models
from llm_spend.models.pricing import format_cost
from llm_spend.models.usage_event import Source
from llm_spend.storage.event_store import EventStore
#endregion


#region Functions


def run(
    console: Console,
    store: EventStore,
    page: int = 1,
    limit: int = 50,
    model: Optional[str] = None,
    provider: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    session_id: Optional[str] = None,
    sort: Optional[str] = None,
    as_json: bool = False,
) -> None:
    """
    Show one page of individual events.

    Args:
        console: Rich console for output
        store: Loaded event store
        page: 1-indexed page number
        limit: Events per page
        model: Only events of this model
        provider: Only events of this provider
        date_from: Inclusive start day (YYYY-MM-DD)
        date_to: Inclusive end day (YYYY-MM-DD)
        session_id: Only events of this session
        sort: "cost" for most expensive first (default: newest first)
        as_json: Print the API payload instead of a table
    """
    result = compute_events(
        store.get(),
        page=page,
        limit=limit,
        model=model,
        provider=provider,
        date_from=date_from,
        date_to=date_to,
        session_id=session_id,
        sort=sort,
    )

    if as_json:
        console.print_json(data=result.to_dict())
        return

    if result.total == 0:
        console.print("[yellow]No events match these filters.[/yellow]")
        return

    table = Table(title=f"Events (page {result.page}/{result.page_count}, {result.total:,} total)")
    table.add_column("Time", style="cyan", no_wrap=True)
    table.add_column("Model")
    table.add_column("Source")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Cost", justify="right", style="green")
    table.add_column("Prompt", overflow="ellipsis", max_width=60)

    for event in result.rows:
        table.add_row(
            event.occurred_at[:19].replace("T", " "),
            event.model,
            "subagent" if event.source is Source.SUBAGENT else "",
            f"{event.input_tokens:,}",
            f"{event.output_tokens:,}",
            f"{event.total_tokens:,}",
            format_cost(event.cost_usd, precision=4),
            escape(event.prompt_text) if event.prompt_text else "[dim]-[/dim]",
        )

    console.print(table)


def run_models(console: Console, store: EventStore, as_json: bool = False) -> None:
    """List every model name seen in the logs."""
    models = list_models(store.get())

    if as_json:
        console.print_json(data=models)
        return

    if not models:
        console.print("[yellow]No models found.[/yellow]")
        return

    for model in models:
        console.print(model)


#endregion
