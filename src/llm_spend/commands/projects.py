#region Imports
from typing import Optional

from rich.console import Console
from rich.table import Table

from llm_spend.aggregation.summary import compute_projects
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
    """Show spend per project, most expensive first."""
    projects = compute_projects(store.get(), date_from, date_to)

    if as_json:
        console.print_json(data=[project.to_dict() for project in projects])
        return

    if not projects:
        console.print("[yellow]No projects found for this range.[/yellow]")
        return

    table = Table(title="Spend by Project")
    table.add_column("Project", style="cyan")
    table.add_column("Sessions", justify="right")
    table.add_column("Requests", justify="right")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Cost", justify="right", style="green")

    for project in projects:
        table.add_row(
            project.project_path,
            f"{project.sessions:,}",
            f"{project.requests:,}",
            f"{project.input_tokens:,}",
            f"{project.output_tokens:,}",
            format_cost(project.cost_usd),
        )

    console.print(table)


#endregion
