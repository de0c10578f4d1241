#region Imports
import csv
import json
from pathlib import Path
from typing import Optional

from rich.console import Console

from llm_spend.aggregation.date_filter import filter_by_date
from llm_spend.models.usage_event import UsageEvent
from llm_spend.storage.event_store import EventStore
#endregion


EXPORT_FORMATS = ("json", "csv")
_CSV_FIELDS = list(UsageEvent.__dataclass_fields__)


#region Functions


def run(
    console: Console,
    store: EventStore,
    output: Path,
    format_type: str = "json",
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> int:
    """
    Export events in a date range to a JSON or CSV file, newest first.

    Args:
        console: Rich console for output
        store: Loaded event store
        output: Destination file
        format_type: "json" or "csv"
        date_from: Inclusive start day (YYYY-MM-DD)
        date_to: Inclusive end day (YYYY-MM-DD)

    Returns:
        Number of events written

    Raises:
        ValueError: If format_type is not supported
    """
    if format_type not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {format_type} (use one of {', '.join(EXPORT_FORMATS)})")

    events = filter_by_date(store.get(), date_from, date_to)
    rows = [event.to_dict() for event in reversed(events)]

    output.parent.mkdir(parents=True, exist_ok=True)
    if format_type == "json":
        with open(output, "w", encoding="utf-8") as f:
            json.dump(rows, f, indent=2)
    else:
        with open(output, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=_CSV_FIELDS)
            writer.writeheader()
            writer.writerows(rows)

    console.print(f"[green]✓ Exported {len(rows):,} events to {output}[/green]")
    return len(rows)


#endregion
