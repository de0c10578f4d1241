#region Imports
from typing import Optional, Sequence

from llm_spend.models.usage_event import UsageEvent
#endregion


END_OF_DAY = "T23:59:59"


def filter_by_date(
    events: Sequence[UsageEvent],
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> Sequence[UsageEvent]:
    """
    Keep events whose timestamp falls inside an inclusive date range.

    Comparison is lexical on the ISO timestamp strings. `date_from` (YYYY-MM-DD)
    is the start of its day; `date_to` is expanded to 23:59:59 of its day.

    Args:
        events: Events to filter
        date_from: Inclusive lower bound, or None
        date_to: Inclusive upper bound day, or None

    Returns:
        The input itself when no bound is given, otherwise a new list
    """
    if not date_from and not date_to:
        return events

    upper = date_to + END_OF_DAY if date_to else None
    return [
        e for e in events
        if (not date_from or e.occurred_at >= date_from)
        and (upper is None or e.occurred_at <= upper)
    ]
