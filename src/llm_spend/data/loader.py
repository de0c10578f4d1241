#region Imports
import logging
from pathlib import Path

from llm_spend.data.jsonl_parser import parse_jsonl_file
from llm_spend.data.log_locator import locate_log_files
from llm_spend.models.usage_event import UsageEvent
#endregion


logger = logging.getLogger(__name__)


#region Functions


def load_all_events(claude_dir: Path) -> tuple[UsageEvent, ...]:
    """
    Read every Claude Code log under `claude_dir` into usage events.

    A full scan on every call; no database involved. One dedup set is shared
    across all files, so the first occurrence of a request id wins.

    Args:
        claude_dir: Claude data directory (e.g., ~/.claude)

    Returns:
        Immutable collection sorted ascending by occurred_at. A missing
        directory yields an empty collection.
    """
    seen: set[str] = set()
    events: list[UsageEvent] = []

    log_files = locate_log_files(claude_dir)
    for log_file in log_files:
        events.extend(parse_jsonl_file(log_file.path, log_file.project_path, seen))

    # Stable: equal timestamps keep scan order
    events.sort(key=lambda e: e.occurred_at)

    logger.info("Loaded %d events from %d log files under %s", len(events), len(log_files), claude_dir)
    return tuple(events)


#endregion
