#region Imports
from pathlib import Path

from rich.console import Console

from llm_spend.data.jsonl_parser import parse_jsonl_file
from llm_spend.data.log_locator import locate_log_files
from llm_spend.storage.spend_db import (
    apply_retention,
    get_import_state,
    init_database,
    insert_events,
    upsert_import_state,
)
#endregion


#region Functions


def run(console: Console, claude_dir: Path, db_path: Path, changed_only: bool = False) -> int:
    """
    Import usage events from the JSONL logs into the SQLite sink.

    Each file's modification time and line count are recorded. With
    `changed_only`, files whose modification time matches the recorded one
    are skipped. Rows already stored are left untouched.

    Args:
        console: Rich console for output
        claude_dir: Claude data directory to scan
        db_path: Sink database path
        changed_only: Skip files unchanged since the last import

    Returns:
        Number of new events stored
    """
    init_database(db_path)

    seen: set[str] = set()
    inserted = 0
    skipped_files = 0

    log_files = locate_log_files(claude_dir)
    with console.status("[bold #ff8800]Importing usage logs...", spinner="dots", spinner_style="#ff8800"):
        for log_file in log_files:
            file_key = str(log_file.path)
            try:
                stat = log_file.path.stat()
            except OSError:
                continue
            mtime = int(stat.st_mtime)

            if changed_only:
                state = get_import_state(file_key, db_path)
                if state and state["file_mtime"] == mtime:
                    skipped_files += 1
                    continue

            events = parse_jsonl_file(log_file.path, log_file.project_path, seen)
            inserted += insert_events(events, db_path)
            upsert_import_state(file_key, mtime, _count_lines(log_file.path), db_path)

    removed = apply_retention(db_path)

    console.print(f"[green]Saved {inserted:,} new events to {db_path}[/green]")
    if skipped_files:
        console.print(f"[dim]{skipped_files:,} unchanged files skipped[/dim]")
    if removed:
        console.print(f"[cyan]Removed {removed:,} events outside the retention window[/cyan]")
    return inserted


def _count_lines(path: Path) -> int:
    try:
        with open(path, "rb") as f:
            return sum(1 for _ in f)
    except OSError:
        return 0


#endregion
