#region Imports
import json
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from llm_spend.aggregation.date_filter import END_OF_DAY
from llm_spend.config.defaults import DEFAULT_SETTINGS
from llm_spend.config.settings import DEFAULT_DB_PATH
from llm_spend.models.usage_event import UsageEvent
#endregion


#region Constants
_EVENT_COLUMNS = (
    "provider", "model", "session_id", "project_path", "request_id", "occurred_at",
    "input_tokens", "output_tokens", "cache_creation_tokens", "cache_read_tokens",
    "cost_usd", "source",
)
#endregion


#region Helpers


def _connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path, timeout=30.0)
    conn.row_factory = sqlite3.Row
    return conn


def _date_conditions(date_from: Optional[str], date_to: Optional[str]) -> tuple[str, list]:
    """Build a WHERE clause for an inclusive day range on occurred_at."""
    conditions = []
    params: list = []
    if date_from:
        conditions.append("occurred_at >= ?")
        params.append(date_from)
    if date_to:
        conditions.append("occurred_at <= ?")
        params.append(date_to + END_OF_DAY)
    where = "WHERE " + " AND ".join(conditions) if conditions else ""
    return where, params


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


#endregion


#region Schema


def init_database(db_path: Path = DEFAULT_DB_PATH) -> None:
    """
    Initialize the SQLite sink.

    Creates tables if they don't exist:
    - usage_events: One row per usage event, unique on (provider, request_id)
    - settings: Key-value settings with JSON-encoded values
    - import_state: Per-file modification time and line offset of the last import

    Args:
        db_path: Path to the SQLite database file

    Raises:
        sqlite3.Error: If database initialization fails
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS usage_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                provider TEXT NOT NULL,
                model TEXT NOT NULL,
                session_id TEXT,
                project_path TEXT,
                request_id TEXT,
                occurred_at TEXT NOT NULL,
                imported_at TEXT NOT NULL DEFAULT (datetime('now')),
                input_tokens INTEGER DEFAULT 0,
                output_tokens INTEGER DEFAULT 0,
                cache_creation_tokens INTEGER DEFAULT 0,
                cache_read_tokens INTEGER DEFAULT 0,
                cost_usd REAL NOT NULL DEFAULT 0.0,
                source TEXT NOT NULL DEFAULT 'claude-code',
                UNIQUE(provider, request_id)
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_events_occurred_at ON usage_events(occurred_at)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_events_model ON usage_events(model)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_events_session_id ON usage_events(session_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_events_project ON usage_events(project_path)")

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        for key, value in DEFAULT_SETTINGS.items():
            cursor.execute(
                "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?)",
                (key, json.dumps(value)),
            )

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS import_state (
                file_path TEXT PRIMARY KEY,
                file_mtime INTEGER NOT NULL,
                last_line_index INTEGER NOT NULL DEFAULT 0,
                last_imported TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)

        conn.commit()
    finally:
        conn.close()


#endregion


#region Settings


def get_setting(key: str, db_path: Path = DEFAULT_DB_PATH) -> Any:
    """
    Read one setting.

    Returns:
        Decoded value, or None if the key is not stored
    """
    conn = _connect(db_path)
    try:
        row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return json.loads(row["value"]) if row else None
    finally:
        conn.close()


def set_setting(key: str, value: Any, db_path: Path = DEFAULT_DB_PATH) -> None:
    """
    Save a single setting (value stored as JSON).

    Raises:
        sqlite3.Error: If database operation fails
    """
    conn = _connect(db_path)
    try:
        conn.execute("""
            INSERT INTO settings (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """, (key, json.dumps(value), _utc_now()))
        conn.commit()
    finally:
        conn.close()


def get_all_settings(db_path: Path = DEFAULT_DB_PATH) -> dict:
    """Load all settings as a dict of decoded values."""
    conn = _connect(db_path)
    try:
        rows = conn.execute("SELECT key, value FROM settings").fetchall()
        return {row["key"]: json.loads(row["value"]) for row in rows}
    finally:
        conn.close()


#endregion


#region Import State


def get_import_state(file_path: str, db_path: Path = DEFAULT_DB_PATH) -> Optional[dict]:
    """Bookkeeping row for a log file, or None if it was never imported."""
    conn = _connect(db_path)
    try:
        row = conn.execute("SELECT * FROM import_state WHERE file_path = ?", (file_path,)).fetchone()
        return dict(row) if row else None
    finally:
        conn.close()


def upsert_import_state(
    file_path: str,
    file_mtime: int,
    last_line_index: int,
    db_path: Path = DEFAULT_DB_PATH,
) -> None:
    """Record the modification time and line offset reached for a log file."""
    conn = _connect(db_path)
    try:
        conn.execute("""
            INSERT INTO import_state (file_path, file_mtime, last_line_index, last_imported)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(file_path) DO UPDATE SET
                file_mtime = excluded.file_mtime,
                last_line_index = excluded.last_line_index,
                last_imported = excluded.last_imported
        """, (file_path, file_mtime, last_line_index, _utc_now()))
        conn.commit()
    finally:
        conn.close()


def clear_import_state(db_path: Path = DEFAULT_DB_PATH) -> None:
    conn = _connect(db_path)
    try:
        conn.execute("DELETE FROM import_state")
        conn.commit()
    finally:
        conn.close()


#endregion


#region Events


def insert_event(event: UsageEvent, db_path: Path = DEFAULT_DB_PATH) -> bool:
    """
    Insert one event; an existing (provider, request_id) row is kept.

    Returns:
        True if a new row was written
    """
    return insert_events([event], db_path) == 1


def insert_events(events: Iterable[UsageEvent], db_path: Path = DEFAULT_DB_PATH) -> int:
    """
    Insert events in a single transaction, ignoring ones already stored.

    Args:
        events: Events to write
        db_path: Path to the SQLite database file

    Returns:
        Number of new rows written

    Raises:
        sqlite3.Error: If database operation fails (the transaction is rolled back)
    """
    placeholders = ", ".join("?" for _ in _EVENT_COLUMNS)
    sql = (
        f"INSERT OR IGNORE INTO usage_events ({', '.join(_EVENT_COLUMNS)}) "
        f"VALUES ({placeholders})"
    )

    conn = _connect(db_path)
    inserted = 0
    try:
        for event in events:
            cursor = conn.execute(sql, (
                event.provider.value,
                event.model,
                event.session_id,
                event.project_path,
                event.request_id,
                event.occurred_at,
                event.input_tokens,
                event.output_tokens,
                event.cache_creation_tokens,
                event.cache_read_tokens,
                event.cost_usd,
                event.source.value,
            ))
            inserted += cursor.rowcount
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()

    return inserted


def get_models(db_path: Path = DEFAULT_DB_PATH) -> list[str]:
    conn = _connect(db_path)
    try:
        rows = conn.execute("SELECT DISTINCT model FROM usage_events ORDER BY model").fetchall()
        return [row["model"] for row in rows]
    finally:
        conn.close()


def count_events(db_path: Path = DEFAULT_DB_PATH) -> int:
    conn = _connect(db_path)
    try:
        return conn.execute("SELECT COUNT(*) FROM usage_events").fetchone()[0]
    finally:
        conn.close()


def delete_events(
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    db_path: Path = DEFAULT_DB_PATH,
) -> int:
    """
    Delete events in an inclusive day range (all events when no bound is given).

    Returns:
        Number of rows deleted
    """
    where, params = _date_conditions(date_from, date_to)
    conn = _connect(db_path)
    try:
        cursor = conn.execute(f"DELETE FROM usage_events {where}", params)
        conn.commit()
        return cursor.rowcount
    finally:
        conn.close()


def delete_all(db_path: Path = DEFAULT_DB_PATH) -> None:
    """Delete every stored event and all import bookkeeping."""
    conn = _connect(db_path)
    try:
        conn.execute("DELETE FROM usage_events")
        conn.execute("DELETE FROM import_state")
        conn.commit()
    finally:
        conn.close()


def apply_retention(db_path: Path = DEFAULT_DB_PATH, now: Optional[datetime] = None) -> int:
    """
    Delete events older than the `retention_days` setting.

    Args:
        db_path: Path to the SQLite database file
        now: Reference time (defaults to current UTC time)

    Returns:
        Number of rows deleted; 0 when retention is unset
    """
    days = get_setting("retention_days", db_path)
    if not days:
        return 0

    now = now or datetime.now(timezone.utc)
    cutoff = (now - timedelta(days=int(days))).strftime("%Y-%m-%dT%H:%M:%S")

    conn = _connect(db_path)
    try:
        cursor = conn.execute("DELETE FROM usage_events WHERE occurred_at < ?", (cutoff,))
        conn.commit()
        return cursor.rowcount
    finally:
        conn.close()


def export_data(
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    db_path: Path = DEFAULT_DB_PATH,
) -> list[dict]:
    """Stored events in a day range, newest first, as plain dicts."""
    where, params = _date_conditions(date_from, date_to)
    conn = _connect(db_path)
    try:
        rows = conn.execute(
            f"SELECT * FROM usage_events {where} ORDER BY occurred_at DESC", params
        ).fetchall()
        return [dict(row) for row in rows]
    finally:
        conn.close()


#endregion
