"""
Unit tests for the SQLite sink.

Tests schema setup, idempotent inserts, settings, import bookkeeping,
retention and export against a database in tmp_path.
"""

from datetime import datetime, timezone

import pytest

from llm_spend.models.usage_event import Provider, Source
from llm_spend.storage import spend_db


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "data" / "spend.db"
    spend_db.init_database(path)
    return path


class TestSchema:
    """Test database initialization."""

    def test_creates_parent_directory(self, db_path):
        assert db_path.exists()

    def test_default_settings_seeded(self, db_path):
        settings = spend_db.get_all_settings(db_path)
        assert settings["retention_days"] is None
        assert settings["auto_import_on_start"] is True

    def test_log_directory_is_not_a_sink_setting(self, db_path):
        assert "claude_data_dir" not in spend_db.get_all_settings(db_path)

    def test_init_is_idempotent(self, db_path):
        spend_db.set_setting("retention_days", 30, db_path)
        spend_db.init_database(db_path)
        assert spend_db.get_setting("retention_days", db_path) == 30


class TestEvents:
    """Test event inserts and queries."""

    def test_insert_and_count(self, db_path, make_event):
        inserted = spend_db.insert_events([make_event("a"), make_event("b")], db_path)
        assert inserted == 2
        assert spend_db.count_events(db_path) == 2

    def test_duplicate_request_is_ignored(self, db_path, make_event):
        assert spend_db.insert_event(make_event("a"), db_path) is True
        assert spend_db.insert_event(make_event("a", cost_usd=99.0), db_path) is False
        assert spend_db.count_events(db_path) == 1

    def test_same_request_id_different_provider(self, db_path, make_event):
        spend_db.insert_event(make_event("a"), db_path)
        spend_db.insert_event(make_event("a", model="gpt-4o", provider=Provider.OPENAI), db_path)
        assert spend_db.count_events(db_path) == 2

    def test_enum_values_stored(self, db_path, make_event):
        spend_db.insert_event(make_event("a", source=Source.SUBAGENT), db_path)
        [row] = spend_db.export_data(db_path=db_path)
        assert row["provider"] == "anthropic"
        assert row["source"] == "claude-code-subagent"

    def test_models(self, db_path, make_event):
        spend_db.insert_events([
            make_event("a", model="gpt-4o"),
            make_event("b", model="claude-haiku-4-5"),
            make_event("c", model="gpt-4o"),
        ], db_path)
        assert spend_db.get_models(db_path) == ["claude-haiku-4-5", "gpt-4o"]

    def test_delete_range(self, db_path, make_event):
        spend_db.insert_events([
            make_event("old", occurred_at="2024-01-01T10:00:00.000Z"),
            make_event("mid", occurred_at="2024-01-02T10:00:00.000Z"),
            make_event("new", occurred_at="2024-01-03T10:00:00.000Z"),
        ], db_path)

        deleted = spend_db.delete_events("2024-01-02", "2024-01-02", db_path)

        assert deleted == 1
        assert [r["request_id"] for r in spend_db.export_data(db_path=db_path)] == ["new", "old"]

    def test_delete_all(self, db_path, make_event):
        spend_db.insert_event(make_event("a"), db_path)
        spend_db.upsert_import_state("/x.jsonl", 1, 1, db_path)

        spend_db.delete_all(db_path)

        assert spend_db.count_events(db_path) == 0
        assert spend_db.get_import_state("/x.jsonl", db_path) is None


class TestSettings:
    """Test JSON-encoded settings."""

    def test_roundtrip_types(self, db_path):
        spend_db.set_setting("retention_days", 7, db_path)
        spend_db.set_setting("auto_import_on_start", False, db_path)
        assert spend_db.get_setting("retention_days", db_path) == 7
        assert spend_db.get_setting("auto_import_on_start", db_path) is False

    def test_missing_key(self, db_path):
        assert spend_db.get_setting("nope", db_path) is None


class TestImportState:
    """Test per-file import bookkeeping."""

    def test_upsert(self, db_path):
        spend_db.upsert_import_state("/logs/a.jsonl", 100, 5, db_path)
        spend_db.upsert_import_state("/logs/a.jsonl", 200, 9, db_path)

        state = spend_db.get_import_state("/logs/a.jsonl", db_path)

        assert state["file_mtime"] == 200
        assert state["last_line_index"] == 9

    def test_clear(self, db_path):
        spend_db.upsert_import_state("/logs/a.jsonl", 100, 5, db_path)
        spend_db.clear_import_state(db_path)
        assert spend_db.get_import_state("/logs/a.jsonl", db_path) is None


class TestRetention:
    """Test age-based cleanup."""

    def test_unset_retention_keeps_everything(self, db_path, make_event):
        spend_db.insert_event(make_event("a", occurred_at="2000-01-01T00:00:00.000Z"), db_path)
        assert spend_db.apply_retention(db_path) == 0
        assert spend_db.count_events(db_path) == 1

    def test_old_events_deleted(self, db_path, make_event):
        spend_db.insert_events([
            make_event("old", occurred_at="2024-01-01T00:00:00.000Z"),
            make_event("recent", occurred_at="2024-01-25T00:00:00.000Z"),
        ], db_path)
        spend_db.set_setting("retention_days", 10, db_path)

        now = datetime(2024, 1, 30, tzinfo=timezone.utc)
        deleted = spend_db.apply_retention(db_path, now=now)

        assert deleted == 1
        assert [r["request_id"] for r in spend_db.export_data(db_path=db_path)] == ["recent"]


class TestExport:
    """Test export ordering and filtering."""

    def test_newest_first_with_range(self, db_path, make_event):
        spend_db.insert_events([
            make_event("a", occurred_at="2024-01-01T10:00:00.000Z"),
            make_event("b", occurred_at="2024-01-02T10:00:00.000Z"),
            make_event("c", occurred_at="2024-01-03T10:00:00.000Z"),
        ], db_path)

        rows = spend_db.export_data("2024-01-02", None, db_path)

        assert [r["request_id"] for r in rows] == ["c", "b"]
