"""
Unit tests for the session-log watcher.

Handler behaviour is driven with synthetic watchdog events and a fake clock.
"""

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from llm_spend.utils.file_watcher import LogChangeHandler, LogWatcher, watch_claude_files


class _FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def calls():
    return []


@pytest.fixture
def clock():
    return _FakeClock()


@pytest.fixture
def handler(calls, clock):
    return LogChangeHandler(lambda: calls.append(clock.now), debounce_seconds=2.0, clock=clock)


class TestLogChangeHandler:
    """Test event filtering and debouncing."""

    def test_log_modification_fires(self, handler, calls):
        handler.on_any_event(FileModifiedEvent("/p/slug/a.jsonl"))
        assert calls == [100.0]

    def test_log_creation_fires(self, handler, calls):
        handler.on_any_event(FileCreatedEvent("/p/slug/new.jsonl"))
        assert len(calls) == 1

    def test_rename_into_place_fires(self, handler, calls):
        handler.on_any_event(FileMovedEvent("/p/slug/.tmp-write", "/p/slug/a.jsonl"))
        assert len(calls) == 1

    def test_deletion_ignored(self, handler, calls):
        handler.on_any_event(FileDeletedEvent("/p/slug/a.jsonl"))
        assert calls == []

    def test_other_files_ignored(self, handler, calls):
        handler.on_any_event(FileModifiedEvent("/p/slug/sessions-index.json"))
        handler.on_any_event(FileModifiedEvent("/p/slug/notes.txt"))
        assert calls == []

    def test_directories_ignored(self, handler, calls):
        handler.on_any_event(DirModifiedEvent("/p/slug.jsonl"))
        assert calls == []

    def test_debounce(self, handler, calls, clock):
        handler.on_any_event(FileModifiedEvent("/p/a.jsonl"))
        clock.now = 101.0
        handler.on_any_event(FileModifiedEvent("/p/a.jsonl"))
        clock.now = 102.5
        handler.on_any_event(FileModifiedEvent("/p/a.jsonl"))
        assert calls == [100.0, 102.5]

    def test_first_event_fires_even_at_time_zero(self, calls):
        handler = LogChangeHandler(lambda: calls.append("hit"), debounce_seconds=5.0, clock=lambda: 0.0)
        handler.on_any_event(FileModifiedEvent("/p/a.jsonl"))
        assert calls == ["hit"]


class TestLogWatcher:
    """Test watcher lifecycle."""

    def test_watches_projects_dir(self, claude_dir):
        watcher = watch_claude_files(claude_dir, lambda: None)
        assert watcher.projects_dir == claude_dir / "projects"
        assert not watcher.is_alive()

    def test_missing_directory(self, tmp_path):
        watcher = LogWatcher(tmp_path / "missing", lambda: None)
        with pytest.raises(FileNotFoundError):
            watcher.start()

    def test_context_manager(self, claude_dir):
        with watch_claude_files(claude_dir, lambda: None) as watcher:
            assert watcher.is_alive()
        assert not watcher.is_alive()

    def test_stop_without_start(self, tmp_path):
        LogWatcher(tmp_path, lambda: None).stop()
