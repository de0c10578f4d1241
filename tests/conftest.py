"""
Shared fixtures for llm-spend tests.

Builds fake Claude data directories (`<root>/projects/<slug>/*.jsonl`) in tmp_path.
"""

import json
from pathlib import Path
from typing import Optional

import pytest

from llm_spend.models.usage_event import Provider, Source, UsageEvent


def _assistant_record(
    request_id: Optional[str],
    model: Optional[str] = "claude-sonnet-4-5-20250929",
    timestamp: Optional[str] = "2024-01-01T10:00:00.000Z",
    session_id: Optional[str] = "session-1",
    input_tokens: Optional[int] = 100,
    output_tokens: Optional[int] = 50,
    cache_creation: Optional[int] = 0,
    cache_read: Optional[int] = 0,
    cwd: Optional[str] = None,
    sidechain: bool = False,
    usage: bool = True,
) -> dict:
    message = {"role": "assistant", "content": [{"type": "text", "text": "ok"}]}
    if request_id is not None:
        message["id"] = request_id
    if model is not None:
        message["model"] = model
    if usage:
        message["usage"] = {
            key: value
            for key, value in (
                ("input_tokens", input_tokens),
                ("output_tokens", output_tokens),
                ("cache_creation_input_tokens", cache_creation),
                ("cache_read_input_tokens", cache_read),
            )
            if value is not None
        }

    record = {"type": "assistant", "message": message, "isSidechain": sidechain}
    if timestamp is not None:
        record["timestamp"] = timestamp
    if session_id is not None:
        record["sessionId"] = session_id
    if cwd is not None:
        record["cwd"] = cwd
    return record


def _user_record(content, timestamp: str = "2024-01-01T09:59:00.000Z", session_id: str = "session-1") -> dict:
    return {
        "type": "user",
        "message": {"role": "user", "content": content},
        "timestamp": timestamp,
        "sessionId": session_id,
    }


def _write_jsonl(path: Path, records: list) -> Path:
    """Write records (dicts or raw strings) one per line."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def _make_event(
    request_id: str,
    occurred_at: str = "2024-01-01T10:00:00.000Z",
    model: str = "claude-sonnet-4-5",
    provider: Provider = Provider.ANTHROPIC,
    session_id: Optional[str] = "session-1",
    project_path: Optional[str] = "/work/app",
    cost_usd: float = 1.0,
    input_tokens: int = 10,
    output_tokens: int = 5,
    cache_creation_tokens: int = 0,
    cache_read_tokens: int = 0,
    source: Source = Source.PRIMARY,
) -> UsageEvent:
    return UsageEvent(
        provider=provider,
        model=model,
        request_id=request_id,
        occurred_at=occurred_at,
        session_id=session_id,
        project_path=project_path,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cache_creation_tokens=cache_creation_tokens,
        cache_read_tokens=cache_read_tokens,
        cost_usd=cost_usd,
        source=source,
    )


@pytest.fixture
def assistant_record():
    """Factory for assistant log records carrying usage data."""
    return _assistant_record


@pytest.fixture
def user_record():
    """Factory for user log records."""
    return _user_record


@pytest.fixture
def write_jsonl():
    """Writer for JSONL files."""
    return _write_jsonl


@pytest.fixture
def make_event():
    """Factory for UsageEvent objects."""
    return _make_event


@pytest.fixture
def claude_dir(tmp_path: Path) -> Path:
    """An empty Claude data directory with a projects/ folder."""
    root = tmp_path / ".claude"
    (root / "projects").mkdir(parents=True)
    return root


@pytest.fixture
def populated_claude_dir(claude_dir: Path) -> Path:
    """
    Two project slugs with three sessions across three days.

    - slug-app (indexed): session-a on 2024-01-01 and 2024-01-02, session-b on 2024-01-03
    - slug-lib (no index): session-c on 2024-01-02, uses cwd for project path
    """
    app_dir = claude_dir / "projects" / "-work-app"
    lib_dir = claude_dir / "projects" / "-work-lib"

    _write_jsonl(app_dir / "session-a.jsonl", [
        _user_record("Fix the login bug", session_id="session-a"),
        _assistant_record("req-1", model="claude-opus-4-6-20250601", session_id="session-a",
                          timestamp="2024-01-01T10:00:00.000Z", input_tokens=1_000_000, output_tokens=0),
        _assistant_record("req-2", model="claude-sonnet-4-5-20250929", session_id="session-a",
                          timestamp="2024-01-02T11:00:00.000Z", input_tokens=1_000_000, output_tokens=0),
    ])
    _write_jsonl(app_dir / "session-b.jsonl", [
        _assistant_record("req-3", model="claude-haiku-4-5", session_id="session-b",
                          timestamp="2024-01-03T12:00:00.000Z", input_tokens=1_000_000, output_tokens=0),
        # duplicate of a request already seen in session-a.jsonl
        _assistant_record("req-1", model="claude-opus-4-6", session_id="session-b",
                          timestamp="2024-01-03T12:30:00.000Z"),
    ])
    (app_dir / "sessions-index.json").write_text(json.dumps({
        "entries": [
            {"fullPath": str(app_dir / "session-a.jsonl"), "projectPath": "/work/app"},
            {"fullPath": str(app_dir / "session-b.jsonl"), "projectPath": "/work/app"},
        ]
    }), encoding="utf-8")

    _write_jsonl(lib_dir / "session-c.jsonl", [
        _assistant_record("req-4", model="gpt-4o", session_id="session-c", cwd="/work/lib",
                          timestamp="2024-01-02T09:00:00.000Z", input_tokens=1_000_000, output_tokens=0),
    ])
    return claude_dir
