"""
Unit tests for the dashboard query contract.

Tests parameter parsing and response shapes against a populated log tree.
"""

import pytest

from llm_spend.queries import QueryError, SpendQueries
from llm_spend.storage.event_store import EventStore


@pytest.fixture
def queries(populated_claude_dir):
    return SpendQueries(EventStore(populated_claude_dir))


class TestOverviewQuery:
    """Test /api/overview."""

    def test_all_time(self, queries):
        payload = queries.overview({})
        assert payload["totals"]["total_requests"] == 4
        assert payload["totals"]["cost_usd"] == pytest.approx(11.5)
        assert payload["byModel"][0]["model"] == "claude-opus-4-6-20250601"

    def test_date_range(self, queries):
        payload = queries.overview({"from": "2024-01-02", "to": "2024-01-02"})
        assert payload["totals"]["total_requests"] == 2
        assert payload["totals"]["cost_usd"] == pytest.approx(5.5)

    def test_empty_params_mean_no_bound(self, queries):
        assert queries.overview({"from": "", "to": ""})["totals"]["total_requests"] == 4


class TestTimeseriesQuery:
    """Test /api/timeseries."""

    def test_points(self, queries):
        points = queries.timeseries({})
        assert [p["date"] for p in points] == ["2024-01-01", "2024-01-02", "2024-01-02", "2024-01-03"]
        assert {p["provider"] for p in points} == {"anthropic", "openai"}


class TestSessionsQuery:
    """Test /api/sessions."""

    def test_default(self, queries):
        sessions = queries.sessions({})
        assert [s["session_id"] for s in sessions] == ["session-a", "session-c", "session-b"]
        assert sessions[0]["models"] == "claude-opus-4-6-20250601,claude-sonnet-4-5-20250929"

    def test_limit(self, queries):
        assert len(queries.sessions({"limit": "1"})) == 1

    def test_zero_limit_is_empty(self, queries):
        assert queries.sessions({"limit": "0"}) == []

    @pytest.mark.parametrize("limit", ["abc", "-3"])
    def test_bad_limit(self, queries, limit):
        with pytest.raises(QueryError):
            queries.sessions({"limit": limit})


class TestProjectsQuery:
    """Test /api/projects."""

    def test_rollup(self, queries):
        projects = queries.projects({})
        assert [p["project_path"] for p in projects] == ["/work/app", "/work/lib"]
        assert projects[0]["sessions"] == 2
        assert projects[0]["cost_usd"] == pytest.approx(9.0)


class TestEventsQuery:
    """Test /api/events."""

    def test_defaults(self, queries):
        payload = queries.events({})
        assert payload["page"] == 1
        assert payload["limit"] == 50
        assert payload["pages"] == 1
        assert payload["rows"][0]["request_id"] == "req-3"

    def test_filters_and_sort(self, queries):
        payload = queries.events({"provider": "anthropic", "sort": "cost"})
        assert [r["request_id"] for r in payload["rows"]] == ["req-1", "req-2", "req-3"]

    def test_session_filter(self, queries):
        payload = queries.events({"session_id": "session-a"})
        assert payload["total"] == 2

    def test_paging(self, queries):
        payload = queries.events({"page": "2", "limit": "3"})
        assert payload["pages"] == 2
        assert [r["request_id"] for r in payload["rows"]] == ["req-1"]

    def test_bad_page(self, queries):
        with pytest.raises(QueryError):
            queries.events({"page": "zero"})

    def test_query_error_is_value_error(self, queries):
        with pytest.raises(ValueError):
            queries.events({"limit": "0"})


class TestOtherQueries:
    """Test /api/models, /api/refresh and /api/settings."""

    def test_models(self, queries):
        assert queries.models() == [
            "claude-haiku-4-5",
            "claude-opus-4-6-20250601",
            "claude-sonnet-4-5-20250929",
            "gpt-4o",
        ]

    def test_refresh_picks_up_new_logs(self, queries, populated_claude_dir, write_jsonl, assistant_record):
        queries.overview({})
        write_jsonl(populated_claude_dir / "projects" / "-work-lib" / "session-d.jsonl", [
            assistant_record("req-5", session_id="session-d"),
        ])

        assert queries.refresh() == {"events": 5, "ok": True}
        assert queries.overview({})["totals"]["total_requests"] == 5

    def test_settings(self, queries, populated_claude_dir):
        assert queries.settings() == {"claude_data_dir": str(populated_claude_dir)}
