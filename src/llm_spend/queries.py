"""
Request/response contract for the spend dashboard API.

An HTTP layer passes the raw query-string parameters of a request to one of
the `SpendQueries` methods and serializes the returned value as JSON.
Parameter errors surface as `QueryError` (a ValueError), meant to become a
400 response.
"""

#region Imports
from typing import Mapping, Optional

from llm_spend.aggregation.summary import (
    compute_events,
    compute_overview,
    compute_projects,
    compute_timeseries,
    compute_top_sessions,
    list_models,
)
from llm_spend.config.defaults import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, DEFAULT_SESSION_LIMIT
from llm_spend.storage.event_store import EventStore
#endregion


Params = Mapping[str, Optional[str]]


class QueryError(ValueError):
    """A query parameter could not be interpreted."""


#region Helpers


def _param(params: Params, name: str) -> Optional[str]:
    """Read a parameter, treating an empty string as absent."""
    value = params.get(name)
    return value if value else None


def _int_param(params: Params, name: str, default: int, minimum: int = 1) -> int:
    raw = _param(params, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise QueryError(f"'{name}' must be an integer, got {raw!r}")
    if value < minimum:
        raise QueryError(f"'{name}' must be >= {minimum}, got {value}")
    return value


#endregion


#region Classes


class SpendQueries:
    """Read operations over an EventStore, one per dashboard endpoint."""

    def __init__(self, store: EventStore):
        self.store = store

    def overview(self, params: Params) -> dict:
        """GET /api/overview -> {totals, byModel}"""
        result = compute_overview(self.store.get(), _param(params, "from"), _param(params, "to"))
        return result.to_dict()

    def timeseries(self, params: Params) -> list[dict]:
        """GET /api/timeseries -> [{date, model, provider, cost_usd, requests}]"""
        points = compute_timeseries(self.store.get(), _param(params, "from"), _param(params, "to"))
        return [point.to_dict() for point in points]

    def sessions(self, params: Params) -> list[dict]:
        """GET /api/sessions -> top sessions by cost (limit defaults to 20)"""
        limit = _int_param(params, "limit", DEFAULT_SESSION_LIMIT, minimum=0)
        sessions = compute_top_sessions(
            self.store.get(), _param(params, "from"), _param(params, "to"), limit=limit
        )
        return [session.to_dict() for session in sessions]

    def projects(self, params: Params) -> list[dict]:
        """GET /api/projects -> per-project rollup by cost"""
        projects = compute_projects(self.store.get(), _param(params, "from"), _param(params, "to"))
        return [project.to_dict() for project in projects]

    def events(self, params: Params) -> dict:
        """GET /api/events -> {rows, total, page, limit, pages}"""
        page = compute_events(
            self.store.get(),
            page=_int_param(params, "page", DEFAULT_PAGE),
            limit=_int_param(params, "limit", DEFAULT_PAGE_LIMIT),
            model=_param(params, "model"),
            provider=_param(params, "provider"),
            date_from=_param(params, "from"),
            date_to=_param(params, "to"),
            session_id=_param(params, "session_id"),
            sort=_param(params, "sort"),
        )
        return page.to_dict()

    def models(self) -> list[str]:
        """GET /api/models -> sorted distinct model names"""
        return list_models(self.store.get())

    def refresh(self) -> dict:
        """POST /api/refresh -> re-scan logs and replace the cache"""
        events = self.store.refresh()
        return {"events": len(events), "ok": True}

    def settings(self) -> dict:
        """GET /api/settings -> read-only runtime info"""
        return {"claude_data_dir": str(self.store.claude_dir)}


#endregion
