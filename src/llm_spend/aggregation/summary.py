"""
Aggregate views over a loaded usage-event collection.

Every function takes the full collection plus an optional date range, never
mutates its input, and returns fresh view objects whose `to_dict()` gives the
JSON payload served to the dashboard.
"""

#region Imports
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Optional, Sequence, Union

from llm_spend.aggregation.date_filter import filter_by_date
from llm_spend.config.defaults import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, DEFAULT_SESSION_LIMIT
from llm_spend.models.usage_event import Provider, UsageEvent
#endregion


UNKNOWN_SESSION_KEY = "unknown"
UNKNOWN_PROJECT_KEY = "Unknown"
SORT_BY_COST = "cost"


#region Data Classes


@dataclass
class OverviewTotals:
    """Totals across the whole filtered range."""

    total_requests: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0
    cost_usd: float = 0.0


@dataclass
class ModelBreakdownRow:
    """Aggregated usage metrics for a single model."""

    model: str
    provider: Provider
    requests: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0
    cost_usd: float = 0.0

    def to_dict(self) -> dict:
        row = asdict(self)
        row["provider"] = self.provider.value
        return row


@dataclass
class Overview:
    """
    Totals plus a per-model breakdown sorted by cost, highest first.

    Attributes:
        totals: Overall totals for the range
        by_model: One row per model
    """

    totals: OverviewTotals
    by_model: list[ModelBreakdownRow]

    def to_dict(self) -> dict:
        return {
            "totals": asdict(self.totals),
            "byModel": [row.to_dict() for row in self.by_model],
        }


@dataclass
class TimeseriesPoint:
    """Cost and request count for one model on one calendar day."""

    date: str
    model: str
    provider: Provider
    cost_usd: float = 0.0
    requests: int = 0

    def to_dict(self) -> dict:
        point = asdict(self)
        point["provider"] = self.provider.value
        return point


@dataclass
class SessionSummary:
    """
    Aggregated usage metrics for a single session.

    Attributes:
        session_id: Session UUID (None for the bucket of events without one)
        project_path: Project path of the session's first event
        started_at: Earliest event timestamp
        ended_at: Latest event timestamp
        models: Distinct models in first-use order
    """

    session_id: Optional[str]
    project_path: Optional[str]
    started_at: str
    ended_at: str
    requests: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0
    cost_usd: float = 0.0
    models: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        summary = asdict(self)
        summary["models"] = ",".join(self.models)
        return summary


@dataclass
class ProjectSummary:
    """Aggregated usage metrics for a project path."""

    project_path: str
    requests: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0
    cost_usd: float = 0.0
    session_ids: set[str] = field(default_factory=set)

    @property
    def sessions(self) -> int:
        """Number of distinct session ids seen for the project."""
        return len(self.session_ids)

    def to_dict(self) -> dict:
        return {
            "project_path": self.project_path,
            "requests": self.requests,
            "cost_usd": self.cost_usd,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "cache_read_tokens": self.cache_read_tokens,
            "cache_creation_tokens": self.cache_creation_tokens,
            "sessions": self.sessions,
        }


@dataclass
class EventPage:
    """One page of the filtered, sorted event listing."""

    rows: list[UsageEvent]
    total: int
    page: int
    limit: int

    @property
    def page_count(self) -> int:
        return math.ceil(self.total / self.limit)

    def to_dict(self) -> dict:
        return {
            "rows": [event.to_dict() for event in self.rows],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "pages": self.page_count,
        }


_Accumulator = Union[OverviewTotals, ModelBreakdownRow, SessionSummary, ProjectSummary]

#endregion


#region Functions


def compute_overview(
    events: Sequence[UsageEvent],
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> Overview:
    """
    Compute overall totals and the per-model breakdown.

    Args:
        events: Loaded event collection
        date_from: Inclusive start day (YYYY-MM-DD), or None
        date_to: Inclusive end day (YYYY-MM-DD), or None

    Returns:
        Overview with by-model rows sorted by cost, highest first
    """
    totals = OverviewTotals()
    by_model: dict[str, ModelBreakdownRow] = {}

    for event in filter_by_date(events, date_from, date_to):
        totals.total_requests += 1
        _add_usage(totals, event)

        row = by_model.get(event.model)
        if row is None:
            row = by_model[event.model] = ModelBreakdownRow(model=event.model, provider=event.provider)
        row.requests += 1
        _add_usage(row, event)

    rows = sorted(by_model.values(), key=lambda r: r.cost_usd, reverse=True)
    return Overview(totals=totals, by_model=rows)


def compute_timeseries(
    events: Sequence[UsageEvent],
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> list[TimeseriesPoint]:
    """
    Group cost and request counts by (calendar day, model).

    Returns:
        Points sorted ascending by day
    """
    points: dict[tuple[str, str], TimeseriesPoint] = {}

    for event in filter_by_date(events, date_from, date_to):
        key = (event.date_key, event.model)
        point = points.get(key)
        if point is None:
            point = points[key] = TimeseriesPoint(
                date=event.date_key, model=event.model, provider=event.provider
            )
        point.cost_usd += event.cost_usd
        point.requests += 1

    return sorted(points.values(), key=lambda p: p.date)


def compute_top_sessions(
    events: Sequence[UsageEvent],
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    limit: int = DEFAULT_SESSION_LIMIT,
) -> list[SessionSummary]:
    """
    Rank sessions by cost.

    Events without a session id share one "unknown" bucket.

    Args:
        events: Loaded event collection
        date_from: Inclusive start day, or None
        date_to: Inclusive end day, or None
        limit: Maximum number of sessions returned

    Returns:
        At most `limit` sessions, most expensive first

    Raises:
        ValueError: If limit is negative
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    sessions: dict[str, SessionSummary] = {}

    for event in filter_by_date(events, date_from, date_to):
        key = event.session_id or UNKNOWN_SESSION_KEY
        summary = sessions.get(key)
        if summary is None:
            summary = sessions[key] = SessionSummary(
                session_id=event.session_id,
                project_path=event.project_path,
                started_at=event.occurred_at,
                ended_at=event.occurred_at,
            )
        summary.requests += 1
        _add_usage(summary, event)
        if event.occurred_at < summary.started_at:
            summary.started_at = event.occurred_at
        if event.occurred_at > summary.ended_at:
            summary.ended_at = event.occurred_at
        if event.model not in summary.models:
            summary.models.append(event.model)

    ranked = sorted(sessions.values(), key=lambda s: s.cost_usd, reverse=True)
    return ranked[:limit]


def compute_projects(
    events: Sequence[UsageEvent],
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> list[ProjectSummary]:
    """
    Roll usage up per project path, most expensive first.

    Events without a project path share one "Unknown" bucket.
    """
    projects: dict[str, ProjectSummary] = {}

    for event in filter_by_date(events, date_from, date_to):
        key = event.project_path or UNKNOWN_PROJECT_KEY
        summary = projects.get(key)
        if summary is None:
            summary = projects[key] = ProjectSummary(project_path=key)
        summary.requests += 1
        _add_usage(summary, event)
        if event.session_id:
            summary.session_ids.add(event.session_id)

    return sorted(projects.values(), key=lambda p: p.cost_usd, reverse=True)


def compute_events(
    events: Sequence[UsageEvent],
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_PAGE_LIMIT,
    model: Optional[str] = None,
    provider: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    session_id: Optional[str] = None,
    sort: Optional[str] = None,
) -> EventPage:
    """
    Filter, sort and paginate raw events.

    Args:
        events: Loaded event collection
        page: 1-indexed page number
        limit: Page size
        model: Exact model filter, or None
        provider: Exact provider filter, or None
        date_from: Inclusive start day, or None
        date_to: Inclusive end day, or None
        session_id: Exact session filter, or None
        sort: "cost" for most expensive first; anything else means newest first

    Returns:
        EventPage with the requested slice and totals

    Raises:
        ValueError: If page or limit is less than 1
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    selected = [
        e for e in filter_by_date(events, date_from, date_to)
        if (model is None or e.model == model)
        and (provider is None or e.provider == provider)
        and (session_id is None or e.session_id == session_id)
    ]

    if sort == SORT_BY_COST:
        selected.sort(key=lambda e: e.cost_usd, reverse=True)
    else:
        selected.sort(key=lambda e: e.occurred_at, reverse=True)

    offset = (page - 1) * limit
    return EventPage(
        rows=selected[offset:offset + limit],
        total=len(selected),
        page=page,
        limit=limit,
    )


def list_models(events: Sequence[UsageEvent]) -> list[str]:
    """Sorted distinct model names across the whole collection."""
    return sorted({event.model for event in events})


def _add_usage(target: _Accumulator, event: UsageEvent) -> None:
    """Add an event's token counts and cost onto an accumulator row."""
    target.input_tokens += event.input_tokens
    target.output_tokens += event.output_tokens
    target.cache_creation_tokens += event.cache_creation_tokens
    target.cache_read_tokens += event.cache_read_tokens
    target.cost_usd += event.cost_usd


#endregion
