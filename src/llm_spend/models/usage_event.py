#region Imports
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional
#endregion


#region Enums


class Provider(str, Enum):
    """Billing provider a model belongs to."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    UNKNOWN = "unknown"


class Source(str, Enum):
    """
    Request flow an event originated from.

    PRIMARY is the interactive session; SUBAGENT marks records flagged as
    side-chain (background) requests in the log.
    """

    PRIMARY = "claude-code"
    SUBAGENT = "claude-code-subagent"


#endregion


#region Data Classes


@dataclass(frozen=True)
class UsageEvent:
    """
    One billable request after deduplication and cost attribution.

    Attributes:
        provider: Provider resolved from the model name
        model: Model identifier exactly as reported by the log
        request_id: Message id, unique across a loaded collection
        occurred_at: ISO-8601 timestamp string (lexical order == chronological order)
        session_id: Claude Code session UUID, if recorded
        project_path: Absolute path of the originating project, if known
        input_tokens: Number of input tokens
        output_tokens: Number of output tokens
        cache_creation_tokens: Number of tokens written to the prompt cache
        cache_read_tokens: Number of tokens read from the prompt cache
        cost_usd: Cost computed once at extraction time
        source: Primary or subagent request flow
        prompt_text: Last human-written prompt preceding this request (<= 400 chars)
    """

    provider: Provider
    model: str
    request_id: str
    occurred_at: str
    session_id: Optional[str] = None
    project_path: Optional[str] = None
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0
    cost_usd: float = 0.0
    source: Source = Source.PRIMARY
    prompt_text: Optional[str] = None

    @property
    def date_key(self) -> str:
        """Calendar day (YYYY-MM-DD) taken straight from the timestamp string."""
        return self.occurred_at[:10]

    @property
    def total_tokens(self) -> int:
        """Calculate total tokens across all categories."""
        return (
            self.input_tokens
            + self.output_tokens
            + self.cache_creation_tokens
            + self.cache_read_tokens
        )

    def to_dict(self) -> dict:
        """Serialize to the JSON row shape used by the events listing."""
        row = asdict(self)
        row["provider"] = self.provider.value
        row["source"] = self.source.value
        return row


#endregion
