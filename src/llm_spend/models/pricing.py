#region Imports
import re
from dataclasses import dataclass
from typing import Optional

from llm_spend.models.usage_event import Provider
#endregion


#region Data Classes


@dataclass(frozen=True)
class PricingEntry:
    """
    Represents pricing for a family of models sharing a name prefix.

    All rates are USD per million tokens. A rate of None means the category
    is not billed for that model and counts as zero.

    Attributes:
        prefix: Lower-case model-name prefix this entry matches
        provider: Provider that bills the model
        input_price: Price per million input tokens
        output_price: Price per million output tokens
        cache_write_price: Price per million cache creation tokens
        cache_read_price: Price per million cache read tokens
    """

    prefix: str
    provider: Provider
    input_price: Optional[float]
    output_price: Optional[float]
    cache_write_price: Optional[float]
    cache_read_price: Optional[float]


@dataclass(frozen=True)
class PricingTable:
    """
    Ordered price list resolved by first prefix match.

    Entries must be ordered most-specific prefix first: "gpt-4o-mini" before
    "gpt-4o" before "gpt-4". Matching returns the first entry whose prefix
    starts the model name, not the longest one.
    """

    entries: tuple[PricingEntry, ...]

    def match(self, normalized_model: str) -> Optional[PricingEntry]:
        for entry in self.entries:
            if normalized_model.startswith(entry.prefix):
                return entry
        return None


#endregion


#region Pricing Table
# Prices per million tokens (USD)
# Claude 4.5/4.6 Opus is the cheaper generation ($5/$25), not the 4.0/4.1 tier ($15/$75)

_A = Provider.ANTHROPIC
_O = Provider.OPENAI

PRICING_TABLE = PricingTable((
    # Anthropic Claude 4.6
    PricingEntry("claude-opus-4-6", _A, 5.00, 25.00, 6.25, 0.50),
    PricingEntry("claude-sonnet-4-6", _A, 3.00, 15.00, 3.75, 0.30),
    PricingEntry("claude-haiku-4-6", _A, 1.00, 5.00, 1.25, 0.10),

    # Anthropic Claude 4.5
    PricingEntry("claude-opus-4-5", _A, 5.00, 25.00, 6.25, 0.50),
    PricingEntry("claude-sonnet-4-5", _A, 3.00, 15.00, 3.75, 0.30),
    PricingEntry("claude-haiku-4-5", _A, 1.00, 5.00, 1.25, 0.10),

    # Anthropic Claude 4.0 / 4.1 (legacy expensive tier)
    PricingEntry("claude-opus-4-1", _A, 15.00, 75.00, 18.75, 1.50),
    PricingEntry("claude-opus-4", _A, 15.00, 75.00, 18.75, 1.50),

    # Anthropic Claude 3.x
    PricingEntry("claude-opus-3", _A, 15.00, 75.00, 18.75, 1.50),
    PricingEntry("claude-sonnet-3-7", _A, 3.00, 15.00, 3.75, 0.30),
    PricingEntry("claude-sonnet-3-5", _A, 3.00, 15.00, 3.75, 0.30),
    PricingEntry("claude-sonnet-3", _A, 3.00, 15.00, 3.75, 0.30),
    PricingEntry("claude-haiku-3-5", _A, 0.80, 4.00, 1.00, 0.08),
    PricingEntry("claude-haiku-3", _A, 0.25, 1.25, 0.30, 0.03),

    # OpenAI GPT-4o family
    PricingEntry("gpt-4o-mini", _O, 0.15, 0.60, None, 0.075),
    PricingEntry("gpt-4o", _O, 2.50, 10.00, None, 1.25),
    PricingEntry("gpt-4-turbo", _O, 10.00, 30.00, None, None),
    PricingEntry("gpt-4", _O, 30.00, 60.00, None, None),
    PricingEntry("gpt-3.5-turbo", _O, 0.50, 1.50, None, None),

    # OpenAI o-series
    PricingEntry("o4-mini", _O, 1.10, 4.40, None, 0.275),
    PricingEntry("o3-mini", _O, 1.10, 4.40, None, 0.55),
    PricingEntry("o3", _O, 10.00, 40.00, None, 2.50),
    PricingEntry("o1-mini", _O, 3.00, 12.00, None, 1.50),
    PricingEntry("o1", _O, 15.00, 60.00, None, 7.50),
))

_COMPACT_DATE_SUFFIX = re.compile(r"-\d{8}$")
_DASHED_DATE_SUFFIX = re.compile(r"-\d{4}-\d{2}-\d{2}$")

_OPENAI_PREFIXES = ("gpt-", "o1", "o3", "o4")
_ANTHROPIC_PREFIXES = ("claude",)

TOKENS_PER_MILLION = 1_000_000
#endregion


#region Functions


def normalize_model_name(model: str) -> str:
    """
    Lower-case a model id and strip a trailing release date.

    Args:
        model: Model identifier (e.g., 'claude-sonnet-4-5-20250929')

    Returns:
        Normalized name (e.g., 'claude-sonnet-4-5')
    """
    normalized = _COMPACT_DATE_SUFFIX.sub("", model.lower())
    return _DASHED_DATE_SUFFIX.sub("", normalized)


def lookup_model(model: Optional[str]) -> Optional[PricingEntry]:
    """
    Find the pricing entry for a model id.

    Args:
        model: Model identifier as reported by the log

    Returns:
        First matching PricingEntry, or None for unknown models
    """
    if not model:
        return None
    return PRICING_TABLE.match(normalize_model_name(model))


def compute_cost_usd(
    model: Optional[str],
    input_tokens: int = 0,
    output_tokens: int = 0,
    cache_creation_tokens: int = 0,
    cache_read_tokens: int = 0,
) -> float:
    """
    Calculate the cost for given token usage including cache tokens.

    Unknown models are tracked at zero cost rather than rejected.

    Args:
        model: Model identifier
        input_tokens: Number of input tokens
        output_tokens: Number of output tokens
        cache_creation_tokens: Number of cache creation (write) tokens
        cache_read_tokens: Number of cache read tokens

    Returns:
        Total cost in USD, never negative
    """
    entry = lookup_model(model)
    if entry is None:
        return 0.0

    billed = (
        (input_tokens, entry.input_price),
        (output_tokens, entry.output_price),
        (cache_creation_tokens, entry.cache_write_price),
        (cache_read_tokens, entry.cache_read_price),
    )

    cost = 0.0
    for tokens, rate in billed:
        if rate is None or tokens <= 0:
            continue
        cost += (tokens / TOKENS_PER_MILLION) * rate
    return cost


def infer_provider(model: Optional[str]) -> Provider:
    """
    Resolve the provider of a model id.

    Uses the price table first, then falls back to well-known name prefixes.
    """
    if not model:
        return Provider.UNKNOWN

    entry = lookup_model(model)
    if entry is not None:
        return entry.provider

    if model.startswith(_OPENAI_PREFIXES):
        return Provider.OPENAI
    if model.startswith(_ANTHROPIC_PREFIXES):
        return Provider.ANTHROPIC
    return Provider.UNKNOWN


def format_cost(cost: float, precision: int = 2) -> str:
    """
    Format cost value for display.

    Args:
        cost: Cost in USD
        precision: Number of decimal places (default: 2)

    Returns:
        Formatted string with specified decimal places (e.g., "$0.00", "$1.23")
    """
    return f"${cost:,.{precision}f}"


#endregion
