"""llm-spend: cost attribution and spend aggregates for Claude Code usage logs."""

__version__ = "0.3.0"
