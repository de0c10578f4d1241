"""Configuration module for llm-spend."""

from llm_spend.config.defaults import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_LIMIT,
    DEFAULT_SESSION_LIMIT,
    DEFAULT_SETTINGS,
    get_all_defaults,
)

__all__ = [
    "DEFAULT_PAGE",
    "DEFAULT_PAGE_LIMIT",
    "DEFAULT_SESSION_LIMIT",
    "DEFAULT_SETTINGS",
    "get_all_defaults",
]
