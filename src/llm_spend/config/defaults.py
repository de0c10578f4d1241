"""
Default configuration values for llm-spend.

Edit this file to change default settings.
This file is used for:
1. Seeding the settings table of the optional SQLite sink (the log directory
   lives in the JSON config file only, see user_config.py)
2. Default paging and limits of the aggregate queries
"""

#region Sink Settings Defaults

DEFAULT_SETTINGS = {
    "retention_days": None,          # days of events to keep in the sink; None = forever
    "auto_import_on_start": True,    # import into the sink when the CLI starts a watch
}

#endregion


#region Query Defaults

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 50
DEFAULT_SESSION_LIMIT = 20

#endregion


def get_all_defaults() -> dict:
    """
    Get all default settings merged into a single dictionary.

    Returns:
        Dictionary with all default settings combined
    """
    defaults = dict(DEFAULT_SETTINGS)
    defaults.update({
        "page": DEFAULT_PAGE,
        "page_limit": DEFAULT_PAGE_LIMIT,
        "session_limit": DEFAULT_SESSION_LIMIT,
    })
    return defaults
