#region Imports
import os
from pathlib import Path
from typing import Final, Optional
#endregion


#region Constants
# Claude data directory (holds the `projects` log tree)
DEFAULT_CLAUDE_DIR: Final[Path] = Path.home() / ".claude"
CLAUDE_DIR_ENV_VAR: Final[str] = "LLM_SPEND_CLAUDE_DIR"

PROJECTS_DIRNAME: Final[str] = "projects"
SESSION_INDEX_FILENAME: Final[str] = "sessions-index.json"
LOG_FILE_SUFFIX: Final[str] = ".jsonl"

# Placeholder model id written for turns that made no real model call
SYNTHETIC_MODEL: Final[str] = "<synthetic>"

# Maximum characters of prompt text kept per event
PROMPT_TEXT_LIMIT: Final[int] = 400

# Application data (config file and optional SQLite sink)
APP_DATA_DIR: Final[Path] = Path.home() / ".llm-spend"
DEFAULT_DB_PATH: Final[Path] = APP_DATA_DIR / "llm-spend.db"
#endregion


#region Functions


def resolve_claude_dir(override: Optional[str | Path] = None) -> Path:
    """
    Resolve the Claude data directory to scan.

    Priority:
    1. Explicit override (CLI flag / caller argument)
    2. Environment variable: LLM_SPEND_CLAUDE_DIR
    3. Config file: user_config.get_claude_dir()
    4. Default: ~/.claude

    Returns:
        Path to the Claude data directory (may not exist)
    """
    if override:
        return Path(override).expanduser()

    env_value = os.getenv(CLAUDE_DIR_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()

    from llm_spend.config.user_config import get_claude_dir

    configured = get_claude_dir()
    if configured:
        return Path(configured).expanduser()

    return DEFAULT_CLAUDE_DIR


def resolve_db_path(override: Optional[str | Path] = None) -> Path:
    """Resolve the SQLite sink path: override > config file > default."""
    if override:
        return Path(override).expanduser()

    from llm_spend.config.user_config import get_db_path

    configured = get_db_path()
    if configured:
        return Path(configured).expanduser()

    return DEFAULT_DB_PATH


#endregion
