#region Imports
import json
from pathlib import Path
from typing import Optional

from llm_spend.config.settings import APP_DATA_DIR
#endregion


#region Constants
CONFIG_PATH = APP_DATA_DIR / "config.json"
#endregion


#region Functions


def load_config(config_path: Optional[Path] = None) -> dict:
    """
    Load user configuration from disk.

    A missing, unreadable or corrupt file yields the defaults.

    Returns:
        Configuration dictionary with user preferences
    """
    config = get_default_config()
    config_path = config_path or CONFIG_PATH
    if not config_path.exists():
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except (json.JSONDecodeError, OSError):
        return config

    if isinstance(stored, dict):
        config.update(stored)
    return config


def save_config(config: dict, config_path: Optional[Path] = None) -> None:
    """
    Save user configuration to disk.

    Args:
        config: Configuration dictionary to save

    Raises:
        OSError: If config cannot be written
    """
    config_path = config_path or CONFIG_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)


def get_default_config() -> dict:
    """
    Get default configuration values.

    Returns:
        Default configuration dictionary
    """
    return {
        "claude_data_dir": None,  # Custom Claude data directory (None = ~/.claude)
        "db_path": None,  # Custom sink database path (None = ~/.llm-spend/llm-spend.db)
        "version": "1.0",
    }


def get_claude_dir(config_path: Optional[Path] = None) -> Optional[str]:
    """Get the configured Claude data directory, or None for auto."""
    return load_config(config_path).get("claude_data_dir")


def set_claude_dir(path: str, config_path: Optional[Path] = None) -> None:
    """
    Set a custom Claude data directory.

    Raises:
        ValueError: If the path does not exist or is not a directory
    """
    resolved = Path(path).expanduser().resolve()
    if not resolved.is_dir():
        raise ValueError(f"Not a directory: {resolved}")

    config = load_config(config_path)
    config["claude_data_dir"] = str(resolved)
    save_config(config, config_path)


def clear_claude_dir(config_path: Optional[Path] = None) -> None:
    """Clear the custom Claude data directory (use auto-detect)."""
    config = load_config(config_path)
    config["claude_data_dir"] = None
    save_config(config, config_path)


def get_db_path(config_path: Optional[Path] = None) -> Optional[str]:
    """Get the configured sink database path, or None for auto."""
    return load_config(config_path).get("db_path")


def set_db_path(path: str, config_path: Optional[Path] = None) -> None:
    """
    Set a custom sink database path.

    Raises:
        ValueError: If the path points to an existing directory
    """
    resolved = Path(path).expanduser().resolve()
    if resolved.is_dir():
        raise ValueError(f"Database path must be a file, not a directory: {resolved}")

    config = load_config(config_path)
    config["db_path"] = str(resolved)
    save_config(config, config_path)


def clear_db_path(config_path: Optional[Path] = None) -> None:
    """Clear the custom sink database path (use auto-detect)."""
    config = load_config(config_path)
    config["db_path"] = None
    save_config(config, config_path)


#endregion
