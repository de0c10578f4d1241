#region Imports
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from llm_spend.config.settings import (
    LOG_FILE_SUFFIX,
    PROJECTS_DIRNAME,
    SESSION_INDEX_FILENAME,
)
#endregion


logger = logging.getLogger(__name__)


#region Data Classes


@dataclass(frozen=True)
class LogFile:
    """
    A session log discovered under a project slug directory.

    Attributes:
        path: Path to the .jsonl file
        project_path: Logical project path from the session index, if known
    """

    path: Path
    project_path: Optional[str] = None


@dataclass(frozen=True)
class SessionIndex:
    """
    Parsed sessions-index.json of one slug directory.

    Attributes:
        project_paths: Log file name -> project path
        fallback_project_path: Project path of the first index entry
    """

    project_paths: dict[str, Optional[str]]
    fallback_project_path: Optional[str] = None

    def resolve(self, file_name: str) -> Optional[str]:
        return self.project_paths.get(file_name) or self.fallback_project_path


EMPTY_INDEX = SessionIndex(project_paths={})

#endregion


#region Functions


def read_session_index(slug_dir: Path) -> SessionIndex:
    """
    Parse the optional session index of a slug directory.

    Args:
        slug_dir: Per-project log directory

    Returns:
        SessionIndex; EMPTY_INDEX if the file is missing or malformed
    """
    index_path = slug_dir / SESSION_INDEX_FILENAME
    if not index_path.is_file():
        return EMPTY_INDEX

    try:
        with open(index_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Skipping unreadable session index %s: %s", index_path, e)
        return EMPTY_INDEX

    entries = data.get("entries") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        return EMPTY_INDEX

    project_paths: dict[str, Optional[str]] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        full_path = entry.get("fullPath")
        if isinstance(full_path, str) and full_path:
            project_paths[Path(full_path).name] = _project_path(entry)

    fallback = None
    if entries and isinstance(entries[0], dict):
        fallback = _project_path(entries[0])

    return SessionIndex(project_paths=project_paths, fallback_project_path=fallback)


def _project_path(entry: dict) -> Optional[str]:
    value = entry.get("projectPath")
    return value if isinstance(value, str) and value else None


def list_slug_dirs(claude_dir: Path) -> list[Path]:
    """
    List per-project slug directories under <claude_dir>/projects.

    Symbolic links are not followed.

    Returns:
        Sorted list of slug directories; empty if the tree is missing
    """
    projects_dir = claude_dir / PROJECTS_DIRNAME
    if not projects_dir.is_dir():
        return []

    try:
        children = sorted(projects_dir.iterdir())
    except OSError as e:
        logger.warning("Cannot list %s: %s", projects_dir, e)
        return []

    return [p for p in children if p.is_dir() and not p.is_symlink()]


def locate_log_files(claude_dir: Path) -> list[LogFile]:
    """
    Get all top-level JSONL logs under Claude's projects directory.

    Only files directly inside each slug directory are returned. Nested
    directories (subagent transcripts and other derived records) are skipped
    so the same request is not counted twice.

    Args:
        claude_dir: Claude data directory (e.g., ~/.claude)

    Returns:
        List of LogFile entries with resolved project paths
    """
    log_files: list[LogFile] = []

    for slug_dir in list_slug_dirs(claude_dir):
        index = read_session_index(slug_dir)

        try:
            children = sorted(slug_dir.iterdir())
        except OSError as e:
            logger.warning("Skipping unreadable project directory %s: %s", slug_dir, e)
            continue

        for path in children:
            if path.is_symlink() or not path.is_file():
                continue
            if not path.name.endswith(LOG_FILE_SUFFIX):
                continue
            log_files.append(LogFile(path=path, project_path=index.resolve(path.name)))

    return log_files


#endregion
