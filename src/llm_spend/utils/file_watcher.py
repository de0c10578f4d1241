#region Imports
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from llm_spend.config.settings import LOG_FILE_SUFFIX, PROJECTS_DIRNAME
#endregion


logger = logging.getLogger(__name__)

_RELEVANT_EVENT_TYPES = frozenset({EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED})


#region Classes


class LogChangeHandler(FileSystemEventHandler):
    """
    Calls `on_change` when a session log is written.

    Created, modified and moved-into-place `.jsonl` files count; directory
    events and other files (session indexes, notes) do not. Calls closer
    together than `debounce_seconds` are collapsed into the first one.
    """

    def __init__(
        self,
        on_change: Callable[[], None],
        debounce_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__()
        self.on_change = on_change
        self.debounce_seconds = debounce_seconds
        self._clock = clock
        self.last_fired: Optional[float] = None

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _RELEVANT_EVENT_TYPES:
            return

        # A rename into place reports the log under dest_path
        path = getattr(event, "dest_path", "") or event.src_path
        if not str(path).endswith(LOG_FILE_SUFFIX):
            return

        now = self._clock()
        if self.last_fired is not None and now - self.last_fired < self.debounce_seconds:
            return
        self.last_fired = now
        logger.debug("Log change detected: %s", path)
        self.on_change()


class LogWatcher:
    """
    Watches a Claude projects tree for new or growing session logs.

    Can be used as a context manager:

        with LogWatcher(projects_dir, store.refresh):
            ...
    """

    def __init__(self, projects_dir: Path, on_change: Callable[[], None], debounce_seconds: float = 1.0):
        """
        Args:
            projects_dir: The `projects` directory holding per-project slug folders
            on_change: Called (from the observer thread) after a log change
            debounce_seconds: Minimum seconds between calls
        """
        self.projects_dir = projects_dir
        self.handler = LogChangeHandler(on_change, debounce_seconds)
        self._observer: Optional[Observer] = None

    def start(self) -> None:
        """
        Begin watching recursively.

        Raises:
            FileNotFoundError: If the projects directory is missing
        """
        if not self.projects_dir.is_dir():
            raise FileNotFoundError(f"No Claude projects directory at {self.projects_dir}")

        observer = Observer()
        observer.schedule(self.handler, str(self.projects_dir), recursive=True)
        observer.start()
        self._observer = observer
        logger.info("Watching %s", self.projects_dir)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the observer thread; a no-op when not started."""
        observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        observer.join(timeout)

    def is_alive(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def __enter__(self) -> "LogWatcher":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


#endregion


#region Functions


def watch_claude_files(
    claude_dir: Path,
    on_change: Callable[[], None],
    debounce_seconds: float = 1.0,
) -> LogWatcher:
    """Build a (not yet started) watcher over `<claude_dir>/projects`."""
    return LogWatcher(claude_dir / PROJECTS_DIRNAME, on_change, debounce_seconds)


#endregion
