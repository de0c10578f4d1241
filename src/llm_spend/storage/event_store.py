#region Imports
import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from llm_spend.config.settings import resolve_claude_dir
from llm_spend.data.loader import load_all_events
from llm_spend.models.usage_event import UsageEvent
#endregion


logger = logging.getLogger(__name__)

Loader = Callable[[Path], tuple[UsageEvent, ...]]


#region Classes


class EventStore:
    """
    Owner of the loaded event collection.

    The collection is an immutable tuple. `refresh()` builds a complete new
    snapshot and swaps it in with a single assignment, so readers holding the
    result of `get()` keep a consistent view while a refresh runs.
    """

    def __init__(self, claude_dir: Optional[Path] = None, loader: Loader = load_all_events):
        """
        Initialize the store without loading anything.

        Args:
            claude_dir: Claude data directory; resolved from config when None
            loader: Function that performs the full scan
        """
        self.claude_dir = claude_dir if claude_dir is not None else resolve_claude_dir()
        self._loader = loader
        self._events: Optional[tuple[UsageEvent, ...]] = None
        self._refresh_lock = threading.Lock()

    def init(self) -> tuple[UsageEvent, ...]:
        """
        Load events eagerly at startup.

        A failing scan leaves the store with an empty collection.
        """
        try:
            return self.refresh()
        except Exception as e:
            logger.error("Error loading events from %s: %s", self.claude_dir, e)
            self._events = ()
            return self._events

    def get(self) -> tuple[UsageEvent, ...]:
        """Return the current snapshot, loading it on first use."""
        events = self._events
        if events is None:
            events = self.refresh()
        return events

    def refresh(self) -> tuple[UsageEvent, ...]:
        """
        Re-scan the log directory and replace the snapshot wholesale.

        Returns:
            The new snapshot
        """
        with self._refresh_lock:
            events = self._loader(self.claude_dir)
            self._events = events
        logger.info("Event store holds %d events", len(events))
        return events

    @property
    def is_loaded(self) -> bool:
        return self._events is not None


#endregion


#region Functions

_default_store: Optional[EventStore] = None


def get_store(claude_dir: Optional[Path] = None) -> EventStore:
    """
    Get the process-wide store instance.

    The first call fixes the data directory; later calls return the same store.

    Args:
        claude_dir: Claude data directory used when the store is created

    Returns:
        The shared EventStore
    """
    global _default_store
    if _default_store is None:
        _default_store = EventStore(claude_dir)
    return _default_store


def reset_store() -> None:
    """Drop the process-wide store so the next get_store() creates a new one."""
    global _default_store
    _default_store = None


#endregion
