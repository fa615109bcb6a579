"""
ProgressTracker - Thread-safe progress counter shared by the workers of a phase.
"""

import logging
import threading
from typing import Optional


class ProgressTracker:
    """
    Counts completed items of the active phase and emits a status line per item.

    One tracker is created per build and handed to the workers; all state
    changes happen under a single lock.
    """

    def __init__(self, quiet: bool = False, logger: Optional[logging.Logger] = None):
        """
        Initialize progress tracker.

        Args:
            quiet: If True, status lines are only logged at DEBUG level
            logger: Optional logger instance
        """
        self.quiet = quiet
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self.phase = ''
        self.total = 0
        self.completed = 0

    @property
    def percent(self) -> int:
        """Completion of the active phase, 0-100."""
        with self._lock:
            return self._percent()

    def _percent(self) -> int:
        if self.total <= 0:
            return 100
        return int(self.completed * 100 / self.total)

    def _emit(self, message: str) -> None:
        level = logging.DEBUG if self.quiet else logging.INFO
        self.logger.log(level, message)

    def start(self, phase: str, total: int) -> None:
        """Reset the counter for a new phase."""
        with self._lock:
            self.phase = phase
            self.total = total
            self.completed = 0
            self._emit(f"{phase}: {total} item(s)")

    def report(self, label: str) -> int:
        """
        Mark one item as completed.

        Args:
            label: Short description of the finished item (usually a file name)

        Returns:
            The new completed count
        """
        with self._lock:
            self.completed += 1
            self._emit(f"[{self._percent():3d}%] {self.phase}: {label}")
            return self.completed

    def finish(self) -> None:
        """Mark the active phase as completed."""
        with self._lock:
            self._emit(f"{self.phase}: completed")
