"""
NameAllocator - Unique, filesystem-safe basenames for derived files.
"""

import logging
import os
import re
import threading
from typing import Optional, Set

UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9_-]')


def sanitize(raw_name: str) -> str:
    """Replace every character outside [A-Za-z0-9_-] with '_'."""
    return UNSAFE_CHARS.sub('_', raw_name) or '_'


class NameAllocator:
    """
    Hands out basenames that are unique within one output directory.

    A name is reserved by exclusively creating "<directory>/<name><suffix>".
    The create is atomic, so concurrent workers asking for the same stem
    always end up with different names.
    """

    def __init__(
        self,
        directory: str,
        suffix: str = '.jpg',
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize allocator.

        Args:
            directory: Directory that holds the reservation files
            suffix: Extension of the reservation file (e.g. '.jpg')
            logger: Optional logger instance
        """
        self.directory = directory
        self.suffix = suffix
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._allocated: Set[str] = set()

    @property
    def allocated(self) -> Set[str]:
        """Names handed out so far."""
        with self._lock:
            return set(self._allocated)

    def _reserve(self, candidate: str) -> bool:
        path = os.path.join(self.directory, candidate + self.suffix)
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except FileExistsError:
            return False
        os.close(fd)
        return True

    def allocate(self, raw_name: str) -> str:
        """
        Reserve a basename derived from raw_name.

        Tries the sanitized name first, then "<name>_0", "<name>_1", ...

        Args:
            raw_name: Source file stem

        Returns:
            The reserved basename
        """
        base = sanitize(raw_name)
        candidate = base
        index = 0
        while not self._reserve(candidate):
            candidate = f"{base}_{index}"
            index += 1

        if candidate != base:
            self.logger.debug(f"Name '{base}' taken, using '{candidate}'")

        with self._lock:
            self._allocated.add(candidate)
        return candidate
