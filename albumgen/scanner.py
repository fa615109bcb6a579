"""
Scanner - Lists the photos and videos of an input directory.
"""

import logging
import os
from typing import List, Optional

from .source_file import SourceFile


class Scanner:
    """
    Lists supported media files of a directory in discovery order.

    Only the top level is scanned; hidden files and unsupported extensions
    are skipped. Discovery order is the sorted file name order, which keeps
    untimed galleries stable between runs.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def scan(self, input_dir: str, limit: Optional[int] = None) -> List[SourceFile]:
        """
        Scan a directory.

        Args:
            input_dir: Directory to scan
            limit: Optional limit on number of files (for testing)

        Returns:
            Source files in discovery order
        """
        sources = []
        skipped = 0

        for filename in sorted(os.listdir(input_dir)):
            if filename.startswith('.'):
                continue
            path = os.path.join(input_dir, filename)
            if not os.path.isfile(path):
                continue

            source = SourceFile.from_path(path)
            if source is None:
                self.logger.debug(f"Skipping unsupported file: {filename}")
                skipped += 1
                continue

            sources.append(source)
            if limit and len(sources) >= limit:
                self.logger.info(f"Stopping at limit ({limit})")
                break

        videos = sum(1 for s in sources if s.is_video)
        self.logger.info(
            f"Scan complete: {len(sources) - videos} images, {videos} videos, "
            f"{skipped} skipped"
        )
        return sources
