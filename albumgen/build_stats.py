"""
BuildStats - Statistics for a gallery build.
"""

import time
from dataclasses import dataclass, field


@dataclass
class BuildStats:
    """
    Statistics for a gallery build.

    Attributes:
        images: Images processed
        videos: Videos processed
        kept_originals: Originals kept for individual download
        archived: Files placed in the album archive
        avg_megapixels: Average megapixels of the batch
        start_time: Start timestamp
    """
    images: int = 0
    videos: int = 0
    kept_originals: int = 0
    archived: int = 0
    avg_megapixels: float = 0.0
    start_time: float = field(default_factory=time.time)
    end_time: float = 0.0

    @property
    def total(self) -> int:
        return self.images + self.videos

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds (frozen once the build finished)."""
        end = self.end_time or time.time()
        return end - self.start_time

    @property
    def rate_per_minute(self) -> float:
        """Processing rate in items per minute."""
        if self.elapsed_seconds > 0:
            return self.total / self.elapsed_seconds * 60
        return 0.0

    def finish(self) -> None:
        self.end_time = time.time()
