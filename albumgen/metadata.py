"""
MetadataCollector - Per-file metadata extraction and timestamp derivation.
"""

import calendar
import logging
import re
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from .errors import ProcessingError
from .source_file import SourceFile

# Tags tried in order for the capture time.
TIMESTAMP_TAGS = ('DateTimeOriginal', 'ModifyDate', 'CreateDate')

# Orientations 5-8 transpose the image.
TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}

EXIF_DATE = re.compile(r'^(\d{4}):(\d{2}):(\d{2}) (\d{2}):(\d{2}):(\d{2})')


@dataclass(frozen=True)
class TimestampRecord:
    """
    A capture time in epoch seconds.

    Attributes:
        value: Epoch seconds, or a counter value for synthetic stamps
        synthetic: True when the file had no usable capture time
    """
    value: int
    synthetic: bool = False

    @property
    def date(self) -> Optional[str]:
        """Human readable date, only for real timestamps."""
        if self.synthetic:
            return None
        return datetime.fromtimestamp(self.value, tz=timezone.utc).strftime('%Y-%m-%d %H:%M')


class SyntheticClock:
    """
    Shared counter for files without a capture time.

    Each value is one more than the last one handed out in the batch.
    """

    def __init__(self, start: int = 0):
        self._lock = threading.Lock()
        self._last = start

    @property
    def last(self) -> int:
        with self._lock:
            return self._last

    def next(self) -> TimestampRecord:
        with self._lock:
            self._last += 1
            return TimestampRecord(self._last, synthetic=True)


@dataclass(frozen=True)
class MediaProperties:
    """
    Metadata of one source file.

    Attributes:
        width: Stored width in pixels
        height: Stored height in pixels
        file_type: File type tag reported by the metadata tool
        orientation: EXIF orientation code (1 = upright)
        original_width: Pre-crop width reported by the metadata, if any
        original_height: Pre-crop height reported by the metadata, if any
        timestamp: Capture time, None until an undated file is stamped
        timestamp_source: Tag the capture time was read from, None if synthetic
    """
    width: int
    height: int
    file_type: str
    orientation: int
    timestamp: Optional[TimestampRecord]
    original_width: Optional[int] = None
    original_height: Optional[int] = None
    timestamp_source: Optional[str] = None

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def megapixels(self) -> float:
        return self.width * self.height / 1e6

    @property
    def original_size(self) -> Optional[Tuple[int, int]]:
        if self.original_width and self.original_height:
            return self.original_width, self.original_height
        return None

    @property
    def is_transposed(self) -> bool:
        """True if auto-orientation swaps width and height."""
        return self.orientation in TRANSPOSED_ORIENTATIONS


def parse_exif_date(value) -> Optional[int]:
    """
    Parse an EXIF "YYYY:MM:DD HH:MM:SS" date as UTC epoch seconds.

    Sub-second and timezone suffixes are ignored. Returns None for missing,
    zeroed or malformed dates.
    """
    if not isinstance(value, str):
        return None
    match = EXIF_DATE.match(value.strip())
    if not match:
        return None
    try:
        parsed = datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return None
    return calendar.timegm(parsed.timetuple())


def _as_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def average_megapixels(properties: Sequence[MediaProperties]) -> float:
    """Average megapixels of a batch (0.0 for an empty batch)."""
    if not properties:
        return 0.0
    return sum(p.megapixels for p in properties) / len(properties)


class MetadataCollector:
    """
    Extracts MediaProperties for every source file.

    Phase 1 of the build. analyze() runs in parallel and leaves files without
    a capture time unstamped; stamp_undated() then numbers them in input
    order once every file has been analyzed.
    """

    def __init__(
        self,
        toolbox,
        clock: Optional[SyntheticClock] = None,
        progress=None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize collector.

        Args:
            toolbox: Toolbox used to read metadata
            clock: Synthetic timestamp counter shared by the batch
            progress: Optional ProgressTracker
            logger: Optional logger instance
        """
        self.toolbox = toolbox
        self.clock = clock or SyntheticClock()
        self.progress = progress
        self.logger = logger or logging.getLogger(__name__)

    def analyze(self, source: SourceFile) -> MediaProperties:
        """
        Read the metadata of one file.

        Raises:
            ProcessingError: If the file's dimensions cannot be determined
        """
        tags = self.toolbox.read_metadata(source.path)

        width = _as_int(tags.get('ImageWidth')) or _as_int(tags.get('SourceImageWidth'))
        height = _as_int(tags.get('ImageHeight')) or _as_int(tags.get('SourceImageHeight'))
        if not width or not height:
            raise ProcessingError("cannot determine dimensions", path=source.path)

        timestamp = None
        timestamp_source = None
        for tag in TIMESTAMP_TAGS:
            value = parse_exif_date(tags.get(tag))
            if value is not None:
                timestamp = TimestampRecord(value)
                timestamp_source = tag
                break
        if timestamp is None:
            self.logger.debug(f"No capture time for {source.filename}")

        properties = MediaProperties(
            width=width,
            height=height,
            file_type=str(tags.get('FileType') or source.extension.upper()),
            orientation=_as_int(tags.get('Orientation')) or 1,
            timestamp=timestamp,
            original_width=_as_int(tags.get('OriginalImageWidth')),
            original_height=_as_int(tags.get('OriginalImageHeight')),
            timestamp_source=timestamp_source,
        )

        if self.progress:
            self.progress.report(source.filename)
        return properties

    def stamp_undated(self, properties: Sequence[MediaProperties]) -> List[MediaProperties]:
        """
        Give every file without a capture time the next synthetic stamp.

        Must run after analyze() finished for the whole batch. Stamps follow
        the order of properties, so the result does not depend on which
        worker finished first.

        Args:
            properties: Analyzed files in input order

        Returns:
            The same files, all carrying a timestamp
        """
        stamped = []
        for props in properties:
            if props.timestamp is None:
                props = replace(props, timestamp=self.clock.next())
            stamped.append(props)
        return stamped
