"""
AssetRecord - Record of one gallery entry and its derived files.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .geometry import DEFAULT_CENTER, ThumbnailSpec, quantize_center
from .metadata import TimestampRecord
from .source_file import SourceFile

Size = Tuple[int, int]


@dataclass(frozen=True)
class AssetRecord:
    """
    Derived files of one source item.

    Paths are relative to the gallery root and use forward slashes.

    Attributes:
        source: The source file
        basename: Unique stem shared by all derived files
        image: Preview path and its dimensions
        thumb_path: Thumbnail path
        thumb: Thumbnail geometry
        blur: Blurred placeholder path
        timestamp: Capture time
        file: Kept original path and dimensions, None when discarded
        center: Normalized crop center
        videos: Streaming derivatives as (path, format)
    """
    source: SourceFile
    basename: str
    image: Tuple[str, Size]
    thumb_path: str
    thumb: ThumbnailSpec
    blur: str
    timestamp: TimestampRecord
    file: Optional[Tuple[str, Size]] = None
    center: Tuple[float, float] = DEFAULT_CENTER
    videos: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def date(self) -> Optional[str]:
        return self.timestamp.date

    @property
    def kept_original(self) -> bool:
        return self.file is not None

    def to_dict(self) -> dict:
        """
        Convert to a manifest entry.

        Only fields the asset actually has are emitted: no 'file' when the
        original was discarded, no 'center' when it is the default, and no
        scaled size/offset when the thumbnail is not cropped.
        """
        image_path, image_size = self.image
        thumb = [self.thumb_path, list(self.thumb.final)]
        if self.thumb.has_distinct_crop:
            thumb.append(list(self.thumb.scaled))
            thumb.append(list(self.thumb.offset))

        entry = {
            'img': [image_path, list(image_size)],
            'thumb': thumb,
        }
        if self.file is not None:
            file_path, file_size = self.file
            entry['file'] = [file_path, list(file_size)]
        entry['blur'] = self.blur

        center = quantize_center(self.center)
        if center is not None:
            entry['center'] = list(center)
        if self.videos:
            entry['video'] = [[path, fmt] for path, fmt in self.videos]
        if self.date is not None:
            entry['date'] = self.date
        entry['stamp'] = self.timestamp.value
        return entry
