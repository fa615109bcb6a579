"""
GalleryManifest - Ordered asset records plus album level fields (data.json).
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .asset_record import AssetRecord
from .config import GalleryConfig

Size = Tuple[int, int]

logger = logging.getLogger(__name__)


@dataclass
class GalleryManifest:
    """
    Complete gallery manifest.

    Attributes:
        records: Asset records in final album order
        blur_size: Canvas size of the blurred placeholders
        thumb_min: Minimum thumbnail size
        thumb_max: Maximum thumbnail size
        name: Optional album name
        download: Path of the album archive, if one was built
    """
    records: List[AssetRecord]
    blur_size: Size
    thumb_min: Size
    thumb_max: Size
    name: Optional[str] = None
    download: Optional[str] = None
    saved_to: Optional[str] = field(default=None, compare=False)

    @staticmethod
    def order(
        records: Sequence[AssetRecord],
        time_sort: bool = True,
        reverse: bool = False
    ) -> List[AssetRecord]:
        """
        Order records for the album.

        Sorting by timestamp is stable, so records with equal stamps keep
        their discovery order. Without time_sort the discovery order is kept.
        """
        ordered = list(records)
        if time_sort:
            ordered.sort(key=lambda r: r.timestamp.value)
        if reverse:
            ordered.reverse()
        return ordered

    @classmethod
    def build(
        cls,
        records: Sequence[AssetRecord],
        config: GalleryConfig,
        download: Optional[str] = None
    ) -> 'GalleryManifest':
        """Create a manifest from records in discovery order."""
        return cls(
            records=cls.order(records, config.time_sort, config.reverse),
            blur_size=config.blur_size,
            thumb_min=config.min_thumb,
            thumb_max=config.max_thumb,
            name=config.name,
            download=download,
        )

    @property
    def kept_originals(self) -> List[str]:
        """Relative paths of kept originals, in album order."""
        return [r.file[0] for r in self.records if r.file is not None]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {}
        if self.name:
            data['name'] = self.name
        if self.download:
            data['download'] = self.download
        data['blur'] = list(self.blur_size)
        data['thumb'] = {
            'min': list(self.thumb_min),
            'max': list(self.thumb_max),
        }
        data['data'] = [r.to_dict() for r in self.records]
        return data

    def save(self, filepath: str) -> None:
        """Write the manifest as JSON. A manifest is written exactly once."""
        if self.saved_to is not None:
            raise RuntimeError(f"Manifest already written to {self.saved_to}")

        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = self.to_dict()
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, separators=(',', ':'), ensure_ascii=False)

        self.saved_to = str(path)
        size_kb = path.stat().st_size / 1024
        logger.info(f"Manifest saved: {filepath} ({len(self.records)} assets, {size_kb:.1f} KB)")

    @staticmethod
    def load(filepath: str) -> dict:
        """Load a written manifest as plain data."""
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)
