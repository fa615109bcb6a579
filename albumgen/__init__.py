"""
Static Gallery Generator

Two-phase operation:
    1. Analyze phase: Read metadata of every photo and video in parallel
    2. Process phase: Generate previews, thumbnails, blur placeholders and
       video streams in parallel, then write the manifest (data.json)

Pixel work is delegated to external tools (ImageMagick, exiftool,
exiftran, ffmpeg, facedetect).
"""

__version__ = "1.0.0"

from .errors import GalleryError, UsageError, MissingToolError, ProcessingError
from .config import GalleryConfig
from .source_file import SourceFile
from .scanner import Scanner
from .parallel import ParallelExecutor
from .progress import ProgressTracker
from .names import NameAllocator
from .metadata import MediaProperties, MetadataCollector, SyntheticClock, TimestampRecord
from .geometry import ThumbnailSpec, compute_thumbnail
from .retention import RetentionPolicy
from .toolbox import Toolbox
from .asset_record import AssetRecord
from .asset_pipeline import AssetPipeline
from .archive import ArchiveBuilder
from .manifest import GalleryManifest
from .build_stats import BuildStats
from .builder import GalleryBuilder

__all__ = [
    "GalleryError",
    "UsageError",
    "MissingToolError",
    "ProcessingError",
    "GalleryConfig",
    "SourceFile",
    "Scanner",
    "ParallelExecutor",
    "ProgressTracker",
    "NameAllocator",
    "MediaProperties",
    "MetadataCollector",
    "SyntheticClock",
    "TimestampRecord",
    "ThumbnailSpec",
    "compute_thumbnail",
    "RetentionPolicy",
    "Toolbox",
    "AssetRecord",
    "AssetPipeline",
    "ArchiveBuilder",
    "GalleryManifest",
    "BuildStats",
    "GalleryBuilder",
]
