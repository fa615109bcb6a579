"""
GalleryBuilder - Runs the two-phase build of a gallery.
"""

import logging
import os
import shutil
from typing import List, Optional

from .archive import ArchiveBuilder
from .asset_pipeline import AssetPipeline
from .build_stats import BuildStats
from .config import GalleryConfig
from .errors import UsageError
from .manifest import GalleryManifest
from .metadata import MetadataCollector, SyntheticClock, average_megapixels
from .names import NameAllocator, sanitize
from .parallel import ParallelExecutor
from .progress import ProgressTracker
from .retention import RetentionPolicy
from .scanner import Scanner
from .source_file import SourceFile
from .toolbox import REQUIRED_TOOLS, Toolbox


class GalleryBuilder:
    """
    Builds a gallery from an input directory.

    Phase 1 analyzes metadata of every file, phase 2 generates the derived
    files. Both phases run on the same worker pool size and are separated by
    a full barrier: batch statistics are computed from all of phase 1 before
    any phase 2 item starts. Any failure aborts the build before the
    manifest is written.
    """

    def __init__(
        self,
        config: GalleryConfig,
        toolbox: Optional[Toolbox] = None,
        progress: Optional[ProgressTracker] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize builder.

        Args:
            config: Gallery configuration
            toolbox: External tools (default: looked up from the environment)
            progress: Optional progress tracker shared by the workers
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.toolbox = toolbox or Toolbox.from_env(logger=self.logger)
        self.progress = progress or ProgressTracker(logger=self.logger)
        self.stats = BuildStats()

    def required_tools(self, sources: List[SourceFile]) -> List[str]:
        """Tools the build cannot run without."""
        tools = list(REQUIRED_TOOLS)
        if self.config.auto_orient:
            tools.append('exiftran')
        if self.config.face_detection:
            tools.append('facedetect')
        if any(s.is_video for s in sources):
            tools.append('ffmpeg')
        return tools

    def prepare_output(self) -> None:
        """Recreate the derived directories empty and drop any old manifest."""
        config = self.config
        os.makedirs(config.output_dir, exist_ok=True)
        for name in config.SUBDIRS:
            path = config.subdir(name)
            if os.path.isdir(path):
                shutil.rmtree(path)
            os.makedirs(path)
        if os.path.exists(config.manifest_path):
            os.remove(config.manifest_path)

    def archive_name(self) -> str:
        stem = sanitize(self.config.name) if self.config.name else 'album'
        return f"files/{stem}.zip"

    def build(self, sources: Optional[List[SourceFile]] = None) -> GalleryManifest:
        """
        Build the gallery.

        Args:
            sources: Source files to use instead of scanning the input directory

        Returns:
            The written manifest

        Raises:
            UsageError: If the configuration is invalid; nothing is touched
        """
        config = self.config
        errors = config.validate()
        if errors:
            raise UsageError("; ".join(errors))
        self.stats = BuildStats()

        if sources is None:
            sources = Scanner(logger=self.logger).scan(config.input_dir)
        if not sources:
            self.logger.warning(f"No photos or videos found in {config.input_dir}")

        self.toolbox.check(self.required_tools(sources))
        self.prepare_output()

        executor = ParallelExecutor(config.workers, logger=self.logger)

        # Phase 1: metadata
        collector = MetadataCollector(
            self.toolbox, SyntheticClock(), progress=self.progress, logger=self.logger
        )
        self.progress.start('Analyzing', len(sources))
        properties = executor.map(collector.analyze, sources)
        properties = collector.stamp_undated(properties)
        self.progress.finish()

        avg_megapixels = average_megapixels(properties)
        self.stats.avg_megapixels = avg_megapixels
        self.logger.info(f"Average size: {avg_megapixels:.1f} megapixels")

        # Phase 2: derived files
        pipeline = AssetPipeline(
            config,
            self.toolbox,
            NameAllocator(config.subdir('thumbs'), '.jpg', logger=self.logger),
            RetentionPolicy(config.retention_mode, config.pano_ratio, logger=self.logger),
            avg_megapixels,
            progress=self.progress,
            logger=self.logger,
        )
        self.progress.start('Processing', len(sources))
        records = executor.map(lambda item: pipeline.process(*item), list(zip(sources, properties)))
        self.progress.finish()

        manifest = GalleryManifest.build(records, config)

        kept = manifest.kept_originals
        if config.build_download and kept:
            download = self.archive_name()
            ArchiveBuilder(logger=self.logger).build(
                [os.path.join(config.output_dir, rel) for rel in kept],
                os.path.join(config.output_dir, download)
            )
            manifest.download = download
            self.stats.archived = len(kept)

        manifest.save(config.manifest_path)

        self.stats.videos = sum(1 for s in sources if s.is_video)
        self.stats.images = len(sources) - self.stats.videos
        self.stats.kept_originals = len(kept)
        self.stats.finish()

        self.logger.info(
            f"Build complete: {self.stats.images} images, {self.stats.videos} videos, "
            f"{self.stats.kept_originals} originals kept ({self.stats.elapsed_seconds:.1f}s)"
        )
        return manifest
