"""
AssetPipeline - Produces the derived files of one source item.
"""

import logging
import os
import shutil
from typing import Optional, Tuple

from PIL import Image

from .asset_record import AssetRecord
from .errors import ProcessingError
from .config import GalleryConfig
from .geometry import DEFAULT_CENTER, compute_thumbnail, focal_center
from .metadata import MediaProperties
from .names import NameAllocator
from .retention import RetentionPolicy
from .source_file import SourceFile
from .toolbox import VIDEO_FORMATS, Toolbox

Size = Tuple[int, int]


def image_size(path: str) -> Size:
    """Read the pixel dimensions of an image file."""
    with Image.open(path) as img:
        return img.size


class AssetPipeline:
    """
    Generates preview, thumbnail, blur placeholder and video derivatives.

    Phase 2 of the build. process() runs in parallel; the only shared state
    is the name reservation and the progress tracker. Batch statistics from
    phase 1 are passed in by value.
    """

    POSTER_OFFSET = 1.0

    def __init__(
        self,
        config: GalleryConfig,
        toolbox: Toolbox,
        names: NameAllocator,
        retention: RetentionPolicy,
        avg_megapixels: float,
        progress=None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize pipeline.

        Args:
            config: Gallery configuration
            toolbox: External tools
            names: Basename allocator for the output directory
            retention: Policy for keeping full size originals
            avg_megapixels: Average megapixels of the batch
            progress: Optional ProgressTracker
            logger: Optional logger instance
        """
        self.config = config
        self.toolbox = toolbox
        self.names = names
        self.retention = retention
        self.avg_megapixels = avg_megapixels
        self.progress = progress
        self.logger = logger or logging.getLogger(__name__)

    def _path(self, rel: str) -> str:
        return os.path.join(self.config.output_dir, rel)

    def _rotated(self, source: SourceFile, props: MediaProperties) -> bool:
        return not source.is_video and self.config.auto_orient and props.orientation != 1

    def _stage(self, source: SourceFile, props: MediaProperties, base: str) -> Tuple[str, Size]:
        """Copy the original (or a video's poster frame) into files/."""
        if source.is_video:
            rel = f"files/{base}.jpg"
            self.toolbox.extract_frame(source.path, self._path(rel), self.POSTER_OFFSET)
            return rel, image_size(self._path(rel))

        rel = f"files/{base}.{source.extension}"
        staged = self._path(rel)
        shutil.copyfile(source.path, staged)

        # Only JPEGs are rotated losslessly; other formats are turned upright
        # in the preview and keep their stored orientation.
        size = props.size
        if self._rotated(source, props) and source.extension == 'jpg':
            self.logger.debug(f"Auto-orienting {source.filename} (orientation {props.orientation})")
            self.toolbox.auto_rotate(staged)
            if props.is_transposed:
                size = (size[1], size[0])

        self.toolbox.optimize(staged)
        return rel, size

    def process(self, source: SourceFile, props: MediaProperties) -> AssetRecord:
        """
        Generate all derived files of one source item.

        Args:
            source: Source photo or video
            props: Its metadata from phase 1

        Returns:
            The finished AssetRecord

        Raises:
            ProcessingError: If any step fails, including file system and
                image decoding errors
        """
        try:
            return self._process(source, props)
        except OSError as e:
            raise ProcessingError(str(e), path=source.path) from e

    def _process(self, source: SourceFile, props: MediaProperties) -> AssetRecord:
        config = self.config
        base = self.names.allocate(source.stem)
        self.logger.debug(f"Processing {source.filename} as '{base}'")

        staged_rel, staged_size = self._stage(source, props, base)
        staged = self._path(staged_rel)

        preview_ext = 'png' if source.extension == 'png' else 'jpg'
        image_rel = f"imgs/{base}.{preview_ext}"
        self.toolbox.resize(
            staged, self._path(image_rel), config.max_full, config.quality, config.srgb,
            auto_orient=self._rotated(source, props) and source.extension != 'jpg'
        )
        preview_size = image_size(self._path(image_rel))

        center = DEFAULT_CENTER
        if config.face_detection:
            focal = self.toolbox.detect_face(self._path(image_rel))
            center = focal_center(focal, preview_size)
            if focal is None:
                self.logger.debug(f"No face found in {source.filename}")

        spec = compute_thumbnail(
            preview_size[0], preview_size[1],
            config.min_thumb[0], config.min_thumb[1],
            config.max_thumb[0], config.max_thumb[1],
            center
        )
        thumb_rel = f"thumbs/{base}.jpg"
        self.toolbox.thumbnail(
            self._path(image_rel), self._path(thumb_rel),
            spec.scaled, spec.final, spec.offset,
            config.quality, config.srgb
        )

        blur_rel = f"blurs/{base}.jpg"
        self.toolbox.blur(self._path(image_rel), self._path(blur_rel), config.blur_size, config.blur_radius)

        videos = []
        if source.is_video:
            for fmt in VIDEO_FORMATS:
                video_rel = f"imgs/{base}.{fmt}"
                self.toolbox.transcode(source.path, self._path(video_rel), fmt, config.max_full)
                videos.append((video_rel, fmt))

        file_entry = None
        if not source.is_video and self.retention.should_keep_original(
                staged_size, props.original_size, self.avg_megapixels):
            file_entry = (staged_rel, staged_size)
        else:
            os.remove(staged)

        record = AssetRecord(
            source=source,
            basename=base,
            image=(image_rel, preview_size),
            thumb_path=thumb_rel,
            thumb=spec,
            blur=blur_rel,
            timestamp=props.timestamp,
            file=file_entry,
            center=center,
            videos=videos,
        )

        if self.progress:
            self.progress.report(source.filename)
        return record
