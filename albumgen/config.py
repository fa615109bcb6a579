"""
GalleryConfig - Options for a single gallery build.
"""

import os
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

Size = Tuple[int, int]

SIZE_PATTERN = re.compile(r'^(\d+)x(\d+)$')


def parse_size(value: str) -> Size:
    """
    Parse a "WxH" string.

    Raises:
        ValueError: If the string is not two positive integers joined by 'x'
    """
    match = SIZE_PATTERN.match(value.strip().lower())
    if not match:
        raise ValueError(f"invalid size '{value}', expected WxH")
    width, height = int(match.group(1)), int(match.group(2))
    if width <= 0 or height <= 0:
        raise ValueError(f"invalid size '{value}', dimensions must be positive")
    return width, height


def format_size(size: Size) -> str:
    """Format a size tuple as "WxH"."""
    return f"{size[0]}x{size[1]}"


@dataclass
class GalleryConfig:
    """
    Options for a single gallery build.

    Attributes:
        input_dir: Directory holding the source photos and videos
        output_dir: Gallery root; derived directories are recreated inside it
        name: Optional album name shown by the viewer
        workers: Number of parallel workers per phase
        max_full: Preview bounds (W, H)
        max_thumb: Largest thumbnail (W, H)
        min_thumb: Smallest thumbnail (W, H)
        quality: JPEG quality for previews and thumbnails (0-100)
        time_sort: Order assets by timestamp
        reverse: Reverse the final order
        slim: Never keep originals and skip the download archive
        no_download: Skip the download archive
        keep_original: Always keep originals
        panorama: Automatically keep high resolution panoramas
        pano_ratio: Aspect ratio at which an image counts as a panorama
        auto_orient: Losslessly rotate according to EXIF orientation
        face_detection: Bias thumbnail crops towards detected faces
        srgb: Convert previews and thumbnails to sRGB
    """
    input_dir: str
    output_dir: str
    name: Optional[str] = None
    workers: int = 1
    max_full: Size = (1600, 1200)
    max_thumb: Size = (267, 200)
    min_thumb: Size = (150, 112)
    quality: int = 90
    time_sort: bool = True
    reverse: bool = False
    slim: bool = False
    no_download: bool = False
    keep_original: bool = False
    panorama: bool = True
    pano_ratio: float = 1.777
    auto_orient: bool = True
    face_detection: bool = False
    srgb: bool = True

    BLUR_FACTOR = 0.1
    SUBDIRS = ('thumbs', 'blurs', 'imgs', 'files')
    MANIFEST_NAME = 'data.json'

    @property
    def retention_mode(self) -> str:
        """'always', 'never' or 'auto' retention of full size originals."""
        if self.slim:
            return 'never'
        if self.keep_original:
            return 'always'
        if not self.panorama:
            return 'never'
        return 'auto'

    @property
    def build_download(self) -> bool:
        """Whether an album archive should be produced."""
        return not (self.slim or self.no_download)

    @property
    def blur_size(self) -> Size:
        """Canvas size of the blurred placeholders."""
        return self.min_thumb

    @property
    def blur_radius(self) -> int:
        """Gaussian blur radius derived from the minimum thumbnail size."""
        average = (self.min_thumb[0] + self.min_thumb[1]) / 2
        return max(1, int(round(average * self.BLUR_FACTOR)))

    @property
    def manifest_path(self) -> str:
        return os.path.join(self.output_dir, self.MANIFEST_NAME)

    def subdir(self, name: str) -> str:
        """Absolute path of one of the derived directories."""
        return os.path.join(self.output_dir, name)

    def _inside_derived_dir(self, path: str) -> bool:
        for name in self.SUBDIRS:
            derived = os.path.realpath(self.subdir(name))
            if os.path.commonpath([path, derived]) == derived:
                return True
        return False

    def validate(self) -> List[str]:
        """
        Validate the configuration.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.input_dir:
            errors.append("Input directory is required")
        elif not os.path.isdir(self.input_dir):
            errors.append(f"Input directory does not exist: {self.input_dir}")
        if not self.output_dir:
            errors.append("Output directory is required")
        elif self.input_dir:
            source = os.path.realpath(self.input_dir)
            if source == os.path.realpath(self.output_dir):
                errors.append("Output directory must differ from the input directory")
            elif self._inside_derived_dir(source):
                errors.append(
                    f"Input directory {self.input_dir} lies inside a directory "
                    f"that is recreated on every run"
                )

        if self.workers < 1:
            errors.append(f"Worker count must be at least 1 (got {self.workers})")
        if not 0 <= self.quality <= 100:
            errors.append(f"Quality must be between 0 and 100 (got {self.quality})")
        if self.pano_ratio < 1.0:
            errors.append(f"Panorama ratio must be at least 1.0 (got {self.pano_ratio})")
        if self.slim and self.keep_original:
            errors.append("Slim output and keep-original are mutually exclusive")

        min_w, min_h = self.min_thumb
        max_w, max_h = self.max_thumb
        if min_w > max_w or min_h > max_h:
            errors.append(
                f"Minimum thumbnail size {format_size(self.min_thumb)} exceeds "
                f"maximum {format_size(self.max_thumb)}"
            )

        return errors

    @classmethod
    def from_args(cls, args) -> 'GalleryConfig':
        """Create from parsed command line arguments."""
        return cls(
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            name=args.name,
            workers=args.jobs,
            max_full=args.max_full,
            max_thumb=args.max_thumb,
            min_thumb=args.min_thumb,
            quality=args.quality,
            time_sort=not args.no_time_sort,
            reverse=args.reverse,
            slim=args.slim,
            no_download=args.no_download,
            keep_original=args.keep_original,
            panorama=not args.no_panorama,
            pano_ratio=args.pano_ratio,
            auto_orient=not args.no_auto_orient,
            face_detection=args.face_detection,
            srgb=not args.no_srgb,
        )
