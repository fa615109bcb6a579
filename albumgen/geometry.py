"""
Thumbnail geometry: scale factor, crop window and focal point handling.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

Size = Tuple[int, int]
Center = Tuple[float, float]

DEFAULT_CENTER: Center = (0.5, 0.5)

# Centers closer than this to the default (in per-mille) are not recorded.
CENTER_TOLERANCE = 1


@dataclass(frozen=True)
class ThumbnailSpec:
    """
    How a thumbnail is cut out of its source image.

    Attributes:
        source: Source (preview) dimensions
        scaled: Dimensions after uniform scaling, before cropping
        final: Dimensions of the cropped thumbnail
        offset: Top-left corner of the crop window in the scaled image
    """
    source: Size
    scaled: Size
    final: Size
    offset: Tuple[int, int]

    @property
    def has_distinct_crop(self) -> bool:
        """True when cropping actually removes pixels."""
        return self.scaled != self.final


def _crop_offset(center: float, scaled: int, final: int) -> int:
    # Window centered on the focal point, kept inside the scaled image.
    offset = int(round(center * scaled - final / 2))
    return max(0, min(scaled - final, offset))


def compute_thumbnail(
    source_w: int,
    source_h: int,
    min_w: int,
    min_h: int,
    max_w: int,
    max_h: int,
    center: Center = DEFAULT_CENTER
) -> ThumbnailSpec:
    """
    Compute scale and crop window of a thumbnail.

    The image is scaled uniformly so that it covers the minimum box, then
    cropped to at most the maximum box around the focal point.

    Args:
        source_w: Source width
        source_h: Source height
        min_w: Minimum thumbnail width
        min_h: Minimum thumbnail height
        max_w: Maximum thumbnail width
        max_h: Maximum thumbnail height
        center: Normalized focal point (x, y)

    Returns:
        ThumbnailSpec describing the thumbnail
    """
    if source_w <= 0 or source_h <= 0:
        raise ValueError(f"invalid source size {source_w}x{source_h}")

    if source_w / source_h < min_w / min_h:
        scale = min_w / source_w
    else:
        scale = min_h / source_h

    scaled_w = max(min_w, int(round(source_w * scale)))
    scaled_h = max(min_h, int(round(source_h * scale)))

    final_w = min(scaled_w, max_w)
    final_h = min(scaled_h, max_h)

    offset = (
        _crop_offset(center[0], scaled_w, final_w),
        _crop_offset(center[1], scaled_h, final_h),
    )

    return ThumbnailSpec(
        source=(source_w, source_h),
        scaled=(scaled_w, scaled_h),
        final=(final_w, final_h),
        offset=offset,
    )


def focal_center(focal: Optional[Tuple[float, float]], preview: Size) -> Center:
    """
    Normalize a detected focal pixel by the preview dimensions.

    Args:
        focal: Focal pixel (x, y) in the preview, or None if nothing was detected
        preview: Dimensions of the preview the detection ran on

    Returns:
        Normalized center, the default center when focal is None
    """
    if focal is None:
        return DEFAULT_CENTER
    x = min(1.0, max(0.0, focal[0] / preview[0]))
    y = min(1.0, max(0.0, focal[1] / preview[1]))
    return x, y


def quantize_center(center: Center) -> Optional[Tuple[int, int]]:
    """
    Quantize a center to integer per-mille.

    Returns:
        (x, y) in 0-1000, or None when within tolerance of the default center
    """
    x = int(round(center[0] * 1000))
    y = int(round(center[1] * 1000))
    if abs(x - 500) <= CENTER_TOLERANCE and abs(y - 500) <= CENTER_TOLERANCE:
        return None
    return x, y
