"""
RetentionPolicy - Decides whether a full resolution original is kept.
"""

import logging
from typing import Optional, Tuple

Size = Tuple[int, int]

MODES = ('auto', 'always', 'never')


def aspect_ratio(size: Size) -> float:
    """Long side over short side."""
    width, height = size
    return max(width, height) / min(width, height)


class RetentionPolicy:
    """
    Keeps full resolution panoramas and discards ordinary originals.

    In 'auto' mode an original is kept only when it is not a crop of a larger
    image, is larger than the batch average and is at least pano_ratio wide
    (or tall). 'always' and 'never' override the heuristic.
    """

    def __init__(
        self,
        mode: str = 'auto',
        pano_ratio: float = 1.777,
        logger: Optional[logging.Logger] = None
    ):
        if mode not in MODES:
            raise ValueError(f"unknown retention mode: {mode}")
        self.mode = mode
        self.pano_ratio = pano_ratio
        self.logger = logger or logging.getLogger(__name__)

    def should_keep_original(
        self,
        asset_size: Size,
        original_size: Optional[Size],
        batch_avg_megapixels: float
    ) -> bool:
        """
        Decide on one original.

        Args:
            asset_size: Dimensions of the stored file after auto-orientation
            original_size: Uncropped dimensions from the metadata, if any
            batch_avg_megapixels: Average megapixels over the whole batch

        Returns:
            True if the original should be kept
        """
        if self.mode == 'always':
            return True
        if self.mode == 'never':
            return False

        megapixels = asset_size[0] * asset_size[1] / 1e6
        # Missing metadata counts as uncropped.
        original_megapixels = 0.0
        if original_size:
            original_megapixels = original_size[0] * original_size[1] / 1e6

        keep = (
            megapixels >= original_megapixels
            and megapixels > batch_avg_megapixels
            and aspect_ratio(asset_size) >= self.pano_ratio
        )
        if keep:
            self.logger.debug(
                f"Keeping panorama original {asset_size[0]}x{asset_size[1]} "
                f"({megapixels:.1f}MP, ratio {aspect_ratio(asset_size):.2f})"
            )
        return keep
