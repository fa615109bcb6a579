"""Tests for RetentionPolicy class."""

import pytest

from albumgen.retention import RetentionPolicy, aspect_ratio


class TestAspectRatio:
    """Tests for aspect_ratio."""

    def test_orientation_independent(self):
        """Test wide and tall images have the same ratio."""
        assert aspect_ratio((4000, 1000)) == aspect_ratio((1000, 4000)) == 4.0


class TestRetentionPolicy:
    """Tests for RetentionPolicy class."""

    def test_invalid_mode(self):
        """Test unknown modes are rejected."""
        with pytest.raises(ValueError):
            RetentionPolicy(mode='sometimes')

    def test_always(self):
        """Test always-keep overrides the heuristic."""
        policy = RetentionPolicy(mode='always')

        assert policy.should_keep_original((100, 100), None, 50.0) is True

    def test_never(self):
        """Test always-discard overrides the heuristic."""
        policy = RetentionPolicy(mode='never')

        assert policy.should_keep_original((20000, 4000), None, 1.0) is False

    def test_panorama_kept(self):
        """Test a large panorama is kept."""
        policy = RetentionPolicy(pano_ratio=1.777)

        assert policy.should_keep_original((8000, 2000), None, 12.0) is True

    def test_ordinary_photo_discarded(self):
        """Test a regular 4:3 photo is discarded."""
        policy = RetentionPolicy(pano_ratio=1.777)

        assert policy.should_keep_original((4000, 3000), None, 6.0) is False

    def test_below_average_discarded(self):
        """Test a small panorama is discarded."""
        policy = RetentionPolicy(pano_ratio=1.777)

        assert policy.should_keep_original((2000, 500), None, 12.0) is False

    def test_equal_to_average_discarded(self):
        """Test the batch average must be exceeded, not matched."""
        policy = RetentionPolicy(pano_ratio=1.777)

        assert policy.should_keep_original((4000, 1000), None, 4.0) is False

    def test_crop_of_larger_image_discarded(self):
        """Test files cropped from a larger original are discarded."""
        policy = RetentionPolicy(pano_ratio=1.777)

        assert policy.should_keep_original((8000, 2000), (8000, 6000), 1.0) is False

    def test_uncropped_original_metadata(self):
        """Test matching original dimensions do not block retention."""
        policy = RetentionPolicy(pano_ratio=1.777)

        assert policy.should_keep_original((8000, 2000), (8000, 2000), 1.0) is True

    def test_monotonic_in_aspect_ratio(self):
        """Test retention flips once past the threshold and never back."""
        policy = RetentionPolicy(pano_ratio=2.0)
        height = 1000
        decisions = [
            policy.should_keep_original((width, height), None, 0.5)
            for width in range(1000, 6000, 50)
        ]

        first_kept = decisions.index(True)
        assert not any(decisions[:first_kept])
        assert all(decisions[first_kept:])
        assert (1000 + 50 * first_kept) / height >= 2.0
