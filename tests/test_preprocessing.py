"""Tests for preprocessing module."""

import pytest
import numpy as np
from sfmfront.exceptions import UnsupportedInputError
from sfmfront.preprocessing.color_conversion import check_image, to_detection_buffer


class TestColorConversion:
    """Test canonical BGR conversion."""

    def test_rgb_to_bgr(self):
        """RGB input comes back with reversed channel order."""
        image = np.random.randint(0, 256, (20, 30, 3), dtype=np.uint8)
        bgr = to_detection_buffer(image)
        assert bgr.shape == (20, 30, 3)
        assert np.array_equal(bgr, image[:, :, ::-1])

    def test_rgba_drops_alpha(self):
        """RGBA input loses alpha and is reordered to BGR."""
        image = np.random.randint(0, 256, (20, 30, 4), dtype=np.uint8)
        bgr = to_detection_buffer(image)
        assert bgr.shape == (20, 30, 3)
        assert np.array_equal(bgr, image[:, :, 2::-1])

    def test_input_not_modified(self):
        image = np.random.randint(0, 256, (10, 10, 3), dtype=np.uint8)
        original = image.copy()
        to_detection_buffer(image)
        assert np.array_equal(image, original)

    @pytest.mark.parametrize("shape", [(10, 10), (10, 10, 1), (10, 10, 2), (10, 10, 5)])
    def test_unsupported_channel_counts(self, shape):
        image = np.zeros(shape, dtype=np.uint8)
        with pytest.raises(UnsupportedInputError):
            to_detection_buffer(image)

    def test_unsupported_dtype(self):
        image = np.zeros((10, 10, 3), dtype=np.float32)
        with pytest.raises(UnsupportedInputError):
            check_image(image)

    def test_non_array_input(self):
        with pytest.raises(UnsupportedInputError):
            check_image([[1, 2, 3]])

    def test_check_image_returns_channels(self):
        assert check_image(np.zeros((5, 5, 3), dtype=np.uint8)) == 3
        assert check_image(np.zeros((5, 5, 4), dtype=np.uint8)) == 4
