"""Shared synthetic scenes for the test suite."""

import cv2
import numpy as np
import pytest


# Mild perspective change between the two synthetic views
TRUE_HOMOGRAPHY = np.array([
    [0.95, 0.06, 12.0],
    [-0.05, 1.02, 6.0],
    [2e-5, 1e-5, 1.0]
])


def make_texture(height: int = 240, width: int = 320, seed: int = 0) -> np.ndarray:
    """Blurred random RGB texture with plenty of blob and corner structure."""
    rng = np.random.default_rng(seed)
    noise = rng.integers(0, 256, (height // 4, width // 4, 3), dtype=np.uint8)
    texture = cv2.resize(noise, (width, height), interpolation=cv2.INTER_CUBIC)
    return cv2.GaussianBlur(texture, (5, 5), 0)


def warp_view(image: np.ndarray, H: np.ndarray) -> np.ndarray:
    height, width = image.shape[:2]
    return cv2.warpPerspective(image, H, (width, height))


@pytest.fixture
def textured_image():
    return make_texture()


@pytest.fixture
def flat_image():
    return np.full((120, 160, 3), 128, dtype=np.uint8)


@pytest.fixture
def planar_pair():
    """Two views of the same planar texture related by TRUE_HOMOGRAPHY."""
    view_a = make_texture(seed=1)
    view_b = warp_view(view_a, TRUE_HOMOGRAPHY)
    return view_a, view_b, TRUE_HOMOGRAPHY
