"""Keypoint color sampling."""

from typing import Sequence

import numpy as np

from sfmfront.preprocessing.color_conversion import check_image
from sfmfront.types import Keypoint


class ColorSampler:
    """Sample normalized pixel colors at keypoint locations."""

    def __init__(self, scale: float = 1.0 / 256.0):
        self.scale = scale

    def sample(self, keypoints: Sequence[Keypoint], image: np.ndarray) -> np.ndarray:
        """
        Sample the original image at each keypoint.

        Args:
            keypoints: Keypoints in detector order
            image: Original (unconverted) image with 3 or 4 channels

        Returns:
            (N, C) float32 array with C equal to the image's channel count

        Raises:
            UnsupportedInputError: If the image is not 8-bit with 3 or 4 channels
        """
        channels = check_image(image)
        height, width = image.shape[:2]
        if len(keypoints) == 0:
            return np.empty((0, channels), dtype=np.float32)

        points = np.array([kp.pt for kp in keypoints], dtype=np.float64)
        cols = np.clip(np.rint(points[:, 0]).astype(int), 0, width - 1)
        rows = np.clip(np.rint(points[:, 1]).astype(int), 0, height - 1)

        return image[rows, cols].astype(np.float32) * np.float32(self.scale)
