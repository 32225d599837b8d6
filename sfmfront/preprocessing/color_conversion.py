"""Channel-order conversion ahead of keypoint detection."""

import cv2
import numpy as np

from sfmfront.exceptions import UnsupportedInputError

SUPPORTED_CHANNELS = (3, 4)


def check_image(image: np.ndarray) -> int:
    """Validate an 8-bit RGB/RGBA buffer and return its channel count."""
    if not isinstance(image, np.ndarray):
        raise UnsupportedInputError(f"Expected numpy array, got {type(image).__name__}")
    if image.ndim != 3 or image.shape[2] not in SUPPORTED_CHANNELS:
        raise UnsupportedInputError(
            f"Image must have 3 or 4 channels, got shape {image.shape}"
        )
    if image.dtype != np.uint8:
        raise UnsupportedInputError(f"Image must be uint8, got {image.dtype}")
    return image.shape[2]


def to_detection_buffer(image: np.ndarray) -> np.ndarray:
    """
    Convert an RGB or RGBA image to 3-channel BGR.

    Args:
        image: Input image in RGB/RGBA channel order

    Returns:
        BGR image; alpha is dropped for 4-channel input
    """
    channels = check_image(image)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_RGBA2BGR)
    return cv2.cvtColor(image, cv2.COLOR_RGB2BGR)

