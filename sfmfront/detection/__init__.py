"""Keypoint detection and color sampling."""

from .color_sampler import ColorSampler
from .keypoint_detector import (
    AkazeDetector,
    KeypointDetector,
    OrbDetector,
    SiftDetector,
    create_detector,
)

__all__ = [
    'KeypointDetector',
    'SiftDetector',
    'OrbDetector',
    'AkazeDetector',
    'create_detector',
    'ColorSampler',
]
