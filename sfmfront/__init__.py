"""
sfmfront - feature correspondence front end for structure from motion

Detects keypoints, matches descriptors between image pairs and keeps the
matches consistent with a RANSAC homography.
"""

from .core import FeaturePipeline
from .detection import ColorSampler, KeypointDetector, create_detector
from .exceptions import (
    DescriptorMismatchError,
    HomographyEstimationError,
    InsufficientCorrespondencesError,
    InvalidFeatureSetError,
    SfmFrontError,
    UnsupportedInputError,
)
from .geometry import RobustGeometricFilter
from .matching import DescriptorMatcher
from .types import Correspondence, ImageFeatureSet, Keypoint, MatchResult

__version__ = "0.1.0"
__all__ = [
    "FeaturePipeline",
    "KeypointDetector",
    "ColorSampler",
    "DescriptorMatcher",
    "RobustGeometricFilter",
    "create_detector",
    "Keypoint",
    "ImageFeatureSet",
    "Correspondence",
    "MatchResult",
    "SfmFrontError",
    "UnsupportedInputError",
    "InsufficientCorrespondencesError",
    "HomographyEstimationError",
    "DescriptorMismatchError",
    "InvalidFeatureSetError",
]
