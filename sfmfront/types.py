"""Data entities passed between extraction, matching and filtering."""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from sfmfront.exceptions import InvalidFeatureSetError


def _frozen_array(values, dtype=None) -> np.ndarray:
    array = np.array(values, dtype=dtype, copy=True)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class Keypoint:
    """Detected image location with OpenCV scale/orientation attributes."""
    x: float
    y: float
    size: float = 0.0
    angle: float = -1.0
    response: float = 0.0
    octave: int = 0

    @property
    def pt(self) -> Tuple[float, float]:
        return self.x, self.y

    @classmethod
    def from_cv(cls, kp: cv2.KeyPoint) -> "Keypoint":
        return cls(
            x=float(kp.pt[0]),
            y=float(kp.pt[1]),
            size=float(kp.size),
            angle=float(kp.angle),
            response=float(kp.response),
            octave=int(kp.octave),
        )


@dataclass(frozen=True)
class ImageFeatureSet:
    """
    Keypoints, descriptors and colors of one image, aligned by index.

    Attributes:
        keypoints: Keypoints in detector order
        descriptors: (N, D) array, uint8 for binary and float32 for float descriptors
        colors: (N, C) float32 array of normalized colors, C in {3, 4}
        image_index: Position of the source image in its input batch
    """
    keypoints: Tuple[Keypoint, ...]
    descriptors: np.ndarray
    colors: np.ndarray
    image_index: Optional[int] = None

    def __post_init__(self):
        keypoints = tuple(self.keypoints)
        descriptors = _frozen_array(self.descriptors)
        colors = _frozen_array(self.colors, dtype=np.float32)

        if descriptors.ndim != 2 and len(descriptors) > 0:
            raise InvalidFeatureSetError(
                f"Descriptors must be 2-D, got shape {descriptors.shape}"
            )
        if len(descriptors) != len(keypoints):
            raise InvalidFeatureSetError(
                f"Descriptor count {len(descriptors)} != keypoint count {len(keypoints)}"
            )
        if len(colors) != len(keypoints):
            raise InvalidFeatureSetError(
                f"Color count {len(colors)} != keypoint count {len(keypoints)}"
            )

        object.__setattr__(self, 'keypoints', keypoints)
        object.__setattr__(self, 'descriptors', descriptors)
        object.__setattr__(self, 'colors', colors)

    @property
    def num_keypoints(self) -> int:
        return len(self.keypoints)

    @property
    def descriptor_kind(self) -> str:
        """'binary' for uint8 descriptors, 'float' otherwise."""
        return 'binary' if self.descriptors.dtype == np.uint8 else 'float'

    def points(self) -> np.ndarray:
        """Keypoint locations as an (N, 2) float32 array."""
        if not self.keypoints:
            return np.empty((0, 2), dtype=np.float32)
        return np.float32([kp.pt for kp in self.keypoints])


@dataclass(frozen=True)
class Correspondence:
    """Nearest-neighbour pairing of a query keypoint with a train keypoint."""
    query_idx: int
    train_idx: int
    distance: float

    @classmethod
    def from_cv(cls, match: cv2.DMatch) -> "Correspondence":
        return cls(int(match.queryIdx), int(match.trainIdx), float(match.distance))


@dataclass(frozen=True)
class MatchResult:
    """Geometrically verified matches for one image pair."""
    correspondences: Tuple[Correspondence, ...]
    homography: np.ndarray
    inlier_mask: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=bool))

    def __post_init__(self):
        object.__setattr__(self, 'correspondences', tuple(self.correspondences))
        object.__setattr__(self, 'homography', _frozen_array(self.homography, dtype=np.float64))
        object.__setattr__(self, 'inlier_mask', _frozen_array(self.inlier_mask, dtype=bool))

    @property
    def num_candidates(self) -> int:
        return len(self.inlier_mask)

    @property
    def num_inliers(self) -> int:
        return len(self.correspondences)

    @property
    def inlier_ratio(self) -> float:
        return self.num_inliers / self.num_candidates if self.num_candidates else 0.0


def matched_points(correspondences: Sequence[Correspondence],
                   query_keypoints: Sequence[Keypoint],
                   train_keypoints: Sequence[Keypoint]) -> Tuple[np.ndarray, np.ndarray]:
    """Aligned (N, 2) point arrays for query and train sides of the correspondences."""
    if not correspondences:
        empty = np.empty((0, 2), dtype=np.float32)
        return empty, empty.copy()
    pts_a = np.float32([query_keypoints[c.query_idx].pt for c in correspondences])
    pts_b = np.float32([train_keypoints[c.train_idx].pt for c in correspondences])
    return pts_a, pts_b
