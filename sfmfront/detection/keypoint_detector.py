"""
Keypoint detection and descriptor extraction.

OpenCV detectors behind a common interface. Float descriptors (SIFT) are
matched with L2, binary descriptors (ORB, AKAZE) with Hamming distance.
"""

import threading
from abc import ABC, abstractmethod
from typing import List, Tuple

import cv2
import numpy as np

from sfmfront.preprocessing.color_conversion import to_detection_buffer
from sfmfront.types import Keypoint


class KeypointDetector(ABC):
    """
    Base class for keypoint detectors.

    Subclasses create the OpenCV engine; each thread gets its own engine
    instance so one detector can serve a worker pool.

    Attributes:
        name: Detector name
        descriptor_kind: "float" or "binary"
        descriptor_dtype: numpy dtype of descriptor rows
        descriptor_size: Length of one descriptor row
        params: Parameters passed to the OpenCV constructor
    """

    name = "base"
    descriptor_kind = "float"
    descriptor_dtype = np.float32
    descriptor_size = 0

    def __init__(self, **params):
        self.params = params
        self._local = threading.local()

    @abstractmethod
    def _create_engine(self) -> cv2.Feature2D:
        """Build the OpenCV Feature2D object."""

    @property
    def engine(self) -> cv2.Feature2D:
        engine = getattr(self._local, 'engine', None)
        if engine is None:
            engine = self._create_engine()
            self._local.engine = engine
        return engine

    def detect(self, image: np.ndarray) -> Tuple[List[Keypoint], np.ndarray]:
        """
        Detect keypoints and compute their descriptors.

        Args:
            image: RGB or RGBA uint8 image

        Returns:
            Tuple of (keypoints, descriptors) with one descriptor row per keypoint
        """
        bgr = to_detection_buffer(image)
        gray = cv2.cvtColor(bgr, cv2.COLOR_BGR2GRAY)

        cv_keypoints, descriptors = self.engine.detectAndCompute(gray, None)

        keypoints = [Keypoint.from_cv(kp) for kp in cv_keypoints]
        if descriptors is None or len(keypoints) == 0:
            descriptors = np.empty((0, self.descriptor_size), dtype=self.descriptor_dtype)
        return keypoints, descriptors

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.params})"


class SiftDetector(KeypointDetector):
    """SIFT keypoints with 128-D float descriptors."""

    name = "sift"
    descriptor_kind = "float"
    descriptor_dtype = np.float32
    descriptor_size = 128

    def _create_engine(self):
        return cv2.SIFT_create(
            nfeatures=self.params.get("nfeatures", 0),
            nOctaveLayers=self.params.get("nOctaveLayers", 3),
            contrastThreshold=self.params.get("contrastThreshold", 0.04),
            edgeThreshold=self.params.get("edgeThreshold", 10),
            sigma=self.params.get("sigma", 1.6)
        )


class OrbDetector(KeypointDetector):
    """ORB keypoints with 32-byte binary descriptors."""

    name = "orb"
    descriptor_kind = "binary"
    descriptor_dtype = np.uint8
    descriptor_size = 32

    def _create_engine(self):
        return cv2.ORB_create(
            nfeatures=self.params.get("nfeatures", 1000),
            scaleFactor=self.params.get("scaleFactor", 1.2),
            nlevels=self.params.get("nlevels", 8),
            edgeThreshold=self.params.get("edgeThreshold", 31),
            patchSize=self.params.get("patchSize", 31)
        )


class AkazeDetector(KeypointDetector):
    """AKAZE keypoints with binary MLDB descriptors."""

    name = "akaze"
    descriptor_kind = "binary"
    descriptor_dtype = np.uint8
    descriptor_size = 61

    def _create_engine(self):
        return cv2.AKAZE_create(
            threshold=self.params.get("threshold", 0.001),
            nOctaves=self.params.get("nOctaves", 4),
            nOctaveLayers=self.params.get("nOctaveLayers", 4)
        )


DETECTORS = {
    SiftDetector.name: SiftDetector,
    OrbDetector.name: OrbDetector,
    AkazeDetector.name: AkazeDetector,
}


def create_detector(name: str = "sift", **params) -> KeypointDetector:
    """Create a detector by name ("sift", "orb" or "akaze")."""
    try:
        detector_cls = DETECTORS[name.lower()]
    except KeyError:
        raise ValueError(f"Unsupported detector: {name}") from None
    return detector_cls(**params)
