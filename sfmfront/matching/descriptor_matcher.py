"""
Descriptor matching.

Brute-force nearest neighbour search between two descriptor sets. Every query
descriptor yields exactly one candidate; outlier rejection is left to the
geometric filter.
"""

import threading
from typing import List

import cv2
import numpy as np

from sfmfront.exceptions import DescriptorMismatchError
from sfmfront.types import Correspondence, ImageFeatureSet

METRICS = ("auto", "hamming", "l2")


class DescriptorMatcher:
    """
    Nearest neighbour matcher.

    Attributes:
        metric: "auto" picks Hamming for uint8 descriptors and L2 otherwise;
                "hamming" or "l2" force a norm
    """

    def __init__(self, metric: str = "auto"):
        metric = metric.lower()
        if metric not in METRICS:
            raise ValueError(f"Unsupported matching metric: {metric}")
        self.metric = metric
        self._local = threading.local()

    def norm_for(self, descriptors: np.ndarray) -> int:
        """OpenCV norm type used for the given descriptors."""
        if self.metric == "hamming":
            return cv2.NORM_HAMMING
        if self.metric == "l2":
            return cv2.NORM_L2
        return cv2.NORM_HAMMING if descriptors.dtype == np.uint8 else cv2.NORM_L2

    def _matcher(self, norm_type: int) -> cv2.BFMatcher:
        matchers = getattr(self._local, 'matchers', None)
        if matchers is None:
            matchers = self._local.matchers = {}
        if norm_type not in matchers:
            matchers[norm_type] = cv2.BFMatcher(norm_type, crossCheck=False)
        return matchers[norm_type]

    def match_descriptors(self, query: np.ndarray, train: np.ndarray) -> List[Correspondence]:
        """
        Match two raw descriptor arrays.

        Args:
            query: (N, D) query descriptors
            train: (M, D) train descriptors

        Returns:
            N correspondences ordered by query index

        Raises:
            DescriptorMismatchError: If binary and float descriptors are mixed, or
                                     Hamming is forced on float descriptors
        """
        if query is None or train is None or len(query) == 0 or len(train) == 0:
            return []

        if (query.dtype == np.uint8) != (train.dtype == np.uint8):
            raise DescriptorMismatchError(
                f"Cannot match {query.dtype} descriptors against {train.dtype} descriptors"
            )

        norm_type = self.norm_for(query)
        if norm_type == cv2.NORM_HAMMING and query.dtype != np.uint8:
            raise DescriptorMismatchError("Hamming distance requires uint8 descriptors")
        if norm_type == cv2.NORM_L2:
            query = np.ascontiguousarray(query, dtype=np.float32)
            train = np.ascontiguousarray(train, dtype=np.float32)

        matches = self._matcher(norm_type).match(query, train)
        correspondences = [Correspondence.from_cv(m) for m in matches]
        correspondences.sort(key=lambda c: c.query_idx)
        return correspondences

    def match(self, query: ImageFeatureSet, train: ImageFeatureSet) -> List[Correspondence]:
        """Match every keypoint of ``query`` to its nearest neighbour in ``train``."""
        return self.match_descriptors(query.descriptors, train.descriptors)
