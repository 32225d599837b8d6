"""
sfmfront core pipeline
Batch feature extraction and pairwise geometric matching
"""

import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from time import perf_counter
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from sfmfront.config import get_value, merge_config
from sfmfront.detection.color_sampler import ColorSampler
from sfmfront.detection.keypoint_detector import KeypointDetector, create_detector
from sfmfront.exceptions import SfmFrontError
from sfmfront.geometry.homography import RobustGeometricFilter
from sfmfront.matching.descriptor_matcher import DescriptorMatcher
from sfmfront.types import ImageFeatureSet, MatchResult
from sfmfront.utils.logger import setup_logger
from sfmfront.utils.metrics import PerformanceMetrics

logger = logging.getLogger(__name__)

# Errors that drop one image or one pair without stopping the batch
RECOVERABLE_ERRORS = (SfmFrontError, cv2.error)


class FeaturePipeline:
    """
    Feature extraction and pairwise matching over a batch of images.

    Example:
        >>> pipeline = FeaturePipeline()
        >>> feature_sets = pipeline.extract_all(images)
        >>> results = pipeline.match_pairs(feature_sets)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 detector: Optional[KeypointDetector] = None,
                 matcher: Optional[DescriptorMatcher] = None,
                 geometric_filter: Optional[RobustGeometricFilter] = None,
                 color_sampler: Optional[ColorSampler] = None):
        """
        Initialize the pipeline

        Args:
            config: Configuration overrides, merged over DEFAULT_CONFIG
            detector: Detector to use instead of the configured one
            matcher: Matcher to use instead of the configured one
            geometric_filter: Filter to use instead of the configured one
            color_sampler: Sampler to use instead of the default one
        """
        self.config = merge_config(config or {})
        if get_value(self.config, "logging.configure", False):
            setup_logger("sfmfront", get_value(self.config, "logging.level", "INFO"),
                         get_value(self.config, "logging.log_file"))

        detection = self.config["detection"]
        geometry = self.config["geometry"]

        detector_name = detection["detector"]
        self.detector = detector or create_detector(
            detector_name, **detection.get(detector_name, {})
        )
        self.color_sampler = color_sampler or ColorSampler()
        self.matcher = matcher or DescriptorMatcher(metric=self.config["matching"]["metric"])
        self.geometric_filter = geometric_filter or RobustGeometricFilter(
            ransac_threshold=geometry["ransac_threshold"],
            confidence=geometry["confidence"],
            max_iters=geometry["max_iters"],
            backend=geometry["backend"],
            refine=geometry["refine"],
            random_seed=geometry["random_seed"]
        )
        self.min_keypoints = int(detection["min_keypoints"])
        self.num_workers = max(1, int(self.config["pipeline"]["num_workers"]))

        self.metrics = PerformanceMetrics()
        self._cancel_event = threading.Event()
        self._stats_lock = threading.Lock()
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'total_images': 0,
            'admitted_images': 0,
            'rejected_images': 0,
            'failed_images': 0,
            'matched_pairs': 0,
            'failed_pairs': 0
        }

    def _count(self, key: str):
        with self._stats_lock:
            self.stats[key] += 1

    def cancel(self):
        """Abandon work that has not started yet in the running batch."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def extract(self, image: np.ndarray, image_index: Optional[int] = None) -> ImageFeatureSet:
        """
        Detect keypoints, descriptors and colors for one image.

        Args:
            image: RGB or RGBA uint8 image
            image_index: Position of the image in its batch

        Returns:
            ImageFeatureSet, not yet checked for admission

        Raises:
            UnsupportedInputError: If the image is not 8-bit with 3 or 4 channels
        """
        start = perf_counter()
        keypoints, descriptors = self.detector.detect(image)
        colors = self.color_sampler.sample(keypoints, image)
        self.metrics.add_duration('extraction', (perf_counter() - start) * 1000)
        return ImageFeatureSet(keypoints=keypoints, descriptors=descriptors,
                               colors=colors, image_index=image_index)

    def admit(self, feature_set: ImageFeatureSet) -> bool:
        """Whether a feature set has enough keypoints for matching."""
        return feature_set.num_keypoints >= self.min_keypoints

    def _extract_one(self, image_index: int, image: np.ndarray) -> Optional[ImageFeatureSet]:
        if self.cancelled:
            return None

        self._count('total_images')
        try:
            feature_set = self.extract(image, image_index=image_index)
        except RECOVERABLE_ERRORS as e:
            self._count('failed_images')
            logger.warning(f"Feature extraction failed for image {image_index}: {e}")
            return None

        if not self.admit(feature_set):
            self._count('rejected_images')
            logger.debug(f"Image {image_index} discarded: {feature_set.num_keypoints} keypoints "
                         f"< {self.min_keypoints}")
            return None

        self._count('admitted_images')
        return feature_set

    def extract_all(self, images: Iterable[np.ndarray]) -> List[ImageFeatureSet]:
        """
        Extract features for every image and keep the admitted ones.

        Args:
            images: RGB/RGBA uint8 images

        Returns:
            Admitted feature sets in input order, tagged with their input index
        """
        self._cancel_event.clear()
        images = list(images)

        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            results = list(executor.map(self._extract_one, range(len(images)), images))

        feature_sets = [fs for fs in results if fs is not None]
        logger.info(f"Extracted features for {len(feature_sets)}/{len(images)} images")
        return feature_sets

    def match(self, query: ImageFeatureSet, train: ImageFeatureSet) -> MatchResult:
        """
        Match two feature sets and keep the geometrically consistent matches.

        Raises:
            InsufficientCorrespondencesError: Fewer than 4 candidate matches
            HomographyEstimationError: RANSAC found no valid homography
        """
        start = perf_counter()
        candidates = self.matcher.match(query, train)
        self.metrics.add_duration('matching', (perf_counter() - start) * 1000)

        start = perf_counter()
        result = self.geometric_filter.filter(candidates, query.keypoints, train.keypoints)
        self.metrics.add_duration('filtering', (perf_counter() - start) * 1000)
        return result

    def _match_one(self, feature_sets: Sequence[ImageFeatureSet],
                   pair: Tuple[int, int]) -> Optional[MatchResult]:
        if self.cancelled:
            return None

        i, j = pair
        try:
            result = self.match(feature_sets[i], feature_sets[j])
        except RECOVERABLE_ERRORS as e:
            self._count('failed_pairs')
            logger.warning(f"Matching failed for pair {pair}: {e}")
            return None

        self._count('matched_pairs')
        logger.debug(f"Pair {pair}: {result.num_inliers}/{result.num_candidates} inliers")
        return result

    def match_pairs(self, feature_sets: Sequence[ImageFeatureSet],
                    pairs: Optional[Iterable[Tuple[int, int]]] = None) -> Dict[Tuple[int, int], MatchResult]:
        """
        Match image pairs concurrently.

        Args:
            feature_sets: Admitted feature sets
            pairs: (query, train) positions into feature_sets; all i < j by default

        Returns:
            MatchResult per successfully matched pair
        """
        self._cancel_event.clear()
        feature_sets = list(feature_sets)
        if pairs is None:
            pairs = itertools.combinations(range(len(feature_sets)), 2)
        pairs = [tuple(p) for p in pairs]

        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            results = list(executor.map(lambda p: self._match_one(feature_sets, p), pairs))

        matched = {pair: result for pair, result in zip(pairs, results) if result is not None}
        logger.info(f"Matched {len(matched)}/{len(pairs)} image pairs")
        return matched

    def get_stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            stats = dict(self.stats)
        stats['timings_ms'] = self.metrics.get_summary()
        return stats

    def reset_stats(self):
        with self._stats_lock:
            self.stats = self._empty_stats()
        self.metrics.reset()

    def log_summary(self):
        stats = self.get_stats()
        logger.info(
            f"Images: {stats['total_images']} seen, {stats['admitted_images']} admitted, "
            f"{stats['rejected_images']} rejected, {stats['failed_images']} failed; "
            f"pairs: {stats['matched_pairs']} matched, {stats['failed_pairs']} failed"
        )
        for name, duration in stats['timings_ms'].items():
            logger.info(f"  {name}: {duration:.1f}ms total")
