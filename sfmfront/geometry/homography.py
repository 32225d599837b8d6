"""Robust homography estimation and match filtering."""

import logging
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from sfmfront.exceptions import HomographyEstimationError, InsufficientCorrespondencesError
from sfmfront.geometry.optimizer import HomographyOptimizer
from sfmfront.geometry.ransac import RANSAC
from sfmfront.geometry.validator import is_valid_homography, validate_homography
from sfmfront.types import Correspondence, Keypoint, MatchResult, matched_points

logger = logging.getLogger(__name__)

MIN_CORRESPONDENCES = 4
BACKENDS = ("opencv", "ransac")


def transform_points(points: np.ndarray, H: np.ndarray) -> np.ndarray:
    """Transform points using homography matrix."""
    points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    points_homogeneous = np.hstack([points, np.ones((points.shape[0], 1))])
    transformed = (np.asarray(H, dtype=np.float64) @ points_homogeneous.T).T
    with np.errstate(divide='ignore', invalid='ignore'):
        return transformed[:, :2] / transformed[:, 2:]


def reprojection_errors(H: np.ndarray, src_points: np.ndarray,
                        dst_points: np.ndarray) -> np.ndarray:
    """Per-point distance between H(src) and dst; points at infinity get inf."""
    dst = np.asarray(dst_points, dtype=np.float64).reshape(-1, 2)
    projected = transform_points(src_points, H)
    errors = np.linalg.norm(projected - dst, axis=1)
    errors[~np.isfinite(errors)] = np.inf
    return errors


def normalize_points(points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Hartley normalization: centroid to origin, mean distance sqrt(2)."""
    points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    centroid = points.mean(axis=0)
    mean_dist = np.sqrt(((points - centroid) ** 2).sum(axis=1)).mean()
    scale = np.sqrt(2.0) / mean_dist if mean_dist > 1e-12 else 1.0
    T = np.array([[scale, 0.0, -scale * centroid[0]],
                  [0.0, scale, -scale * centroid[1]],
                  [0.0, 0.0, 1.0]])
    return (points - centroid) * scale, T


def fit_homography(src_points: np.ndarray, dst_points: np.ndarray) -> Optional[np.ndarray]:
    """
    Direct linear transform with Hartley normalization.

    Args:
        src_points: (N, 2) source points, N >= 4
        dst_points: (N, 2) destination points

    Returns:
        3x3 homography with H[2, 2] == 1, or None for a degenerate configuration
    """
    if len(src_points) < MIN_CORRESPONDENCES:
        return None
    src, T_src = normalize_points(src_points)
    dst, T_dst = normalize_points(dst_points)

    A = []
    for (x, y), (u, v) in zip(src, dst):
        A.append([0, 0, 0, -x, -y, -1, v * x, v * y, v])
        A.append([x, y, 1, 0, 0, 0, -u * x, -u * y, -u])
    A = np.asarray(A, dtype=np.float64)

    try:
        _, singular_values, Vt = np.linalg.svd(A)
    except np.linalg.LinAlgError:
        return None

    # rank < 8 means the sample does not pin down a unique homography
    if singular_values[7] < 1e-8 * singular_values[0]:
        return None

    H = np.linalg.inv(T_dst) @ Vt[-1].reshape(3, 3) @ T_src
    if abs(H[2, 2]) < 1e-12:
        return None
    H = H / H[2, 2]
    return H if is_valid_homography(H) else None


class RobustGeometricFilter:
    """
    Filter candidate correspondences with a RANSAC homography fit.

    Attributes:
        ransac_threshold: Maximum reprojection error (pixels) of an inlier
        confidence: Probability of having drawn an all-inlier sample at stop
        max_iters: Iteration cap
        backend: "opencv" (cv2.findHomography) or "ransac" (numpy loop)
        refine: Run Levenberg-Marquardt on the inliers after RANSAC
        random_seed: Seed for the "ransac" backend
    """

    def __init__(self, ransac_threshold: float = 3.0, confidence: float = 0.99,
                 max_iters: int = 2000, backend: str = "opencv",
                 refine: bool = False, random_seed: Optional[int] = None):
        backend = backend.lower()
        if backend not in BACKENDS:
            raise ValueError(f"Unsupported geometry backend: {backend}")
        self.ransac_threshold = ransac_threshold
        self.confidence = confidence
        self.max_iters = max_iters
        self.backend = backend
        self.refine = refine
        self.random_seed = random_seed
        self.optimizer = HomographyOptimizer()

    def estimate(self, src_points: np.ndarray,
                 dst_points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Estimate the homography mapping src_points to dst_points.

        Returns:
            Tuple of (3x3 homography, boolean inlier mask)

        Raises:
            InsufficientCorrespondencesError: Fewer than 4 point pairs
            HomographyEstimationError: No valid homography was found
        """
        src = np.asarray(src_points, dtype=np.float32).reshape(-1, 2)
        dst = np.asarray(dst_points, dtype=np.float32).reshape(-1, 2)
        if len(src) != len(dst):
            raise ValueError(f"Point count mismatch: {len(src)} vs {len(dst)}")
        if len(src) < MIN_CORRESPONDENCES:
            raise InsufficientCorrespondencesError(len(src), MIN_CORRESPONDENCES)

        if self.backend == "opencv":
            H, mask = self._estimate_opencv(src, dst)
        else:
            H, mask = self._estimate_ransac(src, dst)

        if self.refine and np.count_nonzero(mask) >= MIN_CORRESPONDENCES:
            H = self.optimizer.optimize(H, src[mask], dst[mask])
            mask = reprojection_errors(H, src, dst) < self.ransac_threshold

        valid, reason = validate_homography(H)
        if not valid:
            raise HomographyEstimationError(f"Rejected homography: {reason}")

        return H / H[2, 2], mask

    def _estimate_opencv(self, src: np.ndarray, dst: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        H, mask = cv2.findHomography(src, dst, cv2.RANSAC, self.ransac_threshold,
                                     maxIters=self.max_iters, confidence=self.confidence)
        if H is None or mask is None:
            raise HomographyEstimationError("cv2.findHomography found no model")
        return H, mask.ravel().astype(bool)

    def _estimate_ransac(self, src: np.ndarray, dst: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        data = np.hstack([src, dst]).astype(np.float64)

        def model_func(sample):
            return fit_homography(sample[:, :2], sample[:, 2:])

        def score_func(points, H):
            return reprojection_errors(H, points[:, :2], points[:, 2:])

        ransac = RANSAC(threshold=self.ransac_threshold, max_iters=self.max_iters,
                        min_samples=MIN_CORRESPONDENCES, confidence=self.confidence,
                        random_state=self.random_seed)
        H, mask = ransac.fit(data, model_func, score_func)
        if H is None:
            raise HomographyEstimationError("RANSAC found no non-degenerate sample")

        # re-fit on the full consensus set and reclassify against it
        if np.count_nonzero(mask) > MIN_CORRESPONDENCES:
            H_all = fit_homography(src[mask], dst[mask])
            if H_all is not None:
                mask_all = score_func(data, H_all) < self.ransac_threshold
                if np.count_nonzero(mask_all) >= np.count_nonzero(mask):
                    H, mask = H_all, mask_all
        return H, mask

    def filter(self, candidates: Sequence[Correspondence],
               query_keypoints: Sequence[Keypoint],
               train_keypoints: Sequence[Keypoint]) -> MatchResult:
        """
        Keep the candidates consistent with the best-supported homography.

        Args:
            candidates: Candidate correspondences from the descriptor matcher
            query_keypoints: Keypoints indexed by ``query_idx``
            train_keypoints: Keypoints indexed by ``train_idx``

        Returns:
            MatchResult with inliers in their original order
        """
        candidates = list(candidates)
        if len(candidates) < MIN_CORRESPONDENCES:
            raise InsufficientCorrespondencesError(len(candidates), MIN_CORRESPONDENCES)

        pts_a, pts_b = matched_points(candidates, query_keypoints, train_keypoints)
        H, mask = self.estimate(pts_a, pts_b)

        inliers = [c for c, keep in zip(candidates, mask) if keep]
        logger.debug(f"Homography kept {len(inliers)}/{len(candidates)} correspondences")
        return MatchResult(correspondences=inliers, homography=H, inlier_mask=mask)
