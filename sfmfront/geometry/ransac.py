"""RANSAC implementation for robust estimation."""

import math
from typing import Callable, Optional, Tuple

import numpy as np


class RANSAC:
    """
    RANSAC algorithm for outlier rejection.

    The iteration budget shrinks as better models are found: sampling stops
    once an all-inlier minimal sample has been drawn with probability
    ``confidence``, or after ``max_iters`` samples.
    """

    def __init__(self, threshold: float = 3.0, max_iters: int = 1000,
                 min_samples: int = 4, confidence: float = 0.99,
                 random_state: Optional[int] = None):
        self.threshold = threshold
        self.max_iters = max_iters
        self.min_samples = min_samples
        self.confidence = confidence
        self.random_state = random_state

    def required_iterations(self, inlier_ratio: float) -> int:
        """Samples needed to draw one all-inlier sample with the configured confidence."""
        if self.confidence >= 1.0:
            return self.max_iters
        if inlier_ratio >= 1.0:
            return 1
        p_good = inlier_ratio ** self.min_samples
        if p_good <= 0.0:
            return self.max_iters
        denom = math.log1p(-p_good)
        if denom == 0.0:
            return self.max_iters
        iters = math.log(1.0 - self.confidence) / denom
        return int(min(self.max_iters, max(1, math.ceil(iters))))

    def fit(self, data: np.ndarray, model_func: Callable, score_func: Callable) -> Tuple[Optional[object], np.ndarray]:
        """
        Fit model using RANSAC.

        Args:
            data: (N, ...) array of observations
            model_func: Builds a model from a minimal sample, or returns None
                        for a degenerate sample
            score_func: Per-observation residuals of ``data`` under a model

        Returns:
            Tuple of (best model or None, boolean inlier mask)
        """
        n_samples = len(data)
        if n_samples < self.min_samples:
            return None, np.array([])

        rng = np.random.default_rng(self.random_state)
        best_model = None
        best_inliers = np.zeros(n_samples, dtype=bool)
        best_score = -1

        iters_needed = self.max_iters
        iteration = 0
        while iteration < iters_needed:
            iteration += 1
            indices = rng.choice(n_samples, self.min_samples, replace=False)
            sample = data[indices]

            model = model_func(sample)
            if model is None:
                continue

            scores = score_func(data, model)
            inliers = scores < self.threshold
            score = int(np.sum(inliers))

            if score > best_score:
                best_score = score
                best_model = model
                best_inliers = inliers
                iters_needed = self.required_iterations(score / n_samples)

        return best_model, best_inliers
