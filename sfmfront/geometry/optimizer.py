"""Homography refinement using Levenberg-Marquardt."""

import numpy as np
from scipy.optimize import least_squares


class HomographyOptimizer:
    """Refine a homography by minimizing reprojection error over inliers."""

    def __init__(self, max_iters: int = 100):
        self.max_iters = max_iters

    def optimize(self, H: np.ndarray, src_points: np.ndarray,
                 dst_points: np.ndarray) -> np.ndarray:
        """Optimize homography matrix. Needs at least 4 point pairs."""
        src_points = np.asarray(src_points, dtype=np.float64).reshape(-1, 2)
        dst_points = np.asarray(dst_points, dtype=np.float64).reshape(-1, 2)
        if len(src_points) < 4:
            return H

        H = np.asarray(H, dtype=np.float64)
        h_params = (H / H[2, 2]).flatten()[:8]

        def residuals(params):
            H_opt = self._params_to_matrix(params)
            transformed = self._transform_points(src_points, H_opt)
            return (transformed - dst_points).flatten()

        result = least_squares(residuals, h_params, method='lm', max_nfev=self.max_iters)
        if not np.all(np.isfinite(result.x)):
            return H / H[2, 2]
        return self._params_to_matrix(result.x)

    def _params_to_matrix(self, params: np.ndarray) -> np.ndarray:
        """Convert parameter vector to 3x3 matrix."""
        return np.append(params, 1).reshape(3, 3)

    def _transform_points(self, points: np.ndarray, H: np.ndarray) -> np.ndarray:
        points_h = np.hstack([points, np.ones((points.shape[0], 1))])
        transformed = (H @ points_h.T).T
        return transformed[:, :2] / transformed[:, 2:]
