"""Homography validation utilities."""

import numpy as np
from typing import Optional, Tuple


def validate_homography(H: Optional[np.ndarray], min_det: float = 1e-9,
                        max_cond: float = 1e12) -> Tuple[bool, str]:
    """Validate homography matrix properties."""
    if H is None:
        return False, "Matrix is None"

    H = np.asarray(H, dtype=np.float64)
    if H.shape != (3, 3):
        return False, "Invalid matrix shape"

    if not np.all(np.isfinite(H)):
        return False, "Matrix has non-finite entries"

    if abs(H[2, 2]) < 1e-12:
        return False, "Invalid normalization"

    Hn = H / H[2, 2]
    if abs(np.linalg.det(Hn)) < min_det:
        return False, "Matrix is singular"

    if np.linalg.cond(Hn) > max_cond:
        return False, "Matrix is ill-conditioned"

    return True, "Valid"


def is_valid_homography(H: Optional[np.ndarray]) -> bool:
    return validate_homography(H)[0]
