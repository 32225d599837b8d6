"""Robust geometric verification of matches."""

from .homography import (
    RobustGeometricFilter,
    fit_homography,
    reprojection_errors,
    transform_points,
)
from .optimizer import HomographyOptimizer
from .ransac import RANSAC
from .validator import validate_homography

__all__ = [
    'RobustGeometricFilter',
    'RANSAC',
    'HomographyOptimizer',
    'fit_homography',
    'transform_points',
    'reprojection_errors',
    'validate_homography',
]
