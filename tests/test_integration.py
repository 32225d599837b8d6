"""Integration tests for the complete extraction and matching pipeline."""

import pytest
import numpy as np
from sfmfront import FeaturePipeline
from sfmfront.geometry.homography import reprojection_errors
from sfmfront.types import matched_points
from sfmfront.utils.metrics import reprojection_error_stats


class TestIntegration:
    """Test complete processing pipeline."""

    @pytest.mark.parametrize("backend", ["opencv", "ransac"])
    def test_planar_scene_two_views(self, planar_pair, backend):
        """Two views of a planar scene yield inliers that agree with the true warp."""
        view_a, view_b, H_true = planar_pair
        pipeline = FeaturePipeline(config={'geometry': {'backend': backend, 'random_seed': 0}})

        feature_sets = pipeline.extract_all([view_a, view_b])
        assert len(feature_sets) == 2

        results = pipeline.match_pairs(feature_sets)
        result = results[(0, 1)]
        assert result.num_inliers > 0
        assert abs(np.linalg.det(result.homography)) > 1e-6

        query, train = feature_sets
        pts_a, pts_b = matched_points(result.correspondences, query.keypoints, train.keypoints)
        true_errors = reprojection_errors(H_true, pts_a, pts_b)
        assert np.median(true_errors) < 3.0

        stats = reprojection_error_stats(result.homography, pts_a, pts_b)
        assert stats['median_error'] < pipeline.geometric_filter.ransac_threshold

    def test_rgba_and_rgb_views_match(self, planar_pair):
        view_a, view_b, _ = planar_pair
        alpha = np.full(view_b.shape[:2] + (1,), 255, dtype=np.uint8)
        rgba_b = np.concatenate([view_b, alpha], axis=2)

        pipeline = FeaturePipeline()
        fs_a, fs_b = pipeline.extract_all([view_a, rgba_b])
        assert fs_b.colors.shape[1] == 4

        result = pipeline.match(fs_a, fs_b)
        assert result.num_inliers > 10
