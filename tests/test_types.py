"""Tests for the feature set and match result entities."""

import dataclasses

import cv2
import pytest
import numpy as np
from sfmfront.exceptions import InvalidFeatureSetError
from sfmfront.types import (
    Correspondence,
    ImageFeatureSet,
    Keypoint,
    MatchResult,
    matched_points,
)


def keypoints(n):
    return [Keypoint(x=float(i), y=float(2 * i)) for i in range(n)]


class TestKeypoint:
    """Test Keypoint conversion and immutability."""

    def test_from_cv(self):
        kp = cv2.KeyPoint(3.5, 4.25, 7.0, 30.0, 0.5, 2)
        converted = Keypoint.from_cv(kp)
        assert converted.pt == (3.5, 4.25)
        assert converted.size == 7.0
        assert converted.angle == 30.0
        assert converted.octave == 2

    def test_immutable(self):
        kp = Keypoint(x=1.0, y=2.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            kp.x = 5.0


class TestImageFeatureSet:
    """Test aligned-array invariants."""

    def test_valid_feature_set(self):
        fs = ImageFeatureSet(keypoints=keypoints(4),
                             descriptors=np.zeros((4, 32), dtype=np.uint8),
                             colors=np.zeros((4, 3)),
                             image_index=7)
        assert fs.num_keypoints == 4
        assert fs.descriptor_kind == 'binary'
        assert fs.colors.dtype == np.float32
        assert fs.image_index == 7
        assert np.allclose(fs.points(), [[0, 0], [1, 2], [2, 4], [3, 6]])

    def test_float_descriptor_kind(self):
        fs = ImageFeatureSet(keypoints=keypoints(2),
                             descriptors=np.zeros((2, 128), dtype=np.float32),
                             colors=np.zeros((2, 4)))
        assert fs.descriptor_kind == 'float'

    def test_descriptor_count_mismatch(self):
        with pytest.raises(InvalidFeatureSetError):
            ImageFeatureSet(keypoints=keypoints(3),
                            descriptors=np.zeros((2, 128), dtype=np.float32),
                            colors=np.zeros((3, 3)))

    def test_color_count_mismatch(self):
        with pytest.raises(InvalidFeatureSetError):
            ImageFeatureSet(keypoints=keypoints(3),
                            descriptors=np.zeros((3, 128), dtype=np.float32),
                            colors=np.zeros((4, 3)))

    def test_arrays_are_read_only_copies(self):
        descriptors = np.zeros((2, 128), dtype=np.float32)
        fs = ImageFeatureSet(keypoints=keypoints(2), descriptors=descriptors,
                             colors=np.zeros((2, 3)))
        descriptors[0, 0] = 9.0
        assert fs.descriptors[0, 0] == 0.0
        with pytest.raises(ValueError):
            fs.descriptors[0, 0] = 1.0

    def test_frozen(self):
        fs = ImageFeatureSet(keypoints=keypoints(1),
                             descriptors=np.zeros((1, 128), dtype=np.float32),
                             colors=np.zeros((1, 3)))
        with pytest.raises(dataclasses.FrozenInstanceError):
            fs.image_index = 3

    def test_empty_feature_set(self):
        fs = ImageFeatureSet(keypoints=[], descriptors=np.empty((0, 128), dtype=np.float32),
                             colors=np.empty((0, 3)))
        assert fs.num_keypoints == 0
        assert fs.points().shape == (0, 2)


class TestMatchResult:
    """Test MatchResult helpers."""

    def test_counts(self):
        inliers = [Correspondence(0, 1, 0.5), Correspondence(2, 0, 1.5)]
        result = MatchResult(correspondences=inliers, homography=np.eye(3),
                             inlier_mask=[True, False, True, False])
        assert result.num_candidates == 4
        assert result.num_inliers == 2
        assert result.inlier_ratio == 0.5
        assert isinstance(result.correspondences, tuple)
        assert not result.homography.flags.writeable

    def test_empty_ratio(self):
        result = MatchResult(correspondences=[], homography=np.eye(3))
        assert result.inlier_ratio == 0.0

    def test_correspondence_from_cv(self):
        match = cv2.DMatch(3, 5, 12.0)
        assert Correspondence.from_cv(match) == Correspondence(3, 5, 12.0)


def test_matched_points():
    kp_a = keypoints(3)
    kp_b = [Keypoint(x=10.0 + i, y=0.0) for i in range(3)]
    pts_a, pts_b = matched_points([Correspondence(2, 0, 0.0), Correspondence(0, 1, 0.0)], kp_a, kp_b)
    assert np.allclose(pts_a, [[2, 4], [0, 0]])
    assert np.allclose(pts_b, [[10, 0], [11, 0]])


def test_matched_points_empty():
    pts_a, pts_b = matched_points([], [], [])
    assert pts_a.shape == (0, 2)
    assert pts_b.shape == (0, 2)
