"""Tests for 3D geometry helpers."""

import math

import pytest

from serve_analysis.core.geometry import (
    check_visibility,
    compute_angle_3d,
    compute_distance_3d,
    compute_line_rotation,
    extract_point_3d,
    midpoint_3d,
)
from serve_analysis.core.models import Keypoint


class TestComputeAngle3D:
    def test_right_angle(self):
        assert compute_angle_3d((1, 0, 0), (0, 0, 0), (0, 1, 0)) == pytest.approx(90.0, abs=0.1)

    def test_right_angle_out_of_plane(self):
        assert compute_angle_3d((0, 0, 2), (0, 0, 0), (3, 0, 0)) == pytest.approx(90.0, abs=0.1)

    def test_collinear_is_180(self):
        angle = compute_angle_3d((0, 1, 0), (0, 0, 0), (0, -1, 0))
        assert not math.isnan(angle)
        assert angle == pytest.approx(180.0)

    def test_same_direction_is_zero(self):
        assert compute_angle_3d((1, 0, 0), (0, 0, 0), (2, 0, 0)) == pytest.approx(0.0, abs=1e-6)

    def test_coincident_points_return_zero(self):
        angle = compute_angle_3d((1, 1, 1), (1, 1, 1), (2, 2, 2))
        assert angle == 0.0
        assert compute_angle_3d((0, 0, 0), (0, 0, 0), (0, 0, 0)) == 0.0

    def test_45_degrees(self):
        assert compute_angle_3d((1, 0, 0), (0, 0, 0), (1, 1, 0)) == pytest.approx(45.0)


class TestDistanceAndMidpoint:
    def test_distance(self):
        assert compute_distance_3d((0, 0, 0), (1, 2, 2)) == pytest.approx(3.0)

    def test_midpoint(self):
        assert midpoint_3d((0, 0, 0), (2, 4, -2)) == (1, 2, -1)


class TestLineRotation:
    def test_flat_line_is_zero(self):
        assert compute_line_rotation((-1, 5, 0), (1, 5, 0)) == pytest.approx(0.0)

    def test_diagonal_in_xz(self):
        assert compute_line_rotation((0, 0, 0), (1, 0, 1)) == pytest.approx(45.0)

    def test_y_is_ignored(self):
        assert compute_line_rotation((0, 0, 0), (1, 9, -1)) == pytest.approx(-45.0)

    def test_reversed_line(self):
        assert compute_line_rotation((1, 0, 0), (0, 0, 0)) == pytest.approx(180.0)


class TestVisibility:
    def _keypoints(self, scores):
        return [Keypoint(i, 0.0, 0.0, 0.0, v) for i, v in enumerate(scores)]

    def test_all_above(self):
        assert check_visibility(self._keypoints([0.9, 0.6]), [0, 1])

    def test_threshold_is_strict(self):
        assert not check_visibility(self._keypoints([0.9, 0.5]), [0, 1])

    def test_only_requested_indices_checked(self):
        assert check_visibility(self._keypoints([0.9, 0.1]), [0])

    def test_custom_threshold(self):
        assert check_visibility(self._keypoints([0.3]), [0], threshold=0.2)

    def test_extract_point(self):
        assert extract_point_3d(Keypoint(0, 1.0, 2.0, 3.0)) == (1.0, 2.0, 3.0)
