"""Tests for per-frame biomechanics extraction."""

import pytest

from serve_analysis.config.landmarks import PoseLandmarks as PL
from serve_analysis.core.biomechanics import BiomechanicsExtractor
from serve_analysis.core.calibration import CalibrationConfig
from serve_analysis.core.geometry import compute_distance_3d
from serve_analysis.core.one_euro_filter import Point3DFilter


@pytest.fixture
def extractor():
    return BiomechanicsExtractor()


@pytest.fixture
def calibrated_extractor():
    return BiomechanicsExtractor(CalibrationConfig(user_height_cm=180.0))


# ============================================================================
# Joint angles and rotation
# ============================================================================


class TestJointAngles:
    def test_straight_legs(self, extractor, make_frame):
        snapshot = extractor.analyze(make_frame(0.0))
        assert snapshot.right_knee_flexion == pytest.approx(180.0)
        assert snapshot.left_knee_flexion == pytest.approx(180.0)
        assert snapshot.left_elbow_angle is not None
        assert snapshot.right_elbow_angle is not None

    def test_bent_right_knee(self, extractor, make_frame):
        frame = make_frame(0.0, positions={PL.RIGHT_ANKLE: (0.55, 0.5, 0.0)})
        snapshot = extractor.analyze(frame)
        assert snapshot.right_knee_flexion == pytest.approx(90.0)
        assert snapshot.left_knee_flexion == pytest.approx(180.0)

    def test_visibility_at_threshold_leaves_angle_unset(self, extractor, make_frame):
        frame = make_frame(0.0, visibility={PL.RIGHT_KNEE: 0.5})
        snapshot = extractor.analyze(frame)
        assert snapshot.right_knee_flexion is None
        assert snapshot.left_knee_flexion is not None

    def test_degenerate_pose_gives_zero_not_nan(self, extractor, make_frame):
        collapsed = {idx: (0.1, 0.1, 0.1) for idx in range(33)}
        snapshot = extractor.analyze(make_frame(0.0, positions=collapsed))
        assert snapshot.right_knee_flexion == 0.0
        assert snapshot.right_elbow_angle == 0.0

    def test_hip_shoulder_separation(self, extractor, make_frame):
        frame = make_frame(0.0, positions={PL.RIGHT_SHOULDER: (0.2, 1.4, 0.4)})
        snapshot = extractor.analyze(frame)
        assert snapshot.shoulder_rotation == pytest.approx(45.0)
        assert snapshot.hip_rotation == pytest.approx(0.0)
        assert snapshot.hip_shoulder_separation == pytest.approx(45.0)

    def test_hidden_hip_unsets_rotation(self, extractor, make_frame):
        snapshot = extractor.analyze(make_frame(0.0, visibility={PL.LEFT_HIP: 0.1}))
        assert snapshot.hip_rotation is None
        assert snapshot.hip_shoulder_separation is None
        assert snapshot.shoulder_rotation is not None


# ============================================================================
# Heights, velocities and calibration
# ============================================================================


class TestHeights:
    def test_uncalibrated_uses_detector_units(self, extractor, make_frame):
        snapshot = extractor.analyze(make_frame(0.0))
        assert extractor.scale is None
        assert snapshot.right_wrist_height == pytest.approx(0.8)
        assert snapshot.contact_height == pytest.approx(0.8)

    def test_calibrated_height(self, calibrated_extractor, make_frame):
        snapshot = calibrated_extractor.analyze(make_frame(0.0))
        assert calibrated_extractor.scale == pytest.approx(1.08)
        assert snapshot.right_wrist_height == pytest.approx(0.8 * 1.08)

    def test_hidden_wrist(self, extractor, make_frame):
        snapshot = extractor.analyze(make_frame(0.0, visibility={PL.RIGHT_WRIST: 0.2}))
        assert snapshot.right_wrist_height is None
        assert snapshot.left_wrist_height is not None

    def test_require_calibration_without_height(self, make_frame):
        strict = BiomechanicsExtractor(require_calibration=True)
        strict.analyze(make_frame(0.0))
        snapshot = strict.analyze(make_frame(0.1))
        assert snapshot.right_wrist_height is None
        assert snapshot.right_wrist_velocity is None
        assert snapshot.is_valid


class TestVelocities:
    def test_first_frame_has_no_velocity(self, extractor, make_frame):
        snapshot = extractor.analyze(make_frame(0.0))
        assert snapshot.right_wrist_velocity is None
        assert snapshot.left_wrist_velocity is None

    def test_still_pose_has_zero_velocity(self, extractor, make_frame):
        extractor.analyze(make_frame(0.0))
        snapshot = extractor.analyze(make_frame(0.1))
        assert snapshot.right_wrist_velocity == pytest.approx(0.0, abs=1e-9)

    def test_velocity_from_filtered_positions(self, calibrated_extractor, make_frame):
        calibrated_extractor.analyze(make_frame(0.0))
        moved = make_frame(0.1, positions={PL.RIGHT_WRIST: (0.25, 1.8, 0.0)})
        snapshot = calibrated_extractor.analyze(moved)

        reference = Point3DFilter(1.0, 0.007, 1.0)
        start = reference.filter(0.25, 0.8, 0.0, 0.0)
        end = reference.filter(0.25, 1.8, 0.0, 0.1)
        expected = compute_distance_3d(start, end) * 1.08 / 0.1

        assert snapshot.right_wrist_velocity == pytest.approx(expected)
        # Smoothing lags the raw 1.0 unit jump
        assert snapshot.right_wrist_velocity < 1.0 * 1.08 / 0.1

    def test_duplicate_timestamp_skips_velocity(self, extractor, make_frame):
        extractor.analyze(make_frame(0.5))
        snapshot = extractor.analyze(make_frame(0.5))
        assert snapshot.right_wrist_velocity is None

    def test_time_regression_keeps_velocity_reference(self, make_frame):
        def wrist_at(t, y):
            return make_frame(t, positions={PL.RIGHT_WRIST: (0.25, y, 0.0)})

        clean = BiomechanicsExtractor()
        regressed = BiomechanicsExtractor()
        for extractor in (clean, regressed):
            extractor.analyze(wrist_at(0.0, 0.8))
            extractor.analyze(wrist_at(1.0, 1.8))

        stale = regressed.analyze(wrist_at(0.5, 0.3))
        assert stale.right_wrist_velocity is None
        assert regressed.previous_timestamp == 1.0

        expected = clean.analyze(wrist_at(1.1, 2.4)).right_wrist_velocity
        actual = regressed.analyze(wrist_at(1.1, 2.4)).right_wrist_velocity
        assert expected > 0.0
        assert actual == pytest.approx(expected)

    def test_hidden_wrist_skips_velocity(self, extractor, make_frame):
        extractor.analyze(make_frame(0.0))
        snapshot = extractor.analyze(make_frame(0.1, visibility={PL.RIGHT_WRIST: 0.0}))
        assert snapshot.right_wrist_velocity is None
        assert snapshot.left_wrist_velocity is not None


class TestCalibrationLifecycle:
    def test_calibrates_once_torso_visible(self, calibrated_extractor, make_frame):
        calibrated_extractor.analyze(make_frame(0.0, visibility={PL.LEFT_HIP: 0.1}))
        assert calibrated_extractor.scale is None

        calibrated_extractor.analyze(make_frame(0.1))
        assert calibrated_extractor.scale == pytest.approx(1.08)

    def test_scale_is_session_stable(self, calibrated_extractor, make_frame):
        calibrated_extractor.analyze(make_frame(0.0))
        stretched = {PL.LEFT_HIP: (-0.15, 0.4, 0.0), PL.RIGHT_HIP: (0.15, 0.4, 0.0)}
        calibrated_extractor.analyze(make_frame(0.1, positions=stretched))
        assert calibrated_extractor.scale == pytest.approx(1.08)

    def test_set_calibration_forces_recompute(self, calibrated_extractor, make_frame):
        calibrated_extractor.analyze(make_frame(0.0))
        calibrated_extractor.set_calibration(CalibrationConfig(user_height_cm=200.0))
        assert calibrated_extractor.scale is None

        calibrated_extractor.analyze(make_frame(0.1))
        assert calibrated_extractor.scale == pytest.approx(1.2)

    def test_reset_clears_state(self, calibrated_extractor, make_frame):
        calibrated_extractor.analyze(make_frame(0.0))
        calibrated_extractor.analyze(make_frame(0.1))
        calibrated_extractor.reset()

        assert calibrated_extractor.scale is None
        assert calibrated_extractor.previous_keypoints is None

        snapshot = calibrated_extractor.analyze(make_frame(5.0))
        assert snapshot.right_wrist_velocity is None
        assert calibrated_extractor.scale == pytest.approx(1.08)

    def test_nothing_visible_degrades_without_error(self, calibrated_extractor, make_frame):
        snapshot = calibrated_extractor.analyze(make_frame(0.0, default_visibility=0.0))
        assert not snapshot.is_valid
        assert calibrated_extractor.scale is None
