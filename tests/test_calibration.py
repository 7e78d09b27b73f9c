"""Tests for torso-based scale calibration."""

import logging

import pytest

from serve_analysis.config.landmarks import PoseLandmarks as PL
from serve_analysis.core.calibration import (
    CalibrationConfig,
    CalibrationState,
    compute_scale,
    measure_torso_length,
)


class TestComputeScale:
    def test_round_trip(self):
        torso, height = 0.42, 1.83
        scale = compute_scale(torso, height)
        assert torso * scale == pytest.approx(height * 0.30)

    def test_known_value(self):
        assert compute_scale(0.5, 1.8) == pytest.approx(1.08)

    @pytest.mark.parametrize("torso", [0.0, -0.3, None])
    def test_non_positive_torso_skips(self, torso):
        assert compute_scale(torso, 1.8) is None

    @pytest.mark.parametrize("height", [0.0, None])
    def test_missing_height_skips(self, height):
        assert compute_scale(0.5, height) is None


class TestMeasureTorsoLength:
    def test_standing_pose(self, make_keypoints):
        assert measure_torso_length(make_keypoints()) == pytest.approx(0.5)

    @pytest.mark.parametrize("hidden", [PL.LEFT_SHOULDER, PL.RIGHT_SHOULDER, PL.LEFT_HIP, PL.RIGHT_HIP])
    def test_needs_all_four_torso_landmarks(self, make_keypoints, hidden):
        keypoints = make_keypoints(visibility={hidden: 0.2})
        assert measure_torso_length(keypoints) is None


class TestCalibrationConfig:
    def test_defaults_to_uncalibrated(self):
        config = CalibrationConfig()
        assert not config.is_calibrated
        assert config.user_height_meters == 0.0

    def test_meters(self):
        config = CalibrationConfig(user_height_cm=182.0)
        assert config.is_calibrated
        assert config.user_height_meters == pytest.approx(1.82)

    def test_negative_height_raises(self):
        with pytest.raises(ValueError, match="user_height_cm"):
            CalibrationConfig(user_height_cm=-5.0)

    def test_implausible_height_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="serve_analysis.core.calibration"):
            config = CalibrationConfig(user_height_cm=20.0)
        assert config.is_calibrated
        assert "plausible" in caplog.text

    def test_dict_round_trip(self):
        config = CalibrationConfig(user_height_cm=175.0)
        assert CalibrationConfig.from_dict(config.to_dict()) == config


class TestCalibrationState:
    def test_calibrate_from_visible_torso(self, make_keypoints):
        state = CalibrationState()
        assert state.calibrate(make_keypoints(), 1.8)
        assert state.is_calibrated
        assert state.scale == pytest.approx(1.08)
        assert state.user_height_m == 1.8

    def test_hidden_torso_leaves_state_unset(self, make_keypoints):
        state = CalibrationState()
        assert not state.calibrate(make_keypoints(visibility={PL.LEFT_HIP: 0.1}), 1.8)
        assert state.scale is None

    def test_clear(self, make_keypoints):
        state = CalibrationState()
        state.calibrate(make_keypoints(), 1.8)
        state.clear()
        assert not state.is_calibrated
        assert state.user_height_m is None
