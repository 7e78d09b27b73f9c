"""
Per-frame biomechanics extraction.

Turns a raw PoseFrame into a MetricsSnapshot: smooth all landmarks, calibrate
once per session, then derive joint angles, torso rotation, wrist heights
and wrist velocities. Low-visibility landmarks leave the affected fields as
None; extraction itself never fails on data.
"""
import logging

from ..config.detection import DEFAULT_FILTER_PROFILE, DEFAULT_VISIBILITY_THRESHOLD
from ..config.landmarks import PoseLandmarks, KNEE_JOINTS, ELBOW_JOINTS
from .calibration import CalibrationConfig, CalibrationState
from .geometry import (
    check_visibility,
    compute_angle_3d,
    compute_distance_3d,
    compute_line_rotation,
    extract_point_3d,
)
from .models import MetricsSnapshot
from .one_euro_filter import create_landmark_filter

logger = logging.getLogger(__name__)


class BiomechanicsExtractor:
    """
    Stateful extractor for one analysis session.

    Owns the landmark filter bank, the previous-frame cache used for
    velocities, and the calibration scale. Not safe to share between
    sessions or threads.
    """

    def __init__(self, calibration=None, filter_profile=DEFAULT_FILTER_PROFILE,
                 visibility_threshold=DEFAULT_VISIBILITY_THRESHOLD,
                 require_calibration=False):
        """
        Args:
            calibration: CalibrationConfig with the player's height (optional)
            filter_profile: Name of a FILTER_PROFILES entry
            visibility_threshold: Landmarks must be strictly above this
            require_calibration: If True, heights and velocities stay None
                until a scale is computed. Otherwise detector units are
                reported (scale 1.0).
        """
        self.calibration = calibration or CalibrationConfig()
        self.visibility_threshold = visibility_threshold
        self.require_calibration = require_calibration

        self.landmark_filter = create_landmark_filter(filter_profile)
        self.calibration_state = CalibrationState()

        self.previous_keypoints = None
        self.previous_timestamp = None

    @property
    def scale(self):
        """Calibrated meters per detector unit, or None."""
        return self.calibration_state.scale

    def set_calibration(self, calibration):
        """Replace the calibration input; the scale is recomputed on the next eligible frame."""
        self.calibration = calibration or CalibrationConfig()
        self.calibration_state.clear()
        logger.info("Calibration input set to %.1f cm", self.calibration.user_height_cm)

    def analyze(self, frame):
        """
        Extract metrics from one frame.

        Args:
            frame: PoseFrame

        Returns:
            MetricsSnapshot for the frame's timestamp
        """
        timestamp = frame.timestamp
        keypoints = self.landmark_filter.filter_landmarks(frame.keypoints, timestamp)

        if not self.calibration_state.is_calibrated and self.calibration.is_calibrated:
            self.calibration_state.calibrate(
                keypoints,
                self.calibration.user_height_meters,
                self.visibility_threshold
            )

        snapshot = MetricsSnapshot(
            timestamp=timestamp,
            left_knee_flexion=self._joint_angle(keypoints, KNEE_JOINTS['left']),
            right_knee_flexion=self._joint_angle(keypoints, KNEE_JOINTS['right']),
            left_elbow_angle=self._joint_angle(keypoints, ELBOW_JOINTS['left']),
            right_elbow_angle=self._joint_angle(keypoints, ELBOW_JOINTS['right']),
            shoulder_rotation=self._line_rotation(
                keypoints, PoseLandmarks.LEFT_SHOULDER, PoseLandmarks.RIGHT_SHOULDER
            ),
            hip_rotation=self._line_rotation(
                keypoints, PoseLandmarks.LEFT_HIP, PoseLandmarks.RIGHT_HIP
            ),
            left_wrist_height=self._height(keypoints, PoseLandmarks.LEFT_WRIST),
            right_wrist_height=self._height(keypoints, PoseLandmarks.RIGHT_WRIST),
            right_wrist_velocity=self._velocity(keypoints, PoseLandmarks.RIGHT_WRIST, timestamp),
            left_wrist_velocity=self._velocity(keypoints, PoseLandmarks.LEFT_WRIST, timestamp),
        )

        # A stale frame must not become the velocity reference
        if self.previous_timestamp is None or timestamp > self.previous_timestamp:
            self.previous_keypoints = keypoints
            self.previous_timestamp = timestamp
        else:
            logger.debug("Out-of-order frame at %.3fs ignored as velocity reference", timestamp)
        return snapshot

    def reset(self):
        """Clear filter state, previous frame and calibration scale."""
        self.landmark_filter.reset()
        self.previous_keypoints = None
        self.previous_timestamp = None
        self.calibration_state.clear()

    # ========================================
    # Metric helpers
    # ========================================

    def _visible(self, keypoints, indices):
        return check_visibility(keypoints, indices, self.visibility_threshold)

    def _joint_angle(self, keypoints, joint):
        if not self._visible(keypoints, joint):
            return None
        proximal, vertex, distal = joint
        return compute_angle_3d(
            extract_point_3d(keypoints[proximal]),
            extract_point_3d(keypoints[vertex]),
            extract_point_3d(keypoints[distal])
        )

    def _line_rotation(self, keypoints, left_idx, right_idx):
        if not self._visible(keypoints, [left_idx, right_idx]):
            return None
        return compute_line_rotation(
            extract_point_3d(keypoints[left_idx]),
            extract_point_3d(keypoints[right_idx])
        )

    def _effective_scale(self):
        if self.calibration_state.scale is not None:
            return self.calibration_state.scale
        if self.require_calibration:
            return None
        return 1.0

    def _height(self, keypoints, idx):
        scale = self._effective_scale()
        if scale is None or not self._visible(keypoints, [idx]):
            return None
        return keypoints[idx].y * scale

    def _velocity(self, keypoints, idx, timestamp):
        if self.previous_keypoints is None or not self._visible(keypoints, [idx]):
            return None

        dt = timestamp - self.previous_timestamp
        if dt <= 0:
            logger.debug("Velocity skipped for landmark %d: dt=%.4f", idx, dt)
            return None

        scale = self._effective_scale()
        if scale is None:
            return None

        distance = compute_distance_3d(
            extract_point_3d(keypoints[idx]),
            extract_point_3d(self.previous_keypoints[idx])
        )
        return distance * scale / dt
