"""
Scale calibration from body proportions.

The pose detector reports positions in its own units. Given the player's
standing height, the measured torso (shoulder midpoint to hip midpoint) is
matched against the anthropometric torso-to-height ratio to get a
units-to-meters factor.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ..config.detection import DEFAULT_VISIBILITY_THRESHOLD
from ..config.landmarks import PoseLandmarks, TORSO_LANDMARKS
from ..config.serve_guidelines import ANTHROPOMETRIC_RATIOS, PLAUSIBLE_HEIGHT_CM
from .geometry import check_visibility, compute_distance_3d, extract_point_3d, midpoint_3d

logger = logging.getLogger(__name__)


def compute_scale(torso_length, user_height_m):
    """
    Meters per detector unit.

    Args:
        torso_length: Measured torso length in detector units
        user_height_m: Player standing height in meters

    Returns:
        (user_height_m * 0.30) / torso_length, or None when either input
        is not positive
    """
    if torso_length is None or torso_length <= 0:
        return None
    if user_height_m is None or user_height_m <= 0:
        return None
    expected_torso = user_height_m * ANTHROPOMETRIC_RATIOS['torso_to_height']
    return expected_torso / torso_length


def measure_torso_length(keypoints, threshold=DEFAULT_VISIBILITY_THRESHOLD):
    """
    Distance between shoulder midpoint and hip midpoint.

    Returns None unless all four torso landmarks are visible.
    """
    if not check_visibility(keypoints, TORSO_LANDMARKS, threshold):
        return None

    mid_shoulder = midpoint_3d(
        extract_point_3d(keypoints[PoseLandmarks.LEFT_SHOULDER]),
        extract_point_3d(keypoints[PoseLandmarks.RIGHT_SHOULDER])
    )
    mid_hip = midpoint_3d(
        extract_point_3d(keypoints[PoseLandmarks.LEFT_HIP]),
        extract_point_3d(keypoints[PoseLandmarks.RIGHT_HIP])
    )
    return compute_distance_3d(mid_shoulder, mid_hip)


@dataclass(frozen=True)
class CalibrationConfig:
    """User-supplied calibration input. A height of 0 means not calibrated."""
    user_height_cm: float = 0.0

    def __post_init__(self):
        if self.user_height_cm < 0:
            raise ValueError(f"user_height_cm must be >= 0, got {self.user_height_cm}")
        low, high = PLAUSIBLE_HEIGHT_CM
        if self.user_height_cm > 0 and not low <= self.user_height_cm <= high:
            logger.warning(
                "User height %.1f cm is outside the plausible range %.0f-%.0f cm",
                self.user_height_cm, low, high
            )

    @property
    def user_height_meters(self) -> float:
        return self.user_height_cm / 100.0

    @property
    def is_calibrated(self) -> bool:
        return self.user_height_cm > 0

    def to_dict(self) -> dict:
        return {'user_height_cm': self.user_height_cm}

    @classmethod
    def from_dict(cls, data):
        return cls(user_height_cm=float(data.get('user_height_cm', 0.0)))


class CalibrationState:
    """
    Session-stable scale factor owned by one extractor.

    Computed the first time the torso is measurable and kept until cleared.
    """

    def __init__(self):
        self.scale: Optional[float] = None
        self.user_height_m: Optional[float] = None

    @property
    def is_calibrated(self):
        return self.scale is not None

    def calibrate(self, keypoints, user_height_m, threshold=DEFAULT_VISIBILITY_THRESHOLD):
        """
        Try to compute the scale from this frame.

        Returns:
            True if a scale was computed
        """
        torso_length = measure_torso_length(keypoints, threshold)
        if torso_length is None:
            logger.debug("Calibration skipped: torso landmarks not visible")
            return False

        scale = compute_scale(torso_length, user_height_m)
        if scale is None:
            logger.debug("Calibration skipped: torso length %.4f", torso_length)
            return False

        self.scale = scale
        self.user_height_m = user_height_m
        logger.info(
            "Calibrated scale %.4f m/unit (torso %.4f units, height %.2f m)",
            scale, torso_length, user_height_m
        )
        return True

    def clear(self):
        self.scale = None
        self.user_height_m = None
