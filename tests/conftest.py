"""Shared fixtures for serve_analysis tests.

Provides:
- A standing reference pose (detector units, y up) as PoseFrame builders
- MetricsSnapshot builders
- The scripted snapshot sequence of one complete serve cycle
"""

import pytest

from serve_analysis.config.landmarks import NUM_LANDMARKS, PoseLandmarks as PL
from serve_analysis.core.models import Keypoint, MetricsSnapshot, PoseFrame

# ============================================================================
# Reference pose
# ============================================================================

# Upright, arms down, legs straight. Torso (shoulder mid to hip mid) = 0.5.
STANDING_POSE = {
    PL.LEFT_SHOULDER: (-0.2, 1.4, 0.0),
    PL.RIGHT_SHOULDER: (0.2, 1.4, 0.0),
    PL.LEFT_ELBOW: (-0.25, 1.1, 0.0),
    PL.RIGHT_ELBOW: (0.25, 1.1, 0.0),
    PL.LEFT_WRIST: (-0.25, 0.8, 0.0),
    PL.RIGHT_WRIST: (0.25, 0.8, 0.0),
    PL.LEFT_HIP: (-0.15, 0.9, 0.0),
    PL.RIGHT_HIP: (0.15, 0.9, 0.0),
    PL.LEFT_KNEE: (-0.15, 0.5, 0.0),
    PL.RIGHT_KNEE: (0.15, 0.5, 0.0),
    PL.LEFT_ANKLE: (-0.15, 0.1, 0.0),
    PL.RIGHT_ANKLE: (0.15, 0.1, 0.0),
}
DEFAULT_POSITION = (0.0, 1.6, 0.0)


def build_keypoints(positions=None, visibility=None, default_visibility=0.9):
    """33 keypoints from the standing pose with optional overrides.

    Args:
        positions: {index: (x, y, z)} overriding the standing pose
        visibility: {index: score} overriding default_visibility
    """
    positions = {**STANDING_POSE, **(positions or {})}
    visibility = visibility or {}
    keypoints = []
    for idx in range(NUM_LANDMARKS):
        x, y, z = positions.get(idx, DEFAULT_POSITION)
        keypoints.append(Keypoint(idx, x, y, z, visibility.get(idx, default_visibility), 1.0))
    return keypoints


def build_frame(timestamp, positions=None, visibility=None, default_visibility=0.9):
    return PoseFrame(
        tuple(build_keypoints(positions, visibility, default_visibility)),
        timestamp
    )


@pytest.fixture
def make_frame():
    """Factory: make_frame(timestamp, positions=None, visibility=None, default_visibility=0.9)."""
    return build_frame


@pytest.fixture
def make_keypoints():
    return build_keypoints


# ============================================================================
# Snapshots
# ============================================================================


def build_snapshot(timestamp, knee=None, velocity=None, height=None, **fields):
    """Snapshot with the fields the phase detector reads named for short."""
    return MetricsSnapshot(
        timestamp=timestamp,
        right_knee_flexion=knee,
        right_wrist_velocity=velocity,
        right_wrist_height=height,
        **fields
    )


@pytest.fixture
def make_snapshot():
    """Factory: make_snapshot(timestamp, knee=None, velocity=None, height=None, **fields)."""
    return build_snapshot


SERVE_CYCLE = [
    # Preparation, knee bending 55 -> 35 deg (Loading at 0.6s)
    (0.0, {'knee': 55.0}),
    (0.3, {'knee': 45.0}),
    (0.6, {'knee': 35.0}),
    # Swing: wrist accelerates and rises (Contact at 1.0s)
    (0.7, {'velocity': 5.0, 'height': 1.0}),
    (0.8, {'velocity': 10.0, 'height': 1.5}),
    (0.9, {'velocity': 15.0, 'height': 1.9}),
    (1.0, {'velocity': 18.0, 'height': 2.1}),
    # Decay while dropping (Follow Through at 1.2s)
    (1.1, {'velocity': 9.0, 'height': 1.7}),
    (1.2, {'velocity': 5.0, 'height': 1.2}),
    # Settled (Preparation at 1.3s)
    (1.3, {'velocity': 0.5, 'height': 1.0}),
]


@pytest.fixture
def serve_cycle():
    """Snapshots of one complete serve cycle, 4 transitions expected."""
    return [build_snapshot(t, **fields) for t, fields in SERVE_CYCLE]


@pytest.fixture
def serve_cycle_with_offset():
    """Factory: serve_cycle_with_offset(offset) shifts the cycle in time."""
    def _build(offset):
        return [build_snapshot(t + offset, **fields) for t, fields in SERVE_CYCLE]
    return _build
