"""
3D geometry for serve metrics.

All helpers work on plain (x, y, z) tuples in the detector's 3D space. Angles
do not depend on camera placement; distances are in detector units until
scaled by the calibration factor.
"""
import math

from ..config.detection import DEFAULT_VISIBILITY_THRESHOLD

SQRT = math.sqrt
ACOS = math.acos
ATAN2 = math.atan2
DEGREES = math.degrees

# Vectors shorter than this are treated as degenerate
EPSILON = 1e-6


def _vector(origin, target):
    return (target[0] - origin[0], target[1] - origin[1], target[2] - origin[2])


def _norm(v):
    return SQRT(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def compute_distance_3d(point_a, point_b):
    """Straight-line distance between two (x, y, z) points."""
    return _norm(_vector(point_a, point_b))


def compute_angle_3d(point_a, point_b, point_c):
    """
    Angle ABC in degrees, with point_b as the joint vertex.

    Args:
        point_a: (x, y, z) proximal landmark
        point_b: (x, y, z) joint vertex
        point_c: (x, y, z) distal landmark

    Returns:
        Angle in degrees (0-180). Returns 0.0 when either bone vector has
        zero length, never NaN.
    """
    to_a = _vector(point_b, point_a)
    to_c = _vector(point_b, point_c)

    len_a = _norm(to_a)
    len_c = _norm(to_c)
    if len_a < EPSILON or len_c < EPSILON:
        return 0.0

    dot = to_a[0] * to_c[0] + to_a[1] * to_c[1] + to_a[2] * to_c[2]
    # Rounding can push the cosine just outside [-1, 1]
    cosine = max(-1.0, min(1.0, dot / (len_a * len_c)))
    return DEGREES(ACOS(cosine))


def compute_line_rotation(point_a, point_b):
    """
    Rotation of the line A->B in the horizontal (x-z) plane.

    Used for shoulder-line and hip-line rotation.

    Args:
        point_a: (x, y, z) first point (left side)
        point_b: (x, y, z) second point (right side)

    Returns:
        atan2(dz, dx) in degrees, range (-180, 180]
    """
    dx = point_b[0] - point_a[0]
    dz = point_b[2] - point_a[2]
    return DEGREES(ATAN2(dz, dx))


def midpoint_3d(point_a, point_b):
    """Midpoint of two (x, y, z) points."""
    return (
        (point_a[0] + point_b[0]) / 2,
        (point_a[1] + point_b[1]) / 2,
        (point_a[2] + point_b[2]) / 2,
    )


def check_visibility(keypoints, indices, threshold=DEFAULT_VISIBILITY_THRESHOLD):
    """
    True when every listed landmark clears the visibility threshold.

    Args:
        keypoints: Sequence of Keypoints (anything with .visibility)
        indices: Landmark indices that must all be visible
        threshold: Visibility must be strictly greater than this
    """
    return all(keypoints[idx].visibility > threshold for idx in indices)


def extract_point_3d(keypoint):
    """(x, y, z) tuple of any object with x, y, z attributes."""
    return (keypoint.x, keypoint.y, keypoint.z)
