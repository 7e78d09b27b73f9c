"""
One Euro Filter for smooth, low-latency landmark filtering.

The One Euro Filter is designed for noisy signals from motion tracking.
It adapts its cutoff frequency based on signal speed:
- When signal is stable: applies more smoothing (low cutoff)
- When signal changes rapidly: allows more signal through (high cutoff)

Fast serve motion passes through with little lag while a player standing
still is heavily smoothed.

Reference: Casiez, Roussel, Vogel. "1€ Filter: A Simple Speed-based Low-pass Filter
for Noisy Input in Interactive Systems" (CHI 2012)
"""

import logging
import math

from ..config.detection import FILTER_PROFILES, DEFAULT_FILTER_PROFILE
from ..config.landmarks import NUM_LANDMARKS

logger = logging.getLogger(__name__)


def smoothing_factor(cutoff, dt):
    """
    Compute the exponential smoothing factor for a cutoff frequency.

    alpha = 1 / (1 + tau / dt), where tau = 1 / (2 * pi * cutoff)

    Args:
        cutoff: Cutoff frequency in Hz
        dt: Elapsed time in seconds (must be > 0)

    Returns:
        Blend factor in (0, 1)
    """
    tau = 1.0 / (2.0 * math.pi * cutoff)
    return 1.0 / (1.0 + tau / dt)


def exponential_smoothing(current, previous, alpha):
    """First-order low-pass step: alpha * current + (1 - alpha) * previous."""
    return alpha * current + (1.0 - alpha) * previous


class OneEuroFilter:
    """
    One Euro Filter for adaptive scalar smoothing.

    Parameters:
        min_cutoff: Minimum cutoff frequency in Hz (lower = more smoothing when stable)
        beta: Speed coefficient (higher = more responsive to fast changes)
        d_cutoff: Cutoff frequency for the derivative estimate

    Typical values:
        - For serve tracking: min_cutoff=1.0, beta=0.007
        - For smooth, slow movements: min_cutoff=0.3, beta=0.05
        - For responsive tracking: min_cutoff=1.0, beta=0.5
    """

    def __init__(self, min_cutoff=1.0, beta=0.007, d_cutoff=1.0):
        self.min_cutoff = min_cutoff
        self.beta = beta
        self.d_cutoff = d_cutoff

        self.prev_value = None
        self.prev_derivative = None
        self.prev_timestamp = None

    @property
    def initialized(self):
        return self.prev_timestamp is not None

    def filter(self, value, timestamp):
        """
        Filter a value.

        Args:
            value: The raw value to filter
            timestamp: Time in seconds, expected to be non-decreasing

        Returns:
            Filtered value. The first call returns the input unchanged. A call
            whose timestamp does not advance returns the previous output and
            leaves the state untouched.
        """
        if self.prev_timestamp is None:
            self.prev_value = value
            self.prev_derivative = 0.0
            self.prev_timestamp = timestamp
            return value

        dt = timestamp - self.prev_timestamp
        if dt <= 0:
            # Duplicate frame or time regression
            return self.prev_value

        # Estimate and smooth the derivative
        derivative = (value - self.prev_value) / dt
        smoothed_derivative = exponential_smoothing(
            derivative,
            self.prev_derivative,
            smoothing_factor(self.d_cutoff, dt)
        )

        # Adaptive cutoff based on signal speed
        cutoff = self.min_cutoff + self.beta * abs(smoothed_derivative)

        # Filter the signal
        filtered = exponential_smoothing(
            value,
            self.prev_value,
            smoothing_factor(cutoff, dt)
        )

        self.prev_value = filtered
        self.prev_derivative = smoothed_derivative
        self.prev_timestamp = timestamp
        return filtered

    def reset(self):
        """Reset filter state."""
        self.prev_value = None
        self.prev_derivative = None
        self.prev_timestamp = None


class Point3DFilter:
    """Three independent One Euro filters (x, y, z) sharing one configuration."""

    def __init__(self, min_cutoff=1.0, beta=0.007, d_cutoff=1.0):
        self.x_filter = OneEuroFilter(min_cutoff, beta, d_cutoff)
        self.y_filter = OneEuroFilter(min_cutoff, beta, d_cutoff)
        self.z_filter = OneEuroFilter(min_cutoff, beta, d_cutoff)

    def filter(self, x, y, z, timestamp):
        """Filter a 3D point, returns (x, y, z)."""
        return (
            self.x_filter.filter(x, timestamp),
            self.y_filter.filter(y, timestamp),
            self.z_filter.filter(z, timestamp),
        )

    def reset(self):
        self.x_filter.reset()
        self.y_filter.reset()
        self.z_filter.reset()


class LandmarkFilter:
    """
    One Euro Filter applied to a full pose.

    Holds one Point3DFilter per landmark index. Each filter bank belongs to a
    single extractor/session and is never shared.
    """

    def __init__(self, min_cutoff=1.0, beta=0.007, d_cutoff=1.0,
                 num_landmarks=NUM_LANDMARKS):
        """
        Initialize landmark filter.

        Args:
            min_cutoff: Smoothing when stable
            beta: Responsiveness to fast movement
            d_cutoff: Derivative cutoff
            num_landmarks: Number of tracked landmarks
        """
        self.min_cutoff = min_cutoff
        self.beta = beta
        self.d_cutoff = d_cutoff

        self.filters = [
            Point3DFilter(min_cutoff, beta, d_cutoff)
            for _ in range(num_landmarks)
        ]

    def __len__(self):
        return len(self.filters)

    def filter_landmark(self, landmark_idx, x, y, z, timestamp):
        """
        Filter a single landmark's coordinates.

        Returns:
            Tuple of filtered (x, y, z)
        """
        return self.filters[landmark_idx].filter(x, y, z, timestamp)

    def filter_landmarks(self, keypoints, timestamp):
        """
        Filter every keypoint of a frame.

        Args:
            keypoints: Sequence of Keypoint, positional indices
            timestamp: Frame timestamp in seconds

        Returns:
            List of Keypoint with filtered positions. Visibility and presence
            are passed through unchanged.
        """
        return [
            kp.with_position(*self.filter_landmark(idx, kp.x, kp.y, kp.z, timestamp))
            for idx, kp in enumerate(keypoints)
        ]

    def reset(self):
        """Reset all filters."""
        for f in self.filters:
            f.reset()


# Pre-configured filter profiles
def create_landmark_filter(profile=DEFAULT_FILTER_PROFILE):
    """Create a landmark filter from a named profile in FILTER_PROFILES."""
    if profile not in FILTER_PROFILES:
        raise ValueError(
            f"Unknown filter profile: {profile}. Use one of {sorted(FILTER_PROFILES)}"
        )
    params = FILTER_PROFILES[profile]
    logger.debug("Creating '%s' landmark filter: %s", profile, params)
    return LandmarkFilter(**params)


def create_smooth_filter():
    """Create a filter optimized for smooth, stable output."""
    return create_landmark_filter('smooth')


def create_responsive_filter():
    """Create a filter optimized for responsive tracking."""
    return create_landmark_filter('responsive')


def create_balanced_filter():
    """Create a balanced filter for general pose tracking."""
    return create_landmark_filter('balanced')
