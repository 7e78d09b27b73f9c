"""
Detection and filtering configuration

Phase-transition thresholds for the serve state machine and One Euro filter
profiles for landmark smoothing. All values are empirically chosen for a
vertical overhead strike and are meant to be tuned, not treated as fixed law.
"""
from dataclasses import dataclass

# Visibility threshold for landmark confidence (strictly greater passes)
DEFAULT_VISIBILITY_THRESHOLD = 0.5


@dataclass
class PhaseThresholds:
    """Tunable thresholds for ServePhaseDetector."""

    # Preparation -> Loading
    knee_flexion_decrease_threshold: float = 10.0  # degrees over the lookback
    preparation_min_duration: float = 0.5          # seconds

    # Loading -> Contact
    wrist_velocity_threshold: float = 12.0         # m/s
    wrist_height_threshold: float = 2.0            # m
    near_peak_fraction: float = 0.95               # within 5% of recent max height

    # Contact -> Follow Through
    contact_min_duration: float = 0.1              # seconds
    velocity_decay_threshold: float = 0.7          # fraction of peak velocity

    # Follow Through -> Preparation
    movement_still_threshold: float = 1.0          # m/s

    # General
    window_size: int = 10                          # snapshots kept in the sliding window
    lookback: int = 5                              # recent samples used by trend checks
    min_window_samples: int = 3                    # no transitions until the window holds this many
    min_trend_samples: int = 3                     # non-null samples needed inside the lookback

    def __post_init__(self):
        if self.window_size < self.min_window_samples:
            raise ValueError(
                f"window_size must be >= {self.min_window_samples}, got {self.window_size}"
            )
        if self.lookback < self.min_trend_samples:
            raise ValueError(
                f"lookback must be >= {self.min_trend_samples}, got {self.lookback}"
            )
        if not 0.0 < self.velocity_decay_threshold <= 1.0:
            raise ValueError(
                f"velocity_decay_threshold must be in (0, 1], got {self.velocity_decay_threshold}"
            )
        if not 0.0 < self.near_peak_fraction <= 1.0:
            raise ValueError(
                f"near_peak_fraction must be in (0, 1], got {self.near_peak_fraction}"
            )


# ========================================
# ONE EURO FILTER PROFILES
# ========================================
# min_cutoff: smoothing floor in Hz (lower = more smoothing, more lag)
# beta: responsiveness to speed
# d_cutoff: cutoff applied to the derivative estimate

FILTER_PROFILES = {
    # Default for serve tracking: heavy smoothing at rest, passes fast swings
    'serve': {'min_cutoff': 1.0, 'beta': 0.007, 'd_cutoff': 1.0},
    'smooth': {'min_cutoff': 0.3, 'beta': 0.05, 'd_cutoff': 1.0},
    'balanced': {'min_cutoff': 0.5, 'beta': 0.1, 'd_cutoff': 1.0},
    'responsive': {'min_cutoff': 1.0, 'beta': 0.5, 'd_cutoff': 1.0},
}

DEFAULT_FILTER_PROFILE = 'serve'
