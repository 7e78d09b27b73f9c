"""
Configuration module for serve analysis.

Contains:
- landmarks: Fixed 33-landmark pose vocabulary and joint triplets
- detection: Phase-transition thresholds and filter profiles
- serve_guidelines: Elite reference bands, feedback text and score tables
"""

from .landmarks import (
    NUM_LANDMARKS,
    PoseLandmarks,
    LANDMARK_NAMES,
    KNEE_JOINTS,
    ELBOW_JOINTS,
    TORSO_LANDMARKS,
)

from .detection import (
    DEFAULT_VISIBILITY_THRESHOLD,
    PhaseThresholds,
    FILTER_PROFILES,
    DEFAULT_FILTER_PROFILE,
)

from .serve_guidelines import (
    ANTHROPOMETRIC_RATIOS,
    PLAUSIBLE_HEIGHT_CM,
    ELITE_REFERENCE,
    FEEDBACK_BANDS,
    OVERALL_FEEDBACK_BANDS,
    SCORE_BANDS,
    LOADING_METRICS,
    CONTACT_METRICS,
    DEFAULT_FEEDBACK_METRICS,
)

__all__ = [
    # Landmarks
    'NUM_LANDMARKS',
    'PoseLandmarks',
    'LANDMARK_NAMES',
    'KNEE_JOINTS',
    'ELBOW_JOINTS',
    'TORSO_LANDMARKS',
    # Detection
    'DEFAULT_VISIBILITY_THRESHOLD',
    'PhaseThresholds',
    'FILTER_PROFILES',
    'DEFAULT_FILTER_PROFILE',
    # Guidelines
    'ANTHROPOMETRIC_RATIOS',
    'PLAUSIBLE_HEIGHT_CM',
    'ELITE_REFERENCE',
    'FEEDBACK_BANDS',
    'OVERALL_FEEDBACK_BANDS',
    'SCORE_BANDS',
    'LOADING_METRICS',
    'CONTACT_METRICS',
    'DEFAULT_FEEDBACK_METRICS',
]
