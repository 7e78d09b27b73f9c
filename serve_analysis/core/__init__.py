"""
Core module for tennis serve analysis.

Contains:
- one_euro_filter: Adaptive signal smoothing for landmarks
- geometry: 3D angles, distances and line rotations
- models: Frames, snapshots, phase events, feedback and quality records
- calibration: Torso-based scale calibration
- biomechanics: Per-frame metric extraction
- phase_detector: Serve phase state machine
- evaluators: Table-driven severity classification and quality scoring
- feedback: Coaching feedback generation
- temporal_tracker: Recurring-issue tracking across serves
"""

from .one_euro_filter import (
    OneEuroFilter,
    Point3DFilter,
    LandmarkFilter,
    smoothing_factor,
    exponential_smoothing,
    create_landmark_filter,
    create_smooth_filter,
    create_responsive_filter,
    create_balanced_filter
)

from .geometry import (
    compute_distance_3d,
    compute_angle_3d,
    compute_line_rotation,
    midpoint_3d,
    check_visibility,
    extract_point_3d
)

from .models import (
    Keypoint,
    PoseFrame,
    MetricsSnapshot,
    ServePhase,
    PhaseEvent,
    FeedbackSeverity,
    FeedbackCategory,
    FeedbackItem,
    QualityAnalysis
)

from .calibration import (
    compute_scale,
    measure_torso_length,
    CalibrationConfig,
    CalibrationState
)

from .biomechanics import BiomechanicsExtractor

from .evaluators import (
    METRIC_ACCESSORS,
    get_metric_value,
    value_in_range,
    match_tier,
    classify_severity,
    score_value,
    QualityEvaluator
)

from .phase_detector import ServePhaseDetector

from .feedback import FeedbackGenerator

from .temporal_tracker import TemporalTracker

__all__ = [
    # Filtering
    'OneEuroFilter',
    'Point3DFilter',
    'LandmarkFilter',
    'smoothing_factor',
    'exponential_smoothing',
    'create_landmark_filter',
    'create_smooth_filter',
    'create_responsive_filter',
    'create_balanced_filter',
    # Geometry
    'compute_distance_3d',
    'compute_angle_3d',
    'compute_line_rotation',
    'midpoint_3d',
    'check_visibility',
    'extract_point_3d',
    # Models
    'Keypoint',
    'PoseFrame',
    'MetricsSnapshot',
    'ServePhase',
    'PhaseEvent',
    'FeedbackSeverity',
    'FeedbackCategory',
    'FeedbackItem',
    'QualityAnalysis',
    # Calibration
    'compute_scale',
    'measure_torso_length',
    'CalibrationConfig',
    'CalibrationState',
    # Extraction
    'BiomechanicsExtractor',
    # Evaluation
    'METRIC_ACCESSORS',
    'get_metric_value',
    'value_in_range',
    'match_tier',
    'classify_severity',
    'score_value',
    'QualityEvaluator',
    # Phase detection
    'ServePhaseDetector',
    # Feedback
    'FeedbackGenerator',
    # Temporal tracking
    'TemporalTracker',
]
