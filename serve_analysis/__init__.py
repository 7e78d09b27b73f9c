"""
Tennis serve biomechanics analysis.

Feed PoseFrames (33 full-body landmarks per frame) into a
ServeAnalysisPipeline to get per-frame metrics, serve phase transitions and
coaching feedback for each completed serve.
"""

__version__ = "0.1.0"

from .core import (
    BiomechanicsExtractor,
    CalibrationConfig,
    FeedbackGenerator,
    FeedbackItem,
    Keypoint,
    MetricsSnapshot,
    PhaseEvent,
    PoseFrame,
    QualityAnalysis,
    QualityEvaluator,
    ServePhase,
    ServePhaseDetector,
)
from .config import PhaseThresholds
from .pipeline import FrameResult, ServeAnalysisPipeline

__all__ = [
    '__version__',
    'BiomechanicsExtractor',
    'CalibrationConfig',
    'FeedbackGenerator',
    'FeedbackItem',
    'Keypoint',
    'MetricsSnapshot',
    'PhaseEvent',
    'PoseFrame',
    'QualityAnalysis',
    'QualityEvaluator',
    'ServePhase',
    'ServePhaseDetector',
    'PhaseThresholds',
    'FrameResult',
    'ServeAnalysisPipeline',
]
