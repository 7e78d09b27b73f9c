"""
Per-session analysis pipeline.

Wires the extractor, phase detector, feedback generator and serve tracker
together for a host that feeds one PoseFrame at a time. Feedback for a serve
is produced when the detector reports the transition into follow-through.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .config.detection import DEFAULT_FILTER_PROFILE
from .config.serve_guidelines import LOADING_METRICS, CONTACT_METRICS
from .core.biomechanics import BiomechanicsExtractor
from .core.calibration import CalibrationConfig
from .core.evaluators import QualityEvaluator, classify_severity, get_metric_value
from .core.feedback import FeedbackGenerator
from .core.models import (
    FeedbackItem,
    MetricsSnapshot,
    PhaseEvent,
    QualityAnalysis,
    ServePhase,
)
from .core.phase_detector import ServePhaseDetector
from .core.temporal_tracker import TemporalTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameResult:
    """Everything the pipeline produced for one frame."""
    metrics: MetricsSnapshot
    phase: ServePhase
    event: Optional[PhaseEvent] = None
    feedback: Tuple[FeedbackItem, ...] = ()
    serve_analysis: Optional[QualityAnalysis] = None

    def to_dict(self) -> dict:
        return {
            'metrics': self.metrics.to_dict(),
            'phase': self.phase.value,
            'event': self.event.to_dict() if self.event else None,
            'feedback': [item.to_dict() for item in self.feedback],
            'serve_analysis': self.serve_analysis.to_dict() if self.serve_analysis else None,
        }


class ServeAnalysisPipeline:
    """
    One analysis session.

    Not thread-safe; frames must arrive in non-decreasing timestamp order.
    """

    def __init__(self, calibration=None, thresholds=None,
                 filter_profile=DEFAULT_FILTER_PROFILE, feedback_categories=None,
                 collector=None, performance_monitor=None, tracker_window=10):
        """
        Args:
            calibration: CalibrationConfig with the player's height
            thresholds: PhaseThresholds for the detector
            filter_profile: Landmark filter profile name
            feedback_categories: Metrics to give feedback on (core four if None)
            collector: Optional SessionCollector recording the session
            performance_monitor: Optional PerformanceMonitor timing each frame
            tracker_window: Number of serves kept for recurring-issue tracking
        """
        self.evaluator = QualityEvaluator()
        self.extractor = BiomechanicsExtractor(calibration, filter_profile=filter_profile)
        self.detector = ServePhaseDetector(thresholds, evaluator=self.evaluator)
        self.feedback_generator = FeedbackGenerator(feedback_categories)
        self.tracker = TemporalTracker(window_size=tracker_window)
        self.collector = collector
        self.performance_monitor = performance_monitor

        self.detector.add_listener(self._on_phase_event)
        self._init_session_state()

    def _init_session_state(self):
        self.feedback = []
        self.serves_detected = 0
        self.last_serve_analysis = None
        self._cycle_events = {}
        self._frame_feedback = []
        self._frame_analysis = None

    # ========================================
    # Frame processing
    # ========================================

    def process_frame(self, frame):
        """
        Run one PoseFrame through the whole chain.

        Returns:
            FrameResult
        """
        monitor = self.performance_monitor
        start = monitor.inference_start() if monitor else None

        self._frame_feedback = []
        self._frame_analysis = None

        metrics = self.extractor.analyze(frame)
        event = self.detector.process_metrics(metrics)

        if self.collector is not None:
            self.collector.add_frame(metrics)
        if monitor:
            monitor.record_inference(start)
            monitor.record_frame(frame.timestamp)

        return FrameResult(
            metrics=metrics,
            phase=self.detector.current_phase,
            event=event,
            feedback=tuple(self._frame_feedback),
            serve_analysis=self._frame_analysis,
        )

    def _on_phase_event(self, event):
        if self.collector is not None:
            self.collector.add_phase_event(event)

        if event.phase == ServePhase.PREPARATION:
            self._cycle_events = {}
            return

        self._cycle_events[event.phase] = event
        if event.phase == ServePhase.FOLLOW_THROUGH:
            self._complete_serve(event)

    def _complete_serve(self, event):
        loading = self._cycle_events.get(ServePhase.LOADING)
        contact = self._cycle_events.get(ServePhase.CONTACT)
        if loading is None or contact is None:
            logger.debug("Follow-through at %.3fs without a full cycle", event.timestamp)
            return

        self.serves_detected += 1
        analysis = self.evaluator.analyze(
            loading.metrics, contact.metrics, event.timestamp - loading.timestamp
        )
        items = self.feedback_generator.generate_from_analysis(analysis)

        self._track_serve(analysis)
        self.last_serve_analysis = analysis
        self.feedback.extend(items)
        self._frame_feedback = items
        self._frame_analysis = analysis

        if self.collector is not None:
            self.collector.add_serve(analysis, items)

        if analysis.overall_quality is not None:
            logger.info("Serve %d complete: quality %.0f",
                        self.serves_detected, analysis.overall_quality)
        else:
            logger.info("Serve %d complete: quality not measurable", self.serves_detected)

    def _track_serve(self, analysis):
        measurements = {}
        severities = {}
        sources = [
            (LOADING_METRICS, analysis.loading_metrics),
            (CONTACT_METRICS, analysis.contact_metrics),
        ]
        for metrics, snapshot in sources:
            for metric in metrics:
                value = get_metric_value(metric, snapshot)
                if value is None:
                    continue
                measurements[metric] = value
                severities[metric] = classify_severity(metric, value)[0]

        if analysis.overall_quality is not None:
            measurements['overall'] = analysis.overall_quality
            severities['overall'] = classify_severity('overall', analysis.overall_quality)[0]

        self.tracker.update(measurements, severities)

    # ========================================
    # Session control
    # ========================================

    @property
    def current_phase(self):
        return self.detector.current_phase

    @property
    def quality_analysis(self):
        """Detector-level analysis over the whole event history."""
        return self.detector.get_serve_quality_analysis()

    def persistent_issues(self, min_persistence=0.6):
        return self.tracker.persistent_issues(min_persistence)

    def update_user_height(self, height_cm):
        """New player height; the scale is recomputed on the next eligible frame."""
        self.extractor.set_calibration(CalibrationConfig(user_height_cm=height_cm))

    def reset(self):
        """Start over: extractor, detector, tracker and feedback are cleared."""
        self.extractor.reset()
        self.detector.reset()
        self.tracker.reset()
        if self.performance_monitor:
            self.performance_monitor.reset()
        self._init_session_state()
        logger.info("Analysis pipeline reset")
