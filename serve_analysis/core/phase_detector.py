"""
Serve phase detection
"""
import logging
from collections import deque

from ..config.detection import PhaseThresholds
from .evaluators import QualityEvaluator
from .models import PhaseEvent, ServePhase

logger = logging.getLogger(__name__)


class ServePhaseDetector:
    """
    Detect serve phases from a stream of MetricsSnapshots.

    Phases (cyclic):
    - PREPARATION: Standing ready, before the knee bend
    - LOADING: Knees bending, energy being stored
    - CONTACT: Wrist near its peak height while moving fast
    - FOLLOW_THROUGH: Wrist decelerating and dropping after contact

    Only the sliding metrics window is bounded. The event history grows
    with the session; hosts running long sessions should call
    drain_history() periodically.
    """

    def __init__(self, thresholds=None, evaluator=None):
        """
        Args:
            thresholds: PhaseThresholds (defaults if None)
            evaluator: QualityEvaluator used for serve quality analysis
        """
        self.thresholds = thresholds or PhaseThresholds()
        self.evaluator = evaluator or QualityEvaluator()
        self._listeners = []
        self._init_state()

    def _init_state(self):
        self.current_phase = ServePhase.PREPARATION
        self.phase_history = []
        self.metrics_window = deque(maxlen=self.thresholds.window_size)
        self.phase_start_metrics = None
        self.phase_start_time = None
        self.peak_wrist_velocity = 0.0
        # Most recent event, kept even after drain_history() for duration backfill
        self._last_event = None

    # ========================================
    # Public API
    # ========================================

    def process_metrics(self, metrics):
        """
        Feed one snapshot.

        Args:
            metrics: MetricsSnapshot

        Returns:
            The new PhaseEvent if a transition happened, else None
        """
        self.metrics_window.append(metrics)

        # The first snapshot opens the initial preparation phase
        if self.phase_start_time is None:
            self.phase_start_time = metrics.timestamp
            self.phase_start_metrics = metrics

        velocity = metrics.right_wrist_velocity
        if velocity is not None:
            self.peak_wrist_velocity = max(self.peak_wrist_velocity, velocity)

        new_phase = self._detect_transition(metrics)
        if new_phase is not None and new_phase != self.current_phase:
            return self._transition_to(new_phase, metrics)
        return None

    @property
    def has_complete_serve(self):
        """True once every phase appears in the history."""
        return len({event.phase for event in self.phase_history}) == len(ServePhase)

    def current_phase_duration(self, now):
        """Seconds spent in the current phase as of ``now``."""
        if self.phase_start_time is None:
            return 0.0
        return max(0.0, now - self.phase_start_time)

    def get_serve_quality_analysis(self):
        """
        Quality of the observed serve.

        Returns:
            QualityAnalysis built from the most recent Loading and Contact
            events, or None until a full cycle is in the history.
        """
        if not self.has_complete_serve:
            return None

        loading_metrics = None
        contact_metrics = None
        for event in self.phase_history:
            if event.phase == ServePhase.LOADING:
                loading_metrics = event.metrics
            elif event.phase == ServePhase.CONTACT:
                contact_metrics = event.metrics

        total_duration = self.phase_history[-1].timestamp - self.phase_history[0].timestamp
        return self.evaluator.analyze(loading_metrics, contact_metrics, total_duration)

    def drain_history(self):
        """Return the event history and start a new, empty one."""
        events = self.phase_history
        self.phase_history = []
        return events

    def add_listener(self, callback):
        """Register callback(event), called after each transition."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def reset(self):
        """Back to PREPARATION with empty history and window. Listeners stay registered."""
        self._init_state()

    # ========================================
    # Transition rules
    # ========================================

    def _detect_transition(self, metrics):
        if len(self.metrics_window) < self.thresholds.min_window_samples:
            return None

        if self.current_phase == ServePhase.PREPARATION:
            return self._detect_loading_start(metrics)
        elif self.current_phase == ServePhase.LOADING:
            return self._detect_contact_start(metrics)
        elif self.current_phase == ServePhase.CONTACT:
            return self._detect_follow_through_start(metrics)
        else:
            return self._detect_preparation_start(metrics)

    def _recent(self, attribute):
        """Non-null values of a snapshot attribute over the lookback."""
        recent = list(self.metrics_window)[-self.thresholds.lookback:]
        return [
            value for value in (getattr(m, attribute) for m in recent)
            if value is not None
        ]

    def _phase_elapsed(self, metrics):
        return metrics.timestamp - self.phase_start_time

    def _detect_loading_start(self, metrics):
        t = self.thresholds
        if metrics.right_knee_flexion is None:
            return None

        if self._phase_elapsed(metrics) < t.preparation_min_duration:
            return None

        recent_knees = self._recent('right_knee_flexion')
        if len(recent_knees) < t.min_trend_samples:
            return None

        knee_decrease = recent_knees[0] - recent_knees[-1]
        if knee_decrease > t.knee_flexion_decrease_threshold:
            return ServePhase.LOADING
        return None

    def _detect_contact_start(self, metrics):
        t = self.thresholds
        velocity = metrics.right_wrist_velocity
        height = metrics.right_wrist_height
        if velocity is None or height is None:
            return None

        recent_heights = self._recent('right_wrist_height')
        near_peak = (
            len(recent_heights) >= t.min_trend_samples
            and height >= max(recent_heights) * t.near_peak_fraction
        )

        if (velocity > t.wrist_velocity_threshold
                and height > t.wrist_height_threshold
                and near_peak):
            return ServePhase.CONTACT
        return None

    def _detect_follow_through_start(self, metrics):
        t = self.thresholds
        if self._phase_elapsed(metrics) < t.contact_min_duration:
            return None

        velocity = metrics.right_wrist_velocity
        if velocity is None:
            return None

        velocity_decayed = velocity < self.peak_wrist_velocity * t.velocity_decay_threshold

        recent_heights = self._recent('right_wrist_height')
        height_decreasing = (
            len(recent_heights) >= t.min_trend_samples
            and recent_heights[0] > recent_heights[-1]
        )

        if velocity_decayed and height_decreasing:
            return ServePhase.FOLLOW_THROUGH
        return None

    def _detect_preparation_start(self, metrics):
        velocity = metrics.right_wrist_velocity
        if velocity is None:
            return None
        if velocity < self.thresholds.movement_still_threshold:
            return ServePhase.PREPARATION
        return None

    # ========================================
    # State management
    # ========================================

    def _transition_to(self, new_phase, metrics):
        timestamp = metrics.timestamp

        if self._last_event is not None:
            self._last_event.duration = timestamp - self.phase_start_time

        if new_phase == ServePhase.PREPARATION:
            # New serve cycle
            self.peak_wrist_velocity = 0.0

        event = PhaseEvent(phase=new_phase, timestamp=timestamp, metrics=metrics)

        previous_phase = self.current_phase
        self.current_phase = new_phase
        self.phase_start_metrics = metrics
        self.phase_start_time = timestamp
        self.phase_history.append(event)
        self._last_event = event

        logger.info(
            "Phase transition: %s -> %s at %.3fs",
            previous_phase.display_name, new_phase.display_name, timestamp
        )

        for callback in list(self._listeners):
            callback(event)

        return event
