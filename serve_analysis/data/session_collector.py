"""
Session data collection
"""
import json
import logging
from datetime import datetime

import numpy as np
import pandas as pd

from ..config.serve_guidelines import DEFAULT_FEEDBACK_METRICS
from ..core.evaluators import get_metric_value
from ..core.models import ServePhase

logger = logging.getLogger(__name__)

# Knee flexion "best" is the value closest to the middle of the elite band
KNEE_FLEXION_TARGET = 50.0


class SessionCollector:
    """Collects one analysis session in memory"""

    def __init__(self, user_height_cm=None, user_id=None):
        """
        Initialize session collector.

        Args:
            user_height_cm: Player height used for calibration (None if unknown)
            user_id: Optional identifier for grouping sessions by player
        """
        self.session_start = datetime.now()
        self.user_height = user_height_cm
        self.user_id = user_id or "anonymous"
        self.session_id = self.session_start.strftime("%Y%m%d_%H%M%S")

        # Storage
        self.snapshots = []
        self.phase_events = []
        self.feedback = []
        self.serve_analyses = []
        self.frame_count = 0
        self.serves_detected = 0

    def add_frame(self, metrics):
        """Count a frame; only valid snapshots are kept."""
        self.frame_count += 1
        if metrics.is_valid:
            self.snapshots.append(metrics)

    def add_phase_event(self, event):
        self.phase_events.append(event)
        if event.phase == ServePhase.FOLLOW_THROUGH:
            self.serves_detected += 1

    def add_serve(self, analysis, feedback_items):
        """Store the quality analysis and feedback of one completed serve."""
        if analysis is not None:
            self.serve_analyses.append(analysis)
        self.feedback.extend(feedback_items)
        logger.debug("Session %s: serve recorded with %d feedback items",
                     self.session_id, len(feedback_items))

    # ========================================
    # Summaries
    # ========================================

    def _metric_values(self, metric):
        values = (get_metric_value(metric, s) for s in self.snapshots)
        return [v for v in values if v is not None]

    @staticmethod
    def _best(metric, values):
        if not values:
            return None
        if metric == 'knee_flexion':
            return min(values, key=lambda v: abs(v - KNEE_FLEXION_TARGET))
        return max(values)

    @property
    def duration(self):
        if len(self.snapshots) < 2:
            return 0.0
        return self.snapshots[-1].timestamp - self.snapshots[0].timestamp

    def quality_scores(self):
        return [
            a.overall_quality for a in self.serve_analyses
            if a.overall_quality is not None
        ]

    def summary(self):
        """Averages and bests per core metric plus session counters."""
        averages = {}
        bests = {}
        for metric in DEFAULT_FEEDBACK_METRICS:
            values = self._metric_values(metric)
            averages[metric] = float(np.mean(values)) if values else None
            bests[metric] = self._best(metric, values)

        scores = self.quality_scores()
        return {
            'session_id': self.session_id,
            'user_id': self.user_id,
            'user_height_cm': self.user_height,
            'was_calibrated': bool(self.user_height),
            'duration_seconds': self.duration,
            'total_frames': self.frame_count,
            'valid_frames': len(self.snapshots),
            'serves_detected': self.serves_detected,
            'average': averages,
            'best': bests,
            'overall_quality': float(np.mean(scores)) if scores else None,
        }

    def to_dict(self):
        """Plain structured session data, ready for JSON."""
        return {
            'metadata': {
                'session_id': self.session_id,
                'user_id': self.user_id,
                'start_time': self.session_start.isoformat(),
                'user_height_cm': self.user_height,
            },
            'summary': self.summary(),
            'phase_events': [e.to_dict() for e in self.phase_events],
            'feedback': [f.to_dict() for f in self.feedback],
            'serves': [a.to_dict() for a in self.serve_analyses],
        }

    def to_json(self, indent=2):
        return json.dumps(self.to_dict(), indent=indent)

    def to_dataframe(self):
        """One row per valid snapshot, indexed by timestamp."""
        if not self.snapshots:
            return pd.DataFrame()
        df = pd.DataFrame([s.to_dict() for s in self.snapshots])
        return df.set_index('timestamp')
