"""
Table-driven metric evaluation and quality scoring.

Band tables live in config/serve_guidelines.py. This module only walks
them: a value is classified by the first tier whose ranges contain it, and
anything left over falls through to the table's fallback.
"""
from operator import attrgetter

import numpy as np

from ..config.serve_guidelines import (
    FEEDBACK_BANDS,
    OVERALL_FEEDBACK_BANDS,
    SCORE_BANDS,
    LOADING_METRICS,
    CONTACT_METRICS,
)
from .models import FeedbackSeverity, QualityAnalysis

# ========================================
# METRIC LOOKUP
# ========================================

# Snapshot field evaluated for each metric (right-handed server)
METRIC_ACCESSORS = {
    'knee_flexion': attrgetter('right_knee_flexion'),
    'hip_shoulder_separation': attrgetter('hip_shoulder_separation'),
    'contact_height': attrgetter('contact_height'),
    'wrist_velocity': attrgetter('right_wrist_velocity'),
    'elbow_angle': attrgetter('right_elbow_angle'),
}


def get_metric_value(metric, snapshot):
    """Read a metric from a MetricsSnapshot (None when unset)."""
    if metric not in METRIC_ACCESSORS:
        raise ValueError(f"Unknown metric: {metric}. Use one of {sorted(METRIC_ACCESSORS)}")
    return METRIC_ACCESSORS[metric](snapshot)


# ========================================
# BAND MATCHING
# ========================================

def value_in_range(value, value_range):
    """
    Check a value against one range dict.

    min is inclusive, max is exclusive unless include_max is set. A missing
    bound is open.
    """
    low = value_range.get('min')
    high = value_range.get('max')

    if low is not None and not value >= low:
        return False
    if high is not None:
        if value_range.get('include_max', False):
            return value <= high
        return value < high
    return True


def match_tier(value, tiers):
    """Return the first tier whose ranges contain value, or None."""
    for tier in tiers:
        if any(value_in_range(value, r) for r in tier['ranges']):
            return tier
    return None


def _feedback_table(metric):
    if metric == 'overall':
        return OVERALL_FEEDBACK_BANDS
    if metric not in FEEDBACK_BANDS:
        raise ValueError(f"Unknown metric: {metric}. Use one of {sorted(FEEDBACK_BANDS)}")
    return FEEDBACK_BANDS[metric]


def classify_severity(metric, value):
    """
    Map a metric value to its feedback tier.

    Args:
        metric: Key of FEEDBACK_BANDS, or 'overall'
        value: Measured value

    Returns:
        (FeedbackSeverity, tier entry). Values outside every explicit band
        get the fallback entry, which is Critical.
    """
    table = _feedback_table(metric)
    entry = match_tier(value, table['tiers']) or table['fallback']
    return FeedbackSeverity(entry['severity']), entry


def score_value(metric, value):
    """0-100 score for a value using the coarse SCORE_BANDS table."""
    if metric not in SCORE_BANDS:
        raise ValueError(f"No score bands for metric: {metric}")
    table = SCORE_BANDS[metric]
    tier = match_tier(value, table['tiers'])
    if tier is None:
        return table['default_score']
    return tier['score']


# ========================================
# QUALITY SCORING
# ========================================

class QualityEvaluator:
    """Scores Loading and Contact snapshots of a serve cycle."""

    def __init__(self, loading_metrics=None, contact_metrics=None):
        self.loading_metrics = list(loading_metrics or LOADING_METRICS)
        self.contact_metrics = list(contact_metrics or CONTACT_METRICS)

    def score_metric(self, metric, snapshot):
        """Score one metric of a snapshot, None if the metric is unset."""
        value = get_metric_value(metric, snapshot)
        if value is None:
            return None
        return score_value(metric, value)

    def phase_quality(self, snapshot, metrics):
        """Average score of the set metrics; unset metrics are excluded."""
        if snapshot is None:
            return None
        scores = [self.score_metric(m, snapshot) for m in metrics]
        scores = [s for s in scores if s is not None]
        if not scores:
            return None
        return float(np.mean(scores))

    def loading_quality(self, snapshot):
        return self.phase_quality(snapshot, self.loading_metrics)

    def contact_quality(self, snapshot):
        return self.phase_quality(snapshot, self.contact_metrics)

    @staticmethod
    def overall_quality(loading_quality, contact_quality):
        available = [q for q in (loading_quality, contact_quality) if q is not None]
        if not available:
            return None
        return float(np.mean(available))

    def analyze(self, loading_snapshot, contact_snapshot, total_duration):
        """Build a QualityAnalysis for one serve cycle."""
        loading = self.loading_quality(loading_snapshot)
        contact = self.contact_quality(contact_snapshot)
        return QualityAnalysis(
            loading_metrics=loading_snapshot,
            contact_metrics=contact_snapshot,
            total_duration=total_duration,
            loading_quality=loading,
            contact_quality=contact,
            overall_quality=self.overall_quality(loading, contact),
        )
