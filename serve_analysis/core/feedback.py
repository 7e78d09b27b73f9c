"""
Coaching feedback generation.

Maps snapshot metrics and cycle quality scores to FeedbackItems using the
FEEDBACK_BANDS tables. Unset metrics produce no item.
"""
import logging

from ..config.serve_guidelines import DEFAULT_FEEDBACK_METRICS, ELITE_REFERENCE
from .evaluators import classify_severity, get_metric_value
from .models import FeedbackCategory, FeedbackItem, ServePhase

logger = logging.getLogger(__name__)


class FeedbackGenerator:
    """Turns metrics into coaching feedback."""

    def __init__(self, categories=None):
        """
        Args:
            categories: Metric names evaluated by default (the four core
                metrics if None). Add 'elbow_angle' to include elbow feedback.
        """
        self.categories = list(categories or DEFAULT_FEEDBACK_METRICS)

    def build_item(self, metric, value, timestamp, phase=None):
        """Create the FeedbackItem for one metric value."""
        severity, entry = classify_severity(metric, value)
        reference = ELITE_REFERENCE[metric]

        message = entry['message'].format(value=value)
        if phase is not None:
            message = f"{phase.display_name}: {message}"

        return FeedbackItem(
            severity=severity,
            category=FeedbackCategory(metric),
            message=message,
            actionable=entry['actionable'],
            impact=entry.get('impact'),
            current_value=value,
            ideal_range=entry.get('ideal_range', reference['ideal_range']),
            timestamp=timestamp,
        )

    def generate(self, metrics, phase=None, categories=None):
        """
        Feedback for a single snapshot.

        Args:
            metrics: MetricsSnapshot
            phase: ServePhase the snapshot belongs to, used as a message prefix
            categories: Metric names to evaluate (defaults to self.categories)

        Returns:
            List of FeedbackItem, one per set metric, in category order
        """
        items = []
        for metric in categories or self.categories:
            value = get_metric_value(metric, metrics)
            if value is None:
                logger.debug("No %s feedback: metric unset at %.3fs", metric, metrics.timestamp)
                continue
            items.append(self.build_item(metric, value, metrics.timestamp, phase))
        return items

    def generate_overall(self, analysis, timestamp=None):
        """
        Overall item keyed to the cycle's composite score.

        Returns:
            FeedbackItem, or None when the cycle has no overall score
        """
        score = analysis.overall_quality
        if score is None:
            return None
        if timestamp is None:
            timestamp = _latest_timestamp(analysis)
        return self.build_item('overall', score, timestamp)

    def generate_from_analysis(self, analysis, categories=None):
        """
        Feedback for a completed serve cycle.

        Loading-phase metrics, then Contact-phase metrics, then the overall
        assessment.
        """
        items = []
        if analysis.loading_metrics is not None:
            items.extend(self.generate(analysis.loading_metrics, ServePhase.LOADING, categories))
        if analysis.contact_metrics is not None:
            items.extend(self.generate(analysis.contact_metrics, ServePhase.CONTACT, categories))

        overall = self.generate_overall(analysis)
        if overall is not None:
            items.append(overall)
        return items


def _latest_timestamp(analysis):
    timestamps = [
        m.timestamp for m in (analysis.loading_metrics, analysis.contact_metrics)
        if m is not None
    ]
    return max(timestamps) if timestamps else 0.0
