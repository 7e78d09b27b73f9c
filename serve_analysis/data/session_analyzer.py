"""
Session Analysis & Reporting
Finds recurring problems and trends across the serves of one session
"""
import json
from collections import Counter

import numpy as np

from ..core.models import FeedbackSeverity, ServePhase

PROBLEM_SEVERITIES = {FeedbackSeverity.WARNING.value, FeedbackSeverity.CRITICAL.value}


class SessionAnalyzer:
    """Analyze a recorded session (the dict produced by SessionCollector.to_dict)"""

    def __init__(self, session):
        self.session = session
        self.metadata = session['metadata']
        self.summary = session['summary']
        self.phase_events = session['phase_events']
        self.feedback = session['feedback']
        self.serves = session['serves']

    @classmethod
    def from_collector(cls, collector):
        return cls(collector.to_dict())

    @classmethod
    def from_json(cls, text):
        return cls(json.loads(text))

    def get_phase_duration_stats(self):
        """Duration statistics per phase (only events whose duration is known)"""
        stats = {}
        for phase in ServePhase:
            durations = [
                e['duration'] for e in self.phase_events
                if e['phase'] == phase.value and e['duration'] is not None
            ]
            if not durations:
                stats[phase.value] = None
                continue
            stats[phase.value] = {
                'count': len(durations),
                'mean': float(np.mean(durations)),
                'std': float(np.std(durations)),
                'min': float(np.min(durations)),
                'max': float(np.max(durations)),
            }
        return stats

    def get_severity_counts(self):
        """Number of feedback items per severity, every severity present"""
        counts = Counter(item['severity'] for item in self.feedback)
        return {severity.value: counts.get(severity.value, 0) for severity in FeedbackSeverity}

    def get_top_issues(self, top_n=3):
        """
        Get the most frequent problem categories.

        Returns: List of (category, problem_count, percentage of that
        category's feedback) sorted by problem_count
        """
        totals = Counter(item['category'] for item in self.feedback)
        problems = Counter(
            item['category'] for item in self.feedback
            if item['severity'] in PROBLEM_SEVERITIES
        )

        issues = [
            (category, count, count / totals[category] * 100)
            for category, count in problems.items()
        ]
        issues.sort(key=lambda x: x[1], reverse=True)
        return issues[:top_n]

    def get_quality_trend(self):
        """
        Detect whether serve quality changes over the session.

        Splits the serves into thirds and compares the average shortfall
        from a perfect score (100 - overall quality).
        """
        scores = [s['overall_quality'] for s in self.serves if s['overall_quality'] is not None]
        if len(scores) < 3:
            return {'trend': 'insufficient_data', 'serves': len(scores)}

        third = len(scores) // 3
        early = scores[:third]
        middle = scores[third:2 * third]
        late = scores[2 * third:]

        def shortfall(chunk):
            return float(np.mean([100.0 - s for s in chunk])) if chunk else 0.0

        early_rate = shortfall(early)
        middle_rate = shortfall(middle)
        late_rate = shortfall(late)

        if late_rate > early_rate * 1.5:
            trend = "worsening"
        elif late_rate < early_rate * 0.7:
            trend = "improving"
        else:
            trend = "stable"

        return {
            'trend': trend,
            'serves': len(scores),
            'early_quality': float(np.mean(early)),
            'middle_quality': float(np.mean(middle)) if middle else None,
            'late_quality': float(np.mean(late)),
            'early_rate': early_rate,
            'middle_rate': middle_rate,
            'late_rate': late_rate,
        }

    def format_report(self):
        """Human-readable session summary"""
        lines = [
            "=" * 60,
            "SERVE SESSION REPORT",
            "=" * 60,
            f"Session: {self.metadata['session_id']}",
            f"Duration: {self.summary['duration_seconds']:.1f} seconds",
            f"Frames: {self.summary['total_frames']} ({self.summary['valid_frames']} valid)",
            f"Serves detected: {self.summary['serves_detected']}",
        ]

        quality = self.summary['overall_quality']
        if quality is not None:
            lines.append(f"Average serve quality: {quality:.0f}/100")

        lines.append("")
        lines.append("Metric averages (best):")
        for metric, average in self.summary['average'].items():
            if average is None:
                lines.append(f"  {metric}: not measured")
                continue
            lines.append(f"  {metric}: {average:.2f} ({self.summary['best'][metric]:.2f})")

        top_issues = self.get_top_issues()
        if top_issues:
            lines.append("")
            lines.append("Top issues:")
            for category, count, percentage in top_issues:
                lines.append(f"  {category}: {count} times ({percentage:.0f}% of assessments)")

        trend = self.get_quality_trend()
        lines.append("")
        lines.append(f"Quality trend: {trend['trend']}")
        lines.append("=" * 60)
        return "\n".join(lines)
