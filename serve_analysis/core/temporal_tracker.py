"""
Recurring-issue tracking across serves
"""
from collections import deque

import numpy as np

from .models import FeedbackCategory, FeedbackSeverity


class TemporalTracker:
    """Per-category windows over the most recent serves.

    Each completed serve contributes one measurement and one severity per
    feedback category it was assessed on.
    """

    def __init__(self, window_size=10):
        self.window_size = window_size
        self.history = self._windows()
        self.status_history = self._windows()

    def _windows(self):
        return {c.value: deque(maxlen=self.window_size) for c in FeedbackCategory}

    def update(self, measurements, severities):
        """
        Record one serve.

        Args:
            measurements: {category: value}; None values are skipped
            severities: {category: FeedbackSeverity or its string value}
        """
        for category, value in measurements.items():
            if value is not None and category in self.history:
                self.history[category].append(value)

        for category, severity in severities.items():
            if category in self.status_history:
                self.status_history[category].append(FeedbackSeverity(severity))

    def get_smoothed(self, category):
        """Mean of the category's recent measurements, None without data"""
        values = self.history.get(category)
        if not values:
            return None
        return float(np.mean(values))

    def is_issue_persistent(self, category, min_persistence=0.6):
        """
        True when Warning/Critical make up at least min_persistence of the
        category's recent severities. Needs half a window of serves first.
        """
        statuses = self.status_history.get(category)
        if not statuses or len(statuses) < self.window_size // 2:
            return False

        problems = sum(1 for status in statuses if status.is_problem)
        return problems / len(statuses) >= min_persistence

    def persistent_issues(self, min_persistence=0.6):
        """Categories with a persistent issue, in category order"""
        return [
            c.value for c in FeedbackCategory
            if self.is_issue_persistent(c.value, min_persistence)
        ]

    def reset(self):
        for window in (*self.history.values(), *self.status_history.values()):
            window.clear()
