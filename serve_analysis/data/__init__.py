"""
Session recording and post-session analysis.
"""

from .session_collector import SessionCollector
from .session_analyzer import SessionAnalyzer

__all__ = [
    'SessionCollector',
    'SessionAnalyzer',
]
