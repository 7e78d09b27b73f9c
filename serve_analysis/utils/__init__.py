"""
Utilities for hosting the analysis loop.
"""

from .performance_monitor import PerformanceMonitor, PerformanceReport

__all__ = [
    'PerformanceMonitor',
    'PerformanceReport',
]
