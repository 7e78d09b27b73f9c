"""
Frame-rate and inference-time monitoring for the live analysis loop.
"""
import logging
import time
from collections import deque
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

FPS_WINDOW_SIZE = 30
INFERENCE_WINDOW_SIZE = 20
TARGET_FPS = 30.0
# A gap longer than this multiple of the target frame time counts as a drop
FRAME_DROP_FACTOR = 1.5

# (grade, min average fps, max average inference seconds or None)
PERFORMANCE_GRADES = [
    ('excellent', 45.0, 0.03),
    ('good', 30.0, 0.05),
    ('fair', 20.0, None),
]


@dataclass(frozen=True)
class PerformanceReport:
    average_fps: float
    min_fps: float
    max_fps: float
    frame_drops: int
    average_inference_time: float
    duration: float

    @property
    def grade(self):
        for name, min_fps, max_inference in PERFORMANCE_GRADES:
            if self.average_fps < min_fps:
                continue
            if max_inference is not None and not self.average_inference_time < max_inference:
                continue
            return name
        return 'needs_optimization'

    @property
    def formatted_report(self):
        return "\n".join([
            "Performance report",
            f"  Duration: {self.duration:.1f}s",
            f"  FPS: avg {self.average_fps:.1f}, min {self.min_fps:.1f}, max {self.max_fps:.1f}",
            f"  Frame drops: {self.frame_drops}",
            f"  Inference: {self.average_inference_time * 1000:.1f}ms",
            f"  Grade: {self.grade}",
        ])

    def to_dict(self):
        return {
            'average_fps': self.average_fps,
            'min_fps': self.min_fps,
            'max_fps': self.max_fps,
            'frame_drops': self.frame_drops,
            'average_inference_time': self.average_inference_time,
            'duration': self.duration,
            'grade': self.grade,
        }


class PerformanceMonitor:
    """Sliding-window FPS and inference timing"""

    def __init__(self, fps_window=FPS_WINDOW_SIZE, inference_window=INFERENCE_WINDOW_SIZE,
                 target_fps=TARGET_FPS):
        self.target_fps = target_fps
        self.frame_timestamps = deque(maxlen=fps_window)
        self.inference_durations = deque(maxlen=inference_window)

    def record_frame(self, timestamp):
        """Record the arrival time (seconds) of one frame."""
        self.frame_timestamps.append(timestamp)

    def inference_start(self):
        return time.perf_counter()

    def record_inference(self, start, end=None):
        """Record one inference; end defaults to now."""
        if end is None:
            end = time.perf_counter()
        self.inference_durations.append(end - start)

    def _frame_intervals(self):
        if len(self.frame_timestamps) < 2:
            return np.array([])
        return np.diff(np.asarray(self.frame_timestamps, dtype=float))

    @property
    def current_fps(self):
        if len(self.frame_timestamps) < 2:
            return 0.0
        duration = self.frame_timestamps[-1] - self.frame_timestamps[0]
        if duration <= 0:
            return 0.0
        return (len(self.frame_timestamps) - 1) / duration

    @property
    def average_inference_time(self):
        if not self.inference_durations:
            return 0.0
        return float(np.mean(self.inference_durations))

    def report(self):
        """Snapshot of the current windows as a PerformanceReport"""
        intervals = self._frame_intervals()
        positive = intervals[intervals > 0]
        if len(positive):
            rates = 1.0 / positive
            min_fps, max_fps = float(rates.min()), float(rates.max())
        else:
            min_fps = max_fps = 0.0

        drop_limit = FRAME_DROP_FACTOR / self.target_fps
        frame_drops = int(np.sum(intervals > drop_limit)) if len(intervals) else 0

        duration = 0.0
        if self.frame_timestamps:
            duration = self.frame_timestamps[-1] - self.frame_timestamps[0]

        report = PerformanceReport(
            average_fps=self.current_fps,
            min_fps=min_fps,
            max_fps=max_fps,
            frame_drops=frame_drops,
            average_inference_time=self.average_inference_time,
            duration=duration,
        )
        logger.debug("Performance: %.1f fps, %d drops, grade %s",
                     report.average_fps, report.frame_drops, report.grade)
        return report

    def reset(self):
        self.frame_timestamps.clear()
        self.inference_durations.clear()
