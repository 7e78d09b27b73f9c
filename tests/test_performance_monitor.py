"""Tests for frame-rate and inference monitoring."""

import pytest

from serve_analysis.utils import PerformanceMonitor, PerformanceReport


def _report(fps, inference):
    return PerformanceReport(
        average_fps=fps, min_fps=fps, max_fps=fps,
        frame_drops=0, average_inference_time=inference, duration=1.0,
    )


class TestPerformanceMonitor:
    def test_steady_rate(self):
        monitor = PerformanceMonitor()
        for i in range(10):
            monitor.record_frame(i / 30.0)
        assert monitor.current_fps == pytest.approx(30.0)

        report = monitor.report()
        assert report.min_fps == pytest.approx(30.0)
        assert report.max_fps == pytest.approx(30.0)
        assert report.frame_drops == 0
        assert report.duration == pytest.approx(9 / 30.0)

    def test_frame_drop_detected(self):
        monitor = PerformanceMonitor()
        for t in (0.0, 1 / 30.0, 2 / 30.0, 0.2, 0.2 + 1 / 30.0):
            monitor.record_frame(t)
        report = monitor.report()
        assert report.frame_drops == 1
        assert report.min_fps == pytest.approx(1 / (0.2 - 2 / 30.0))

    def test_window_bounded(self):
        monitor = PerformanceMonitor(fps_window=5)
        for i in range(20):
            monitor.record_frame(float(i))
        assert len(monitor.frame_timestamps) == 5

    def test_not_enough_frames(self):
        monitor = PerformanceMonitor()
        assert monitor.current_fps == 0.0
        monitor.record_frame(1.0)
        report = monitor.report()
        assert report.average_fps == 0.0
        assert report.frame_drops == 0

    def test_inference_time(self):
        monitor = PerformanceMonitor()
        monitor.record_inference(1.0, 1.02)
        monitor.record_inference(2.0, 2.04)
        assert monitor.average_inference_time == pytest.approx(0.03)

    def test_inference_defaults_to_now(self):
        monitor = PerformanceMonitor()
        monitor.record_inference(monitor.inference_start())
        assert monitor.average_inference_time >= 0.0
        assert len(monitor.inference_durations) == 1

    def test_reset(self):
        monitor = PerformanceMonitor()
        monitor.record_frame(0.0)
        monitor.record_inference(0.0, 0.1)
        monitor.reset()
        assert len(monitor.frame_timestamps) == 0
        assert monitor.average_inference_time == 0.0


class TestPerformanceReport:
    @pytest.mark.parametrize("fps,inference,grade", [
        (60.0, 0.01, 'excellent'),
        (60.0, 0.04, 'good'),
        (30.0, 0.01, 'good'),
        (30.0, 0.08, 'fair'),
        (20.0, 0.2, 'fair'),
        (15.0, 0.01, 'needs_optimization'),
    ])
    def test_grade(self, fps, inference, grade):
        assert _report(fps, inference).grade == grade

    def test_formatted_report(self):
        text = _report(30.0, 0.012).formatted_report
        assert "avg 30.0" in text
        assert "12.0ms" in text
        assert "Grade: good" in text

    def test_to_dict(self):
        assert _report(30.0, 0.01).to_dict()['grade'] == 'good'
