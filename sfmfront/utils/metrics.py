"""Timing and match-quality metrics."""

import threading
import numpy as np
from typing import Dict
from time import perf_counter

from sfmfront.geometry.homography import reprojection_errors


class PerformanceMetrics:
    """Accumulate wall-clock durations of named operations (thread-safe)."""

    def __init__(self):
        self.start_times = {}
        self.durations = {}
        self._lock = threading.Lock()

    def start_timer(self, name: str):
        """Start timing an operation."""
        with self._lock:
            self.start_times[name] = perf_counter()

    def stop_timer(self, name: str) -> float:
        """Stop timing and return duration in milliseconds."""
        with self._lock:
            start = self.start_times.pop(name, None)
        if start is None:
            return 0.0
        duration = (perf_counter() - start) * 1000
        self.add_duration(name, duration)
        return duration

    def add_duration(self, name: str, duration_ms: float):
        """Add to the running total of an operation (thread-safe)."""
        with self._lock:
            self.durations[name] = self.durations.get(name, 0.0) + duration_ms

    def get_summary(self) -> Dict[str, float]:
        """Get summary of all timings."""
        with self._lock:
            return self.durations.copy()

    def reset(self):
        with self._lock:
            self.start_times.clear()
            self.durations.clear()


def reprojection_error_stats(H: np.ndarray, src_points: np.ndarray,
                             dst_points: np.ndarray) -> Dict[str, float]:
    """Calculate reprojection error statistics of src mapped through H."""
    errors = reprojection_errors(H, src_points, dst_points)
    if errors.size == 0:
        return {
            'mean_error': 0.0,
            'median_error': 0.0,
            'max_error': 0.0,
            'std_error': 0.0
        }
    return {
        'mean_error': float(np.mean(errors)),
        'median_error': float(np.median(errors)),
        'max_error': float(np.max(errors)),
        'std_error': float(np.std(errors))
    }
