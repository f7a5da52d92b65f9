# ============================================================================
# src/nanopore_ingestion/utils/metrics.py
# ============================================================================
"""
In-process metrics for extraction jobs.
"""

import statistics
import time
from collections import defaultdict
from typing import Any, Dict, List, Optional


class MetricsCollector:
    """Collect and aggregate counters, gauges and timings."""

    def __init__(self):
        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = {}
        self._histograms: Dict[str, List[float]] = defaultdict(list)
        self._timers: Dict[str, List[float]] = defaultdict(list)

    def increment(self, name: str, value: int = 1) -> None:
        self._counters[name] += value

    def set_gauge(self, name: str, value: float) -> None:
        self._gauges[name] = value

    def record_value(self, name: str, value: float) -> None:
        self._histograms[name].append(value)

    def record_time(self, name: str, duration: float) -> None:
        self._timers[name].append(duration)

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_gauge(self, name: str) -> Optional[float]:
        return self._gauges.get(name)

    @staticmethod
    def _summarize(values: List[float]) -> Optional[Dict[str, float]]:
        if not values:
            return None

        sorted_values = sorted(values)
        count = len(values)

        return {
            'count': count,
            'min': sorted_values[0],
            'max': sorted_values[-1],
            'mean': statistics.mean(values),
            'median': statistics.median(values),
            'p95': sorted_values[min(int(count * 0.95), count - 1)],
        }

    def get_histogram_stats(self, name: str) -> Optional[Dict[str, float]]:
        """
        Get histogram statistics.

        Returns:
            Dict with count, min, max, mean, median, p95
        """
        return self._summarize(self._histograms.get(name, []))

    def get_timer_stats(self, name: str) -> Optional[Dict[str, float]]:
        return self._summarize(self._timers.get(name, []))

    def get_all_metrics(self) -> Dict[str, Any]:
        return {
            'counters': dict(self._counters),
            'gauges': dict(self._gauges),
            'histograms': {
                name: self.get_histogram_stats(name)
                for name in self._histograms
            },
            'timers': {
                name: self.get_timer_stats(name)
                for name in self._timers
            }
        }

    def reset(self) -> None:
        self._counters.clear()
        self._gauges.clear()
        self._histograms.clear()
        self._timers.clear()


class Timer:
    """Context manager for timing a pipeline stage."""

    def __init__(self, collector: MetricsCollector, operation: str):
        self.collector = collector
        self.operation = operation
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time
        self.collector.record_time(self.operation, self.duration)


class PerformanceTracker:
    """Track job outcomes and stage timings for the extraction pipeline."""

    def __init__(self):
        self.metrics = MetricsCollector()
        self._active = 0

    def job_started(self) -> None:
        self._active += 1
        self.metrics.set_gauge('active_jobs', self._active)

    def job_finished(self, processing_type: str, status: str, duration: float) -> None:
        self._active = max(self._active - 1, 0)
        self.metrics.set_gauge('active_jobs', self._active)
        self.metrics.increment(f'jobs_{status}')
        self.metrics.increment(f'jobs_{status}_{processing_type}')
        self.metrics.record_time('job_processing', duration)

    def time_stage(self, stage: str) -> Timer:
        return Timer(self.metrics, f'stage_{stage}')

    def record_extraction(self, field_count: int, confidence: float) -> None:
        self.metrics.increment('fields_extracted', field_count)
        self.metrics.record_value('job_confidence', confidence)

    def record_error(self, error_type: str) -> None:
        self.metrics.increment(f'error_{error_type}')

    def get_summary(self) -> Dict[str, Any]:
        all_metrics = self.metrics.get_all_metrics()
        counters = all_metrics['counters']

        completed = counters.get('jobs_completed', 0)
        failed = counters.get('jobs_failed', 0)
        total = completed + failed
        confidence_stats = all_metrics['histograms'].get('job_confidence') or {}

        return {
            'total_jobs': total,
            'success_rate': (completed / total) if total > 0 else 0.0,
            'average_confidence': confidence_stats.get('mean', 0.0),
            'metrics': all_metrics
        }
