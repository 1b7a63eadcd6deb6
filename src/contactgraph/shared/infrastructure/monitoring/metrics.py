"""
Metrics collection for ContactGraph.

Records graph rebuild sizes, layout durations and interaction counts so a
host application can see how the engine behaves on real contact books.
"""

import time
import threading
from typing import Dict, List, Optional
from collections import defaultdict
from functools import wraps


class MetricsCollector:
    """
    In-process counters, gauges and timers for graph operations.

    Thread-safe; timers keep only the most recent ``max_history`` durations.
    """

    _instance: Optional["MetricsCollector"] = None
    _lock = threading.RLock()

    def __new__(cls) -> "MetricsCollector":
        """Singleton pattern."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, max_history: int = 1000):
        if self._initialized:
            return

        self.max_history = max_history
        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = {}
        self._timers: Dict[str, List[float]] = defaultdict(list)

        self._initialized = True

    def counter(self, name: str, value: int = 1) -> None:
        with self._lock:
            self._counters[name] += value

    def gauge(self, name: str, value: float) -> None:
        with self._lock:
            self._gauges[name] = value

    def timer(self, name: str, duration_seconds: float) -> None:
        """Record one duration, dropping the oldest beyond ``max_history``."""
        with self._lock:
            timings = self._timers[name]
            timings.append(duration_seconds)
            if len(timings) > self.max_history:
                del timings[:-self.max_history]

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_gauge(self, name: str) -> float:
        return self._gauges.get(name, 0.0)

    def get_timer_stats(self, name: str) -> Dict[str, float]:
        """Count, mean, min, max and p95 of the recorded durations."""
        with self._lock:
            timings = sorted(self._timers.get(name, []))

        if not timings:
            return {'count': 0, 'mean': 0.0, 'min': 0.0, 'max': 0.0, 'p95': 0.0}

        count = len(timings)
        return {
            'count': count,
            'mean': sum(timings) / count,
            'min': timings[0],
            'max': timings[-1],
            'p95': timings[min(int(0.95 * count), count - 1)],
        }

    def reset(self) -> None:
        """Drop every recorded value."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._timers.clear()

    def record_graph_build(self, contact_count: int, node_count: int, edge_count: int) -> None:
        """Record the size of a rebuilt graph."""
        self.counter('graph_builds_total')
        self.gauge('graph_contacts', contact_count)
        self.gauge('graph_nodes', node_count)
        self.gauge('graph_edges', edge_count)

    def record_layout(self, node_count: int, iterations: int, duration_seconds: float) -> None:
        """Record a completed layout pass."""
        self.counter('layouts_total')
        self.gauge('layout_nodes', node_count)
        self.gauge('layout_iterations', iterations)
        self.timer('layout_duration', duration_seconds)

    def record_interaction(self, kind: str, outcome: str) -> None:
        """Record a tap, search or reset handled by a graph session."""
        self.counter('interactions_total')
        self.counter(f'interactions_{kind}')
        self.counter(f'interactions_{kind}_{outcome}')


def timed_operation(metric_name: str):
    """
    Decorator for timing operations.

    Failed calls are timed under ``<metric_name>_error`` and re-raised.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            metrics = get_metrics()
            start_time = time.perf_counter()

            try:
                result = func(*args, **kwargs)
            except Exception:
                metrics.timer(f"{metric_name}_error", time.perf_counter() - start_time)
                raise

            metrics.timer(metric_name, time.perf_counter() - start_time)
            return result

        return wrapper
    return decorator


# Global instance
_metrics_collector = None
_metrics_lock = threading.Lock()


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector instance.

    Returns:
        MetricsCollector singleton instance
    """
    global _metrics_collector

    if _metrics_collector is None:
        with _metrics_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()

    return _metrics_collector
