#!/usr/bin/env python3
"""Timing and memory sampling for hierarchy computations."""

import functools
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import psutil

from notegraph.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class PerformanceMetric:
    """One measured computation."""
    name: str
    start_time: float
    duration: Optional[float] = None
    memory_before: Optional[float] = None
    memory_after: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def finish(self, end_time: Optional[float] = None) -> float:
        """Close the measurement and return its duration in seconds."""
        end = end_time if end_time is not None else time.perf_counter()
        self.duration = end - self.start_time
        return self.duration


@dataclass
class OperationStats:
    """Running totals for one operation name."""
    count: int = 0
    total_time: float = 0.0
    max_time: float = 0.0

    def add(self, duration: float) -> None:
        self.count += 1
        self.total_time += duration
        self.max_time = max(self.max_time, duration)


class PerformanceMonitor:
    """Collects durations of named operations, e.g. ``hierarchy.descendants``."""

    def __init__(self, enabled: bool = True, history_size: int = 500):
        self.enabled = enabled
        self.history_size = history_size
        self.metrics: List[PerformanceMetric] = []
        self.aggregated_stats: Dict[str, OperationStats] = defaultdict(OperationStats)
        self.logger = get_logger(__name__)

    @contextmanager
    def measure(self, operation_name: str, **metadata):
        """Context manager measuring the wrapped block."""
        if not self.enabled:
            yield None
            return

        metric = PerformanceMetric(
            name=operation_name,
            start_time=time.perf_counter(),
            memory_before=self._get_memory_usage(),
            metadata=metadata,
        )
        try:
            yield metric
        finally:
            self._record(metric)

    def _record(self, metric: PerformanceMetric) -> None:
        duration = metric.finish()
        metric.memory_after = self._get_memory_usage()
        if metric.memory_before is not None:
            metric.metadata['memory_delta'] = metric.memory_after - metric.memory_before

        self.metrics.append(metric)
        if len(self.metrics) > self.history_size:
            del self.metrics[:len(self.metrics) - self.history_size]
        self.aggregated_stats[metric.name].add(duration)

        self.logger.debug(f"Performance: {metric.name} took {duration * 1000:.3f}ms")

    def get_stats(self) -> Dict[str, Any]:
        """Aggregated per-operation statistics plus process memory."""
        stats: Dict[str, Any] = {}
        for name, totals in self.aggregated_stats.items():
            if totals.count:
                stats[name] = {
                    'count': totals.count,
                    'total_time': totals.total_time,
                    'avg_time': totals.total_time / totals.count,
                    'max_time': totals.max_time,
                }
        stats['memory_usage_mb'] = self._get_memory_usage()
        return stats

    def get_slow_operations(self, threshold_seconds: float = 0.05) -> List[PerformanceMetric]:
        """Recorded metrics slower than the threshold."""
        return [m for m in self.metrics if m.duration and m.duration > threshold_seconds]

    def clear_metrics(self) -> None:
        self.metrics.clear()
        self.aggregated_stats.clear()

    def _get_memory_usage(self) -> float:
        """Resident memory of this process in MB."""
        try:
            return psutil.Process().memory_info().rss / 1024 / 1024
        except psutil.Error:
            return 0.0


# Shared monitor, disabled unless a host turns it on
_performance_monitor = PerformanceMonitor(enabled=False)


def enable_performance_monitoring(enabled: bool = True) -> None:
    """Enable or disable the shared performance monitor."""
    _performance_monitor.enabled = enabled
    logger.info(f"Performance monitoring {'enabled' if enabled else 'disabled'}")


def get_performance_monitor() -> PerformanceMonitor:
    return _performance_monitor


def performance_timer(operation_name: Optional[str] = None):
    """Decorator timing each call with the shared monitor."""
    def decorator(func: Callable) -> Callable:
        name = operation_name or f"{func.__module__}.{func.__name__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with _performance_monitor.measure(name):
                return func(*args, **kwargs)
        return wrapper
    return decorator
