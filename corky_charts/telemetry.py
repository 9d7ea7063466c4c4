#!/usr/bin/env python3
"""
Telemetry

Process-local counters and a render timer for the chart service.
Thread-safe; the snapshot is logged at shutdown.
"""

import logging
import statistics
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

COUNTERS = (
    'requests_received',
    'requests_dropped',
    'charts_rendered',
    'charts_no_data',
    'charts_failed',
    'notifications_failed',
)


@dataclass
class Timer:
    """
    Timer metric - tracks duration of operations
    """
    name: str
    durations: List[float] = field(default_factory=list)
    max_samples: int = 1000

    def record(self, duration_seconds: float):
        """Record a duration directly"""
        self.durations.append(duration_seconds)

        # Keep only last max_samples
        if len(self.durations) > self.max_samples:
            self.durations = self.durations[-self.max_samples:]

    def get_stats(self) -> Dict[str, float]:
        """Get statistical summary of timings"""
        if not self.durations:
            return {
                'count': 0,
                'min': 0.0,
                'max': 0.0,
                'mean': 0.0,
                'median': 0.0
            }

        return {
            'count': len(self.durations),
            'min': min(self.durations),
            'max': max(self.durations),
            'mean': statistics.mean(self.durations),
            'median': statistics.median(self.durations)
        }


class ServiceTelemetry:
    """Counters and render timings shared by the server and the workers"""

    def __init__(self):
        self._lock = threading.Lock()
        self.counters: Dict[str, int] = {name: 0 for name in COUNTERS}
        self.render_timer = Timer('render_duration')

    def increment(self, name: str, amount: int = 1):
        if name not in self.counters:
            raise KeyError(f"Unknown counter: {name}")
        with self._lock:
            self.counters[name] += amount

    def record_render(self, duration_seconds: float):
        with self._lock:
            self.render_timer.record(duration_seconds)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'counters': dict(self.counters),
                'render_duration': self.render_timer.get_stats(),
            }

    def log_summary(self):
        snap = self.snapshot()
        counters = snap['counters']
        timing = snap['render_duration']
        logger.info(
            f"📊 Requests: {counters['requests_received']} received, {counters['requests_dropped']} dropped | "
            f"Charts: {counters['charts_rendered']} rendered, {counters['charts_no_data']} empty, "
            f"{counters['charts_failed']} failed | Notifications failed: {counters['notifications_failed']}"
        )
        if timing['count']:
            logger.info(
                f"⏱️  Render time: mean {timing['mean']:.3f}s, median {timing['median']:.3f}s, "
                f"max {timing['max']:.3f}s over {timing['count']} renders"
            )
