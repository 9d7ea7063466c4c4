#!/usr/bin/env python3
"""
Render Worker Pool

Fixed set of worker threads consuming a bounded queue of chart requests.
A full queue rejects new work instead of spawning unbounded renders.
"""

import queue
import logging
import threading
from typing import Callable, List, Optional

from .models import ChartData
from .telemetry import ServiceTelemetry

logger = logging.getLogger(__name__)

_STOP = object()


class RenderWorkerPool:
    """Bounded pool running one render job per queued chart request"""

    def __init__(self, handler: Callable[[ChartData], object], workers: int = 4, queue_size: int = 32,
                 telemetry: Optional[ServiceTelemetry] = None):
        """
        Initialize the worker pool

        Args:
            handler: Called with each ChartData on a worker thread
            workers: Number of worker threads
            queue_size: Maximum number of waiting requests
            telemetry: Shared telemetry collector
        """
        if workers <= 0 or queue_size <= 0:
            raise ValueError("workers and queue_size must be positive")

        self.handler = handler
        self.workers = workers
        self.telemetry = telemetry or ServiceTelemetry()
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._threads: List[threading.Thread] = []
        self._started = False
        self._lock = threading.Lock()

    def start(self):
        with self._lock:
            if self._started:
                return
            for i in range(self.workers):
                thread = threading.Thread(target=self._worker, name=f'chart-worker-{i}', daemon=True)
                thread.start()
                self._threads.append(thread)
            self._started = True
        logger.info(f"🚀 Render pool started with {self.workers} workers (queue size {self._queue.maxsize})")

    def submit(self, chart_data: ChartData) -> bool:
        """
        Queue a chart request without blocking

        Returns:
            True if queued, False if the pool is saturated or not running
        """
        if not self._started:
            logger.error(f"Render pool is not running, dropping {chart_data.ticker} {chart_data.timeframe}")
            self.telemetry.increment('requests_dropped')
            return False
        try:
            self._queue.put_nowait(chart_data)
        except queue.Full:
            logger.warning(
                f"⚠️  Render queue full ({self._queue.maxsize}), dropping {chart_data.ticker} "
                f"{chart_data.timeframe} [{chart_data.candle_count} candles]"
            )
            self.telemetry.increment('requests_dropped')
            return False
        return True

    def _worker(self):
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self.handler(item)
            except Exception as e:
                # The handler already contains per-request failures; this keeps the thread alive regardless
                logger.exception(f"❌ Unhandled error rendering {getattr(item, 'ticker', '?')}: {e}")
            finally:
                self._queue.task_done()

    def join(self):
        """Block until every queued request has been handled"""
        self._queue.join()

    def shutdown(self, wait: bool = True):
        """Stop the workers after the queued requests are drained"""
        with self._lock:
            if not self._started:
                return
            self._started = False
            threads = list(self._threads)
            self._threads.clear()

        for _ in threads:
            self._queue.put(_STOP)
        if wait:
            for thread in threads:
                thread.join()
        logger.info("👋 Render pool stopped")
