#!/usr/bin/env python3
"""
Chart Server

Receives chart requests from the ZeroMQ broker, decodes them and hands
them to the render pool. Decoding failures are logged and dropped here and
never reach the renderer.
"""

import logging
import signal
from typing import Optional, Sequence

import zmq

from .chart.formatting import format_timestamp
from .config import ServiceConfig
from .errors import DecodeError
from .models import ChartData, ChartRequest
from .telemetry import ServiceTelemetry
from .worker_pool import RenderWorkerPool

logger = logging.getLogger(__name__)

# Poll interval so stop() is noticed without a message arriving
POLL_TIMEOUT_MS = 500


def log_data_summary(data: ChartData):
    """One summary log line per accepted request; empty requests are reported by the generator"""
    if not data.data:
        return
    try:
        start = format_timestamp(data.data[0][0])
        end = format_timestamp(data.data[-1][0])
    except (OverflowError, OSError, ValueError):
        start, end = data.data[0][0], data.data[-1][0]
    logger.info(
        f"▶ New Chart Request for {data.ticker} @ {data.timeframe} [{data.candle_count} candles] "
        f"from {start} to {end} | Desc: {data.desc}"
    )


class ChartServer:
    """
    Receive loop feeding the render pool

    Features:
    - DEALER socket with a fixed identity so the broker can route chart requests
    - Malformed messages are dropped at the boundary
    - Admission control through the bounded render pool
    """

    def __init__(self, config: ServiceConfig, pool: RenderWorkerPool,
                 telemetry: Optional[ServiceTelemetry] = None, context: Optional[zmq.Context] = None):
        self.config = config
        self.pool = pool
        self.telemetry = telemetry or pool.telemetry
        self.context = context or zmq.Context.instance()
        self.socket = None
        self.running = False

    def handle_frames(self, frames: Sequence[bytes]) -> bool:
        """
        Decode one multipart message and queue it for rendering

        Returns:
            True if the request was queued
        """
        self.telemetry.increment('requests_received')
        try:
            request = ChartRequest.from_frames(frames)
        except DecodeError as e:
            logger.error(f"✘ Failed to parse ChartRequest: {e}")
            self.telemetry.increment('requests_dropped')
            return False

        log_data_summary(request.payload)
        return self.pool.submit(request.payload)

    def _open_socket(self):
        socket = self.context.socket(zmq.DEALER)
        socket.setsockopt(zmq.IDENTITY, self.config.identity.encode('utf-8'))
        socket.setsockopt(zmq.LINGER, 0)
        logger.info(f"Connecting to {self.config.endpoint} as '{self.config.identity}'…")
        socket.connect(self.config.endpoint)
        return socket

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals gracefully"""
        logger.info(f"🛑 Received signal {signum}. Shutting down gracefully...")
        self.stop()

    def stop(self):
        self.running = False

    def serve_forever(self):
        """Receive and dispatch chart requests until stopped or interrupted"""
        self.socket = self._open_socket()
        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)

        signal.signal(signal.SIGTERM, self._signal_handler)
        self.running = True
        logger.info("🟢 Awaiting incoming chart messages…")

        try:
            while self.running:
                events = dict(poller.poll(POLL_TIMEOUT_MS))
                if self.socket not in events:
                    continue
                frames = self.socket.recv_multipart()
                self.handle_frames(frames)
        except KeyboardInterrupt:
            logger.info("🛑 Keyboard interrupt received. Shutting down...")
        finally:
            self.running = False
            self.socket.close()
            self.socket = None
