#!/usr/bin/env python3
"""
Chart Generator

Runs the rendering pipeline for one chart request: prepare candles,
compose the figure, write the PNG, and notify the Telegram service.
Every failure is contained in the returned RenderOutcome so one bad
request never affects others rendering at the same time.
"""

import time
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .chart import ChartDataPreparer, ChartRenderer
from .chart.formatting import format_with_commas
from .chart_config import ChartConfig
from .config import ServiceConfig
from .errors import ChartServiceError, EncodingError, GeometryError, NoDataError, NotificationError
from .models import ChartData
from .notifier import TelegramNotifier
from .telemetry import ServiceTelemetry
from .transport import OutputWriter

logger = logging.getLogger(__name__)

STATUS_RENDERED = 'rendered'
STATUS_NO_DATA = 'no_data'
STATUS_FAILED = 'failed'


@dataclass
class RenderOutcome:
    """Result of handling one chart request"""
    status: str
    image_path: Optional[Path] = None
    error: Optional[ChartServiceError] = None
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == STATUS_RENDERED


class ChartGenerator:
    """Generate candlestick chart images for chart requests"""

    def __init__(self, config: ServiceConfig, notifier: Optional[TelegramNotifier] = None,
                 telemetry: Optional[ServiceTelemetry] = None, chart_config=ChartConfig):
        """
        Initialize the chart generator

        Args:
            config: Immutable service configuration (output directory, endpoints)
            notifier: Telegram notifier; None disables notifications
            telemetry: Shared telemetry collector
            chart_config: Chart rendering configuration
        """
        self.config = config
        self.notifier = notifier
        self.telemetry = telemetry or ServiceTelemetry()
        self.preparer = ChartDataPreparer(chart_config)
        self.renderer = ChartRenderer(chart_config)
        self.writer = OutputWriter(config.output_dir)

    def render_png(self, chart_data: ChartData) -> bytes:
        """
        Render a chart to PNG bytes without writing or notifying

        Raises:
            NoDataError: if the request carries no rows
            GeometryError: if layout or drawing fails
            EncodingError: if rasterizing fails
        """
        try:
            frame, stats = self.preparer.prepare(chart_data)
        except NoDataError:
            raise
        except Exception as e:
            raise GeometryError(f"Failed to normalize candles: {e}") from e

        logger.info(
            f"Price range: ${format_with_commas(stats.min_price)} - ${format_with_commas(stats.max_price)}"
        )

        try:
            rendered = self.renderer.compose(chart_data.title, frame, stats, chart_data.marks)
        except Exception as e:
            raise GeometryError(f"Failed to lay out chart: {e}") from e

        try:
            return self.renderer.to_png(rendered)
        except Exception as e:
            raise EncodingError(f"Failed to rasterize chart: {e}") from e

    def handle(self, chart_data: ChartData) -> RenderOutcome:
        """
        Render, write and announce one chart

        Args:
            chart_data: Decoded chart payload

        Returns:
            RenderOutcome describing what happened; never raises for per-request failures
        """
        context = f"{chart_data.ticker} {chart_data.timeframe} [{chart_data.candle_count} candles]"

        if not chart_data.data:
            logger.warning(f"⚠️  No data found for chart '{chart_data.title}' ({context}), skipping")
            self.telemetry.increment('charts_no_data')
            return RenderOutcome(status=STATUS_NO_DATA, error=NoDataError(chart_data.title))

        logger.info(f"🖼️  Processing chart: '{chart_data.title}' with {chart_data.candle_count} candles")
        started = time.perf_counter()

        try:
            png = self.render_png(chart_data)
            image_path = self.writer.save_bytes(chart_data.output_name, png)
        except NoDataError as e:
            logger.warning(f"⚠️  {e} ({context})")
            self.telemetry.increment('charts_no_data')
            return RenderOutcome(status=STATUS_NO_DATA, error=e)
        except ChartServiceError as e:
            duration = time.perf_counter() - started
            logger.error(f"❌ Chart render failed for {context}: {e}")
            self.telemetry.increment('charts_failed')
            return RenderOutcome(status=STATUS_FAILED, error=e, duration=duration)

        duration = time.perf_counter() - started
        self.telemetry.increment('charts_rendered')
        self.telemetry.record_render(duration)
        logger.info(f"✅ Chart processing complete. Saved to: {image_path} ({duration:.2f}s)")

        self._notify(chart_data, image_path, context)
        return RenderOutcome(status=STATUS_RENDERED, image_path=image_path, duration=duration)

    def _notify(self, chart_data: ChartData, image_path: Path, context: str):
        if self.notifier is None:
            return
        try:
            self.notifier.send_chart_notification(chart_data, str(image_path))
        except NotificationError as e:
            self.telemetry.increment('notifications_failed')
            logger.error(f"❌ Failed to send telegram notification for {context}: {e}")
