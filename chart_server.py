#!/usr/bin/env python3
"""
Chart Server

Renders candlestick charts for chart requests arriving over ZeroMQ and
hands the resulting PNGs to the Telegram service.

Features:
- Log-scale price chart with volume overlay, markers and a summary table
- Bounded render pool with admission control
- Per-request error isolation (one bad request never stops the service)
- Output directory from CHARTS_OUTPUT_DIR or ~/.corky/config.toml
"""

import sys
import logging

from dotenv import load_dotenv

from corky_charts.chart_generator import ChartGenerator
from corky_charts.config import ServiceConfig
from corky_charts.errors import ConfigError
from corky_charts.notifier import TelegramNotifier
from corky_charts.server import ChartServer
from corky_charts.telemetry import ServiceTelemetry
from corky_charts.worker_pool import RenderWorkerPool

logger = logging.getLogger(__name__)


def main():
    """Main entry point"""
    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()
        ]
    )
    logging.getLogger("matplotlib").setLevel(logging.WARNING)

    load_dotenv()

    logger.info("📈 Chart Server")
    logger.info("=" * 60)

    try:
        config = ServiceConfig.from_env()
    except ConfigError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    logger.info(f"Using output directory: {config.output_dir}")

    telemetry = ServiceTelemetry()
    generator = ChartGenerator(config, notifier=TelegramNotifier(config.notify_endpoint), telemetry=telemetry)
    pool = RenderWorkerPool(generator.handle, workers=config.workers,
                            queue_size=config.queue_size, telemetry=telemetry)
    server = ChartServer(config, pool, telemetry=telemetry)

    pool.start()
    try:
        server.serve_forever()
    except Exception as e:
        logger.error(f"❌ Fatal error: {e}")
        sys.exit(1)
    finally:
        pool.shutdown(wait=True)
        telemetry.log_summary()


if __name__ == "__main__":
    main()
