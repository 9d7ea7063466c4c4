#!/usr/bin/env python3
"""Chart Data Preparer - Validates raw rows into a sorted candle frame plus aggregate stats."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..chart_config import ChartConfig, RGB
from ..errors import NoDataError
from ..models import ChartData

logger = logging.getLogger(__name__)

# Log scale is undefined at or below zero
PRICE_FLOOR = 1e-12

CANDLE_COLUMNS = ['timestamp', 'offset', 'open', 'high', 'low', 'close', 'volume', 'color', 'volume_color']


def parse_hex_color(hex_str: Optional[str], default: Optional[RGB] = None) -> RGB:
    """
    Parse "#RRGGBB" (leading '#' optional) into an RGB tuple.

    Anything that is not exactly six hex digits returns `default`,
    which is the generic mid-gray when not given.
    """
    if default is None:
        default = ChartConfig.THEME['parse_fallback']
    if not isinstance(hex_str, str):
        return default
    txt = hex_str.strip().lstrip('#')
    if len(txt) != 6:
        return default
    try:
        return (int(txt[0:2], 16), int(txt[2:4], 16), int(txt[4:6], 16))
    except ValueError:
        return default


def _color_at(colors: Optional[Sequence[str]], index: int, default: RGB, fallback: RGB) -> RGB:
    """
    Positional color lookup. Short or missing lists give the layer `default`;
    an entry that is present but malformed gives the parse `fallback`.
    """
    if not colors or index >= len(colors):
        return default
    return parse_hex_color(colors[index], fallback)


@dataclass(frozen=True)
class RenderStats:
    """Global aggregates shared read-only by every renderer"""
    min_price: float
    max_price: float
    max_volume: float
    first_timestamp: int
    last_offset: float
    candle_count: int


class ChartDataPreparer:
    """Prepares the canonical candle frame for chart rendering."""

    def __init__(self, chart_config=ChartConfig):
        self.chart_config = chart_config

    def prepare(self, chart_data: ChartData) -> Tuple[pd.DataFrame, RenderStats]:
        """
        Normalize raw rows into a sorted candle frame and compute stats.

        Raises:
            NoDataError: if the request carries no rows
        """
        if not chart_data.data:
            raise NoDataError(f"No data found for chart: {chart_data.title}")

        theme = self.chart_config.get_theme_colors()
        rows = chart_data.data

        # Colors travel with their rows through the sort below
        records = []
        for i, row in enumerate(rows):
            records.append((
                int(row[0]),
                row[1], row[2], row[3], row[4],
                row[5] if len(row) > 5 else 0.0,
                _color_at(chart_data.candle_colors, i, theme['default_candle'], theme['parse_fallback']),
                _color_at(chart_data.volume_colors, i, theme['default_volume'], theme['parse_fallback']),
            ))

        frame = pd.DataFrame.from_records(
            records,
            columns=['timestamp', 'open', 'high', 'low', 'close', 'volume', 'color', 'volume_color'],
        )

        prices = ['open', 'high', 'low', 'close']
        frame[prices] = frame[prices].astype(float).clip(lower=PRICE_FLOOR)
        frame['volume'] = frame['volume'].astype(float)

        if not frame['timestamp'].is_monotonic_increasing:
            logger.debug(f"Rows for {chart_data.ticker} arrived out of order, sorting by timestamp")
        frame = frame.sort_values('timestamp', kind='stable').reset_index(drop=True)

        first_ts = int(frame['timestamp'].iloc[0])
        # Offsets from the first candle keep magnitudes small
        frame['offset'] = (frame['timestamp'] - first_ts).astype(np.float64)
        frame = frame[CANDLE_COLUMNS]

        price_values = frame[prices].to_numpy()
        stats = RenderStats(
            min_price=float(price_values.min()),
            max_price=float(price_values.max()),
            max_volume=float(max(frame['volume'].max(), 0.0)),
            first_timestamp=first_ts,
            last_offset=float(frame['offset'].iloc[-1]),
            candle_count=len(frame),
        )

        logger.debug(
            f"Prepared {stats.candle_count} candles for {chart_data.ticker}: "
            f"price {stats.min_price:.6g}-{stats.max_price:.6g}, max volume {stats.max_volume:.6g}"
        )
        return frame, stats

    @staticmethod
    def validate_frame(frame: pd.DataFrame) -> bool:
        """Validate a candle frame has the columns the renderers read."""
        if frame is None or frame.empty:
            logger.error("Candle frame is None or empty")
            return False

        missing = set(CANDLE_COLUMNS) - set(frame.columns)
        if missing:
            logger.error(f"Missing columns: {missing}")
            return False

        return True
