#!/usr/bin/env python3
"""
Scale Mapper

Time, log-price and volume transforms for the chart axes. Every renderer
draws in (time offset in ms, ln(price)) data space produced here and never
touches raw timestamps or prices directly.
"""

import logging
from typing import Union

import numpy as np

from .data_preparer import RenderStats

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]

# Padding on the top of the price domain so the highest wick is never clipped
PRICE_PADDING_FACTOR = 1.002

# Trailing breathing room after the last candle, in candle spacings
TRAILING_CANDLES = 3.0

# Volume is drawn into this bottom fraction of the price-log range
VOLUME_BAND_FRACTION = 0.15

# Time span used when every candle shares one timestamp (e.g. a single candle)
DEGENERATE_SPAN_MS = 60_000.0


class ScaleMapper:
    """Builds the three coordinate transforms from normalized stats."""

    def __init__(self, stats: RenderStats):
        self.stats = stats

        self.time_domain_width = stats.last_offset
        if self.time_domain_width <= 0:
            logger.debug(f"Zero time span across {stats.candle_count} candle(s), using {DEGENERATE_SPAN_MS:.0f} ms")
            self.time_domain_width = DEGENERATE_SPAN_MS

        self.candle_spacing = self.time_domain_width / stats.candle_count
        self.padded_end = self.time_domain_width + TRAILING_CANDLES * self.candle_spacing

        self.min_log = float(np.log(stats.min_price))
        self.max_log = float(np.log(stats.max_price * PRICE_PADDING_FACTOR))
        self.log_range = self.max_log - self.min_log

        self.volume_bottom = self.min_log
        self.volume_top = self.min_log + VOLUME_BAND_FRACTION * self.log_range

    # ---- time -------------------------------------------------------------

    @property
    def x_range(self):
        return (0.0, self.padded_end)

    @property
    def slot_width(self) -> float:
        """Horizontal span allotted to one candle"""
        return self.time_domain_width / self.stats.candle_count

    def time_offset(self, timestamp_ms: ArrayLike) -> ArrayLike:
        """Absolute epoch milliseconds to offset from the first candle"""
        offset = np.asarray(timestamp_ms, dtype=np.float64) - float(self.stats.first_timestamp)
        return float(offset) if offset.ndim == 0 else offset

    def slot_bounds(self, offset: ArrayLike, fraction: float):
        """Left/right edges of a centered box taking `fraction` of the slot"""
        half = self.slot_width * fraction / 2.0
        return offset - half, offset + half

    # ---- price ------------------------------------------------------------

    @property
    def y_range(self):
        return (self.min_log, self.max_log)

    @staticmethod
    def price_to_log(price: ArrayLike) -> ArrayLike:
        return np.log(price)

    @staticmethod
    def log_to_price(log_value: ArrayLike) -> ArrayLike:
        return np.exp(log_value)

    # ---- volume -----------------------------------------------------------

    def volume_to_log(self, volume: ArrayLike) -> ArrayLike:
        """Map a volume into the bottom band of the price-log range"""
        if self.stats.max_volume <= 0:
            if isinstance(volume, np.ndarray):
                return np.full(volume.shape, self.volume_bottom)
            return self.volume_bottom
        normalized = volume / self.stats.max_volume
        return self.volume_bottom + normalized * (self.volume_top - self.volume_bottom)
