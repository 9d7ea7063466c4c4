#!/usr/bin/env python3
"""
Series Renderer

Draws the price series onto the chart axes, back to front:
grid, volume bars, wicks, candle bodies, then the current-price line.
Each layer gets its own zorder so later layers occlude earlier ones.
"""

import logging
from typing import Dict

import numpy as np
import pandas as pd
from matplotlib.patches import Rectangle

from ..chart_config import ChartConfig, RGB
from .scale_mapper import ScaleMapper

logger = logging.getLogger(__name__)

# Back-to-front layer order
Z_GRID = 1
Z_VOLUME = 2
Z_WICK = 3
Z_BODY = 4
Z_PRICE_LINE = 5
Z_MARKER = 6

# Fractions of the candle slot
BODY_FRACTION = 0.8
VOLUME_FRACTION = 0.8
WICK_FRACTION = 0.15

# 8 major price divisions with a minor line between each pair
PRICE_DIVISIONS = 8
TIME_DIVISIONS = 5


def direction_color(frame: pd.DataFrame, theme: Dict) -> RGB:
    """Green when the last candle closes at or above its open, red otherwise"""
    last = frame.iloc[-1]
    return theme['direction_up'] if last['close'] >= last['open'] else theme['direction_down']


class SeriesRenderer:
    """Renders grid, volume, wicks, bodies and the current price line."""

    def __init__(self, chart_config=ChartConfig):
        self.chart_config = chart_config

    def render(self, ax, frame: pd.DataFrame, scale: ScaleMapper):
        """Draw every series layer in order and return the last-candle direction color."""
        theme = self.chart_config.get_theme_colors()

        self._draw_grid(ax, scale, theme)
        self._draw_volume(ax, frame, scale, theme)
        self._draw_wicks(ax, frame, scale, theme)
        self._draw_bodies(ax, frame, scale)
        color = self._draw_price_line(ax, frame, scale, theme)

        logger.debug(f"Series rendered: {len(frame)} candles, slot width {scale.slot_width:.1f} ms")
        return color

    def _draw_grid(self, ax, scale: ScaleMapper, theme: Dict):
        """Horizontal lines at half-division log steps, vertical lines at time fifths."""
        to_mpl = self.chart_config.to_mpl
        width = theme['grid_linewidth']
        y_step = scale.log_range / PRICE_DIVISIONS

        for i in range(PRICE_DIVISIONS * 2 + 1):
            y = scale.min_log + y_step * (i / 2.0)
            color = theme['grid_major'] if i % 2 == 0 else theme['grid_minor']
            ax.plot([0.0, scale.time_domain_width], [y, y],
                    color=to_mpl(color), linewidth=width, zorder=Z_GRID, gid='grid')

        x_step = scale.time_domain_width / TIME_DIVISIONS
        for i in range(TIME_DIVISIONS + 1):
            x = x_step * i
            ax.plot([x, x], [scale.min_log, scale.max_log],
                    color=to_mpl(theme['grid_vertical']), linewidth=width, zorder=Z_GRID, gid='grid')

    def _draw_volume(self, ax, frame: pd.DataFrame, scale: ScaleMapper, theme: Dict):
        """One bar per candle rising from the bottom of the volume band."""
        left, right = scale.slot_bounds(frame['offset'].to_numpy(), VOLUME_FRACTION)
        tops = scale.volume_to_log(frame['volume'].to_numpy())
        alpha = theme['volume_alpha']

        for x0, x1, top, color in zip(left, right, tops, frame['volume_color']):
            ax.add_patch(Rectangle(
                (x0, scale.volume_bottom), x1 - x0, top - scale.volume_bottom,
                facecolor=self.chart_config.to_mpl(color, alpha),
                linewidth=0, zorder=Z_VOLUME, gid='volume',
            ))

    def _draw_wicks(self, ax, frame: pd.DataFrame, scale: ScaleMapper, theme: Dict):
        """Thin dark rectangles from low to high, drawn before bodies so bodies cap them."""
        left, right = scale.slot_bounds(frame['offset'].to_numpy(), WICK_FRACTION)
        lows = scale.price_to_log(frame['low'].to_numpy())
        highs = scale.price_to_log(frame['high'].to_numpy())
        face = self.chart_config.to_mpl(theme['wick_color'])

        for x0, x1, low, high in zip(left, right, lows, highs):
            ax.add_patch(Rectangle(
                (x0, low), x1 - x0, high - low,
                facecolor=face, linewidth=0, zorder=Z_WICK, gid='wick',
            ))

    def _draw_bodies(self, ax, frame: pd.DataFrame, scale: ScaleMapper):
        left, right = scale.slot_bounds(frame['offset'].to_numpy(), BODY_FRACTION)
        opens = scale.price_to_log(frame['open'].to_numpy())
        closes = scale.price_to_log(frame['close'].to_numpy())
        bottoms = np.minimum(opens, closes)
        tops = np.maximum(opens, closes)

        for x0, x1, bottom, top, color in zip(left, right, bottoms, tops, frame['color']):
            ax.add_patch(Rectangle(
                (x0, bottom), x1 - x0, top - bottom,
                facecolor=self.chart_config.to_mpl(color),
                linewidth=0, zorder=Z_BODY, gid='body',
            ))

    def _draw_price_line(self, ax, frame: pd.DataFrame, scale: ScaleMapper, theme: Dict) -> RGB:
        """Reference line at the last close across the whole time domain."""
        color = direction_color(frame, theme)
        y = float(scale.price_to_log(frame['close'].iloc[-1]))
        ax.plot([0.0, scale.time_domain_width], [y, y],
                color=self.chart_config.to_mpl(color), linewidth=theme['price_linewidth'],
                zorder=Z_PRICE_LINE, gid='price_line')
        return color
