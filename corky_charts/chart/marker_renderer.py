#!/usr/bin/env python3
"""Marker Renderer - Snaps markers to their anchor candle and draws triangles with optional labels."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from matplotlib.patches import Polygon

from ..chart_config import ChartConfig
from ..models import Mark
from .data_preparer import parse_hex_color
from .scale_mapper import ScaleMapper
from .series_renderer import Z_MARKER

logger = logging.getLogger(__name__)

# Vertical gap between the candle extreme and the marker, per unit of size
MARKER_OFFSET_FRACTION = 0.02
LABEL_OFFSET_FACTOR = 1.2


@dataclass(frozen=True)
class MarkerPlacement:
    """Where a marker ended up after snapping"""
    candle_index: int
    x: float
    y: float
    pointing: str  # 'down' for above-candle markers, 'up' for below


class MarkerRenderer:
    """Draws directional triangle markers anchored to candles."""

    def __init__(self, chart_config=ChartConfig):
        self.chart_config = chart_config

    def find_anchor(self, offsets: np.ndarray, mark_offset: float, scale: ScaleMapper) -> Optional[int]:
        """
        Index of the candle closest to `mark_offset`, or None when even the
        closest one is half a candle spacing or more away.
        """
        if offsets.size == 0:
            return None
        distances = np.abs(offsets - mark_offset)
        idx = int(np.argmin(distances))
        if distances[idx] < scale.candle_spacing / 2.0:
            return idx
        return None

    def render(self, ax, frame: pd.DataFrame, marks: Sequence[Mark], scale: ScaleMapper) -> List[MarkerPlacement]:
        """Draw every mark that snaps to a candle; marks that do not snap are skipped."""
        placements = []
        if not marks:
            return placements

        theme = self.chart_config.get_theme_colors()
        fonts = self.chart_config.get_fonts()
        offsets = frame['offset'].to_numpy()

        for mark in marks:
            mark_offset = scale.time_offset(mark.time)
            idx = self.find_anchor(offsets, mark_offset, scale)
            if idx is None:
                logger.debug(f"Dropping {mark.position} marker at {mark.time}: no candle within half a spacing")
                continue

            candle = frame.iloc[idx]
            x = float(candle['offset'])
            offset = MARKER_OFFSET_FRACTION * mark.size * scale.log_range
            half_width = scale.slot_width / 3.0 * mark.size
            half_height = offset / 2.0
            color = self.chart_config.to_mpl(parse_hex_color(mark.color, theme['parse_fallback']))

            if mark.position == 'above':
                y = float(np.log(candle['high'])) + offset
                vertices = [(x, y - half_height), (x - half_width, y + half_height), (x + half_width, y + half_height)]
                pointing, text_y, valign = 'down', y + offset * LABEL_OFFSET_FACTOR, 'bottom'
            else:
                y = float(np.log(candle['low'])) - offset
                vertices = [(x, y + half_height), (x - half_width, y - half_height), (x + half_width, y - half_height)]
                pointing, text_y, valign = 'up', y - offset * LABEL_OFFSET_FACTOR, 'top'

            ax.add_patch(Polygon(vertices, closed=True, facecolor=color, linewidth=0,
                                 zorder=Z_MARKER, gid=f'marker_{pointing}'))

            if mark.text:
                ax.text(x, text_y, mark.text, color=color,
                        fontsize=max(fonts['marker_min'], fonts['marker'] * mark.size),
                        fontfamily=fonts['family'], ha='center', va=valign,
                        zorder=Z_MARKER, gid='marker_label', clip_on=True)

            placements.append(MarkerPlacement(candle_index=idx, x=x, y=y, pointing=pointing))

        logger.debug(f"Markers: {len(placements)}/{len(marks)} placed")
        return placements
