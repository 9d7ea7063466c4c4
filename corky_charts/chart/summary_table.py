#!/usr/bin/env python3
"""
Summary Table Renderer

Computes the price summary for the rendered candles and draws it as a
fixed 3-row x 2-column panel in the table band above the chart.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import pandas as pd
from matplotlib.patches import Rectangle

from ..chart_config import ChartConfig, RGB
from .formatting import format_with_commas

logger = logging.getLogger(__name__)

ROW_LABELS = ("Current Price", "High (in plot)", "% from High")

# Shift text up from the cell center to leave visual bottom padding
TEXT_Y_ADJUSTMENT = 4


@dataclass(frozen=True)
class TableSummary:
    current_price: float
    highest_visible: float
    percent_from_high: float

    def rows(self) -> List[Tuple[str, str]]:
        return [
            (ROW_LABELS[0], f"${format_with_commas(self.current_price)}"),
            (ROW_LABELS[1], f"${format_with_commas(self.highest_visible)}"),
            (ROW_LABELS[2], f"{self.percent_from_high:.2f}%"),
        ]


def compute_summary(frame: pd.DataFrame) -> TableSummary:
    """Current price, highest high in the plot and the distance from that high in percent."""
    current_price = float(frame['close'].iloc[-1])
    highest_visible = float(frame['high'].max())
    if highest_visible > 0:
        percent_from_high = (highest_visible - current_price) / highest_visible * 100.0
    else:
        percent_from_high = 0.0
    return TableSummary(current_price, highest_visible, percent_from_high)


class SummaryTableRenderer:
    """Draws the summary table into an axes whose data units are table-band pixels."""

    def __init__(self, chart_config=ChartConfig):
        self.chart_config = chart_config

    def render(self, ax, summary: TableSummary, width: int, height: int, direction_color: RGB):
        """
        Draw the table.

        Args:
            ax: Axes covering exactly the table band
            summary: Values to show
            width: Table band width in pixels
            height: Table band height in pixels
            direction_color: Text color of the current price row
        """
        theme = self.chart_config.get_theme_colors()
        fonts = self.chart_config.get_fonts()
        to_mpl = self.chart_config.to_mpl

        ax.set_xlim(0, width)
        ax.set_ylim(height, 0)
        ax.set_axis_off()

        rows = summary.rows()
        cell_h = height / (len(rows) + 1)
        padding = theme['table_cell_padding']
        row_spacing = int(cell_h * theme['table_row_spacing'])
        row_height = int(cell_h) - row_spacing
        mid = width // 2
        cell_bg = to_mpl(theme['table_cell_bg'])

        for ri, (label, value) in enumerate(rows):
            row_top = ri * (row_height + row_spacing + theme['table_bottom_padding']) + padding
            text_y = row_top + row_height / 2 - TEXT_Y_ADJUSTMENT
            text_color = to_mpl(direction_color if ri == 0 else theme['text_color'])

            ax.add_patch(Rectangle((padding, row_top), mid - 2 * padding, row_height,
                                   facecolor=cell_bg, linewidth=0, gid='table_cell'))
            ax.add_patch(Rectangle((mid + padding, row_top), width - mid - 2 * padding, row_height,
                                   facecolor=cell_bg, linewidth=0, gid='table_cell'))

            for x, text in ((padding * 4, label), (mid + padding * 4, value)):
                ax.text(x, text_y, text, color=text_color, fontsize=fonts['table'],
                        fontfamily=fonts['family'], ha='left', va='center', gid=f'table_row_{ri}')

        logger.debug(
            f"Summary table: current {summary.current_price:.6g}, high {summary.highest_visible:.6g}, "
            f"{summary.percent_from_high:.2f}% from high"
        )
