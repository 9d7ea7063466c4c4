#!/usr/bin/env python3
"""Layout Engine - Partitions the canvas into title, summary table and chart regions."""

import logging
from dataclasses import dataclass
from typing import List

from ..chart_config import ChartConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
    """Pixel rectangle with a top-left origin"""
    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height


@dataclass(frozen=True)
class ChartLayout:
    """Region sizes computed once per canvas and shared by every renderer"""
    canvas_width: int
    canvas_height: int
    title: Region
    table: Region
    chart: Region
    plot: Region
    price_labels: Region
    time_labels: Region

    def figure_rect(self, region: Region) -> List[float]:
        """Convert a pixel region into matplotlib's [left, bottom, width, height] figure fractions"""
        return [
            region.left / self.canvas_width,
            1.0 - region.bottom / self.canvas_height,
            region.width / self.canvas_width,
            region.height / self.canvas_height,
        ]


class LayoutEngine:
    """Computes the chart layout from the canvas and layout configuration."""

    def __init__(self, chart_config=ChartConfig):
        self.chart_config = chart_config

    def compute(self) -> ChartLayout:
        canvas = self.chart_config.get_canvas()
        layout = self.chart_config.get_layout()
        width, height = canvas['width'], canvas['height']

        title_h = layout['title_height']
        table_h = layout['table_height']
        header_h = title_h + table_h
        if header_h >= height:
            raise ValueError(f"Header bands ({header_h}px) do not fit a {height}px canvas")

        title = Region(0, 0, width, title_h)

        inset = int(width * layout['table_margin_fraction'])
        table = Region(inset, title_h, width - 2 * inset, table_h)

        chart = Region(0, header_h, width, height - header_h)

        margin = layout['chart_margin']
        plot_left = chart.left + margin + layout['label_area_left']
        plot_top = chart.top + margin
        plot_right = chart.right - margin - layout['label_area_right']
        plot_bottom = chart.bottom - layout['chart_margin_bottom'] - layout['label_area_bottom']
        if plot_right <= plot_left or plot_bottom <= plot_top:
            raise ValueError("Chart margins leave no room for the plot area")

        plot = Region(plot_left, plot_top, plot_right - plot_left, plot_bottom - plot_top)
        price_labels = Region(plot.right, plot.top, layout['label_area_right'], plot.height)
        time_labels = Region(plot.left, plot.bottom, plot.width, layout['label_area_bottom'])

        result = ChartLayout(
            canvas_width=width,
            canvas_height=height,
            title=title,
            table=table,
            chart=chart,
            plot=plot,
            price_labels=price_labels,
            time_labels=time_labels,
        )
        logger.debug(f"Layout computed: plot {plot.width}x{plot.height} at ({plot.left}, {plot.top})")
        return result
