#!/usr/bin/env python3
"""
Chart Renderer

This module composes the full chart figure from the prepared candles:
title band, summary table, and the log-scale price chart with volume,
candles and markers. It uses matplotlib's object-oriented API on an Agg
canvas so renders in separate threads never share pyplot state.
"""

import io
import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
import pandas as pd
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.ticker import FixedLocator, FuncFormatter, MaxNLocator

from ..chart_config import ChartConfig
from ..models import Mark
from .data_preparer import ChartDataPreparer, RenderStats
from .formatting import format_axis_price, format_offset_time
from .layout_engine import ChartLayout, LayoutEngine
from .marker_renderer import MarkerPlacement, MarkerRenderer
from .scale_mapper import ScaleMapper
from .series_renderer import SeriesRenderer
from .summary_table import SummaryTableRenderer, TableSummary, compute_summary

logger = logging.getLogger(__name__)

PRICE_LABELS = 8
TIME_LABELS = 16


@dataclass
class RenderedChart:
    """Composed figure plus the pieces tests and callers may want to inspect"""
    figure: Figure
    chart_ax: object
    table_ax: object
    layout: ChartLayout
    scale: ScaleMapper
    summary: TableSummary
    placements: List[MarkerPlacement]


class ChartRenderer:
    """Composes the chart figure and exports it to PNG bytes"""

    def __init__(self, chart_config=ChartConfig):
        """
        Initialize the chart renderer

        Args:
            chart_config: ChartConfig class with canvas, layout, theme and font settings
        """
        self.chart_config = chart_config
        self.layout = LayoutEngine(chart_config).compute()
        self.series_renderer = SeriesRenderer(chart_config)
        self.marker_renderer = MarkerRenderer(chart_config)
        self.table_renderer = SummaryTableRenderer(chart_config)

        canvas = chart_config.get_canvas()
        self.dpi = canvas['dpi']
        self.figure_size = (canvas['width'] / self.dpi, canvas['height'] / self.dpi)

    def compose(self, title: str, frame: pd.DataFrame, stats: RenderStats,
                marks: Sequence[Mark] = ()) -> RenderedChart:
        """
        Build the complete chart figure.

        Args:
            title: Chart title shown in the title band
            frame: Candle frame from ChartDataPreparer
            stats: Aggregates from ChartDataPreparer
            marks: Markers to snap onto candles

        Returns:
            RenderedChart with the figure and its axes
        """
        if not ChartDataPreparer.validate_frame(frame):
            raise ValueError("Candle frame is not renderable")

        theme = self.chart_config.get_theme_colors()
        scale = ScaleMapper(stats)

        figure = Figure(figsize=self.figure_size, dpi=self.dpi,
                        facecolor=self.chart_config.to_mpl(theme['background']))
        FigureCanvasAgg(figure)

        self._draw_title(figure, title, theme)

        chart_ax = figure.add_axes(self.layout.figure_rect(self.layout.plot))
        self._configure_chart_axes(chart_ax, scale, stats, theme)

        color = self.series_renderer.render(chart_ax, frame, scale)
        placements = self.marker_renderer.render(chart_ax, frame, marks, scale)

        table_ax = figure.add_axes(self.layout.figure_rect(self.layout.table))
        summary = compute_summary(frame)
        self.table_renderer.render(table_ax, summary, self.layout.table.width,
                                   self.layout.table.height, color)

        return RenderedChart(
            figure=figure,
            chart_ax=chart_ax,
            table_ax=table_ax,
            layout=self.layout,
            scale=scale,
            summary=summary,
            placements=placements,
        )

    def _draw_title(self, figure: Figure, title: str, theme):
        """Center the title over the plot, compensating for the right-hand price labels"""
        fonts = self.chart_config.get_fonts()
        layout = self.layout
        label_area = self.chart_config.get_layout()['label_area_right']
        x = (layout.canvas_width / 2 - label_area / 2) / layout.canvas_width
        y = 1.0 - (layout.title.top + layout.title.height / 2) / layout.canvas_height
        figure.text(x, y, title, ha='center', va='center',
                    fontsize=fonts['title'], fontfamily=fonts['family'],
                    color=self.chart_config.to_mpl(theme['text_color']))

    def _configure_chart_axes(self, ax, scale: ScaleMapper, stats: RenderStats, theme):
        fonts = self.chart_config.get_fonts()
        axis_color = self.chart_config.to_mpl(theme['axis_color'])

        ax.set_facecolor(self.chart_config.to_mpl(theme['background']))
        ax.set_xlim(*scale.x_range)
        ax.set_ylim(*scale.y_range)
        ax.grid(False)
        for spine in ax.spines.values():
            spine.set_color(axis_color)

        # Price labels on the right, next to the most recent candle
        ax.yaxis.tick_right()
        ax.yaxis.set_label_position('right')
        ax.set_ylabel('Price', fontsize=fonts['y_labels'], fontfamily=fonts['family'])
        ax.yaxis.set_major_locator(FixedLocator(np.linspace(scale.min_log, scale.max_log, PRICE_LABELS)))
        ax.yaxis.set_major_formatter(FuncFormatter(lambda y, _: format_axis_price(float(scale.log_to_price(y)))))

        ax.xaxis.set_major_locator(MaxNLocator(nbins=TIME_LABELS))
        ax.xaxis.set_major_formatter(FuncFormatter(lambda x, _: format_offset_time(stats.first_timestamp, x)))

        ax.tick_params(axis='x', labelsize=fonts['x_labels'], colors=axis_color, labelcolor='black')
        ax.tick_params(axis='y', labelsize=fonts['y_labels'], colors=axis_color, labelcolor='black')

    def to_png(self, rendered: RenderedChart) -> bytes:
        """
        Rasterize the composed figure

        Returns:
            PNG image as bytes
        """
        theme = self.chart_config.get_theme_colors()
        buffer = io.BytesIO()
        rendered.figure.savefig(
            buffer,
            format='png',
            dpi=self.dpi,
            facecolor=self.chart_config.to_mpl(theme['background']),
            edgecolor='none'
        )
        buffer.seek(0)
        return buffer.getvalue()
