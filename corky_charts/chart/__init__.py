"""
Chart Rendering Components

This package contains the modular components of the candlestick chart pipeline:
- ChartDataPreparer: Row validation, clamping and aggregate stats
- ScaleMapper: Time, log-price and volume transforms
- LayoutEngine: Canvas partitioning into title, table and chart regions
- SeriesRenderer: Grid, volume, wicks, bodies and current price line
- MarkerRenderer: Candle-anchored triangle markers
- SummaryTableRenderer: Price summary panel
- ChartRenderer: Figure composition and PNG export
"""

from .data_preparer import ChartDataPreparer, RenderStats, parse_hex_color
from .scale_mapper import ScaleMapper
from .layout_engine import LayoutEngine, ChartLayout, Region
from .series_renderer import SeriesRenderer
from .marker_renderer import MarkerRenderer, MarkerPlacement
from .summary_table import SummaryTableRenderer, TableSummary, compute_summary
from .chart_renderer import ChartRenderer, RenderedChart

__all__ = [
    'ChartDataPreparer',
    'RenderStats',
    'parse_hex_color',
    'ScaleMapper',
    'LayoutEngine',
    'ChartLayout',
    'Region',
    'SeriesRenderer',
    'MarkerRenderer',
    'MarkerPlacement',
    'SummaryTableRenderer',
    'TableSummary',
    'compute_summary',
    'ChartRenderer',
    'RenderedChart',
]
