"""
Corky Charts - Candlestick Chart Rendering Service

This package renders log-scale candlestick charts with volume, markers and a
summary table for chart requests, and announces them to the Telegram service.
"""

from .chart_generator import ChartGenerator, RenderOutcome
from .config import ServiceConfig
from .models import ChartData, ChartRequest, Mark

__all__ = [
    'ChartGenerator',
    'RenderOutcome',
    'ServiceConfig',
    'ChartData',
    'ChartRequest',
    'Mark',
]
