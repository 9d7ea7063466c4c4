#!/usr/bin/env python3
"""
Tests for canvas partitioning.
"""

import pytest

from corky_charts.chart.layout_engine import LayoutEngine
from corky_charts.chart_config import ChartConfig


def test_bands_stack_title_table_chart():
    layout = LayoutEngine().compute()

    assert layout.canvas_width == 1280 and layout.canvas_height == 960
    assert (layout.title.top, layout.title.height) == (0, 40)
    assert (layout.table.top, layout.table.height) == (40, 100)
    assert layout.chart.top == 140
    assert layout.chart.bottom == 960


def test_table_is_inset_on_both_sides():
    layout = LayoutEngine().compute()
    inset = int(1280 * 0.15)

    assert layout.table.left == inset
    assert layout.table.right == 1280 - inset


def test_plot_reserves_right_and_bottom_label_areas():
    layout = LayoutEngine().compute()
    cfg = ChartConfig.LAYOUT

    assert layout.plot.left == cfg['chart_margin'] + cfg['label_area_left']
    assert layout.plot.right == 1280 - cfg['chart_margin'] - cfg['label_area_right']
    assert layout.plot.bottom == 960 - cfg['chart_margin_bottom'] - cfg['label_area_bottom']
    assert layout.price_labels.left == layout.plot.right
    assert layout.price_labels.width == cfg['label_area_right']
    assert layout.time_labels.top == layout.plot.bottom


def test_figure_rect_uses_bottom_left_origin():
    layout = LayoutEngine().compute()
    left, bottom, width, height = layout.figure_rect(layout.title)

    assert left == 0.0
    assert bottom == pytest.approx(1.0 - 40 / 960)
    assert width == 1.0
    assert height == pytest.approx(40 / 960)


def test_oversized_header_is_rejected():
    class TinyCanvas(ChartConfig):
        CANVAS = {'width': 200, 'height': 120, 'dpi': 100}

    with pytest.raises(ValueError):
        LayoutEngine(TinyCanvas).compute()
