#!/usr/bin/env python3
"""
Tests for candle normalization: clamping, sorting, color fallback and stats.
"""

import pytest

from corky_charts.chart.data_preparer import PRICE_FLOOR, ChartDataPreparer, parse_hex_color
from corky_charts.chart_config import ChartConfig
from corky_charts.errors import NoDataError
from corky_charts.models import ChartData

T0 = 1_700_000_000_000
HOUR = 3_600_000


def _chart_data(rows, candle_colors=None, volume_colors=None):
    return ChartData(
        title="BTC 1h",
        ticker="BTC",
        timeframe="1h",
        data=rows,
        candle_colors=candle_colors if candle_colors is not None else [],
        volume_colors=volume_colors,
        desc="test chart",
    )


def test_parse_hex_color():
    """Valid hex parses to RGB; malformed input falls back to the given default"""
    assert parse_hex_color("#1A2B3C") == (26, 43, 60)
    assert parse_hex_color("1a2b3c") == (26, 43, 60)
    assert parse_hex_color("#12345") == ChartConfig.THEME['parse_fallback']
    assert parse_hex_color("#GG0000") == ChartConfig.THEME['parse_fallback']
    assert parse_hex_color("#1234567", default=(0, 0, 0)) == (0, 0, 0)
    assert parse_hex_color(None, default=(1, 2, 3)) == (1, 2, 3)


def test_prices_are_clamped_to_positive_floor():
    rows = [[T0, 0.0, 2.0, -5.0, 1.0, 10.0]]
    frame, stats = ChartDataPreparer().prepare(_chart_data(rows, ["#00FF00"]))

    assert frame.loc[0, 'open'] == PRICE_FLOOR
    assert frame.loc[0, 'low'] == PRICE_FLOOR
    assert stats.min_price == PRICE_FLOOR
    assert stats.max_price == 2.0


def test_missing_volume_defaults_to_zero():
    rows = [[T0, 1.0, 2.0, 0.5, 1.5], [T0 + HOUR, 1.5, 2.5, 1.0, 2.0, 40.0]]
    frame, stats = ChartDataPreparer().prepare(_chart_data(rows))

    assert list(frame['volume']) == [0.0, 40.0]
    assert stats.max_volume == 40.0


def test_rows_are_sorted_and_colors_follow_their_rows():
    rows = [
        [T0 + 2 * HOUR, 3.0, 3.5, 2.5, 3.2, 30.0],
        [T0, 1.0, 1.5, 0.5, 1.2, 10.0],
        [T0 + HOUR, 2.0, 2.5, 1.5, 2.2, 20.0],
    ]
    colors = ["#000003", "#000001", "#000002"]
    frame, stats = ChartDataPreparer().prepare(_chart_data(rows, colors, colors))

    assert list(frame['timestamp']) == [T0, T0 + HOUR, T0 + 2 * HOUR]
    assert list(frame['offset']) == [0.0, float(HOUR), float(2 * HOUR)]
    assert list(frame['color']) == [(0, 0, 1), (0, 0, 2), (0, 0, 3)]
    assert list(frame['volume_color']) == [(0, 0, 1), (0, 0, 2), (0, 0, 3)]
    assert stats.first_timestamp == T0
    assert stats.last_offset == 2 * HOUR
    assert stats.candle_count == 3


def test_short_color_lists_fall_back_per_layer():
    rows = [[T0 + i * HOUR, 1.0, 2.0, 0.5, 1.5, 5.0] for i in range(3)]
    frame, _ = ChartDataPreparer().prepare(_chart_data(rows, ["#FF0000", "oops"], None))

    theme = ChartConfig.THEME
    assert frame.loc[0, 'color'] == (255, 0, 0)
    # Present but malformed hex is mid-gray, a missing entry is the layer default
    assert frame.loc[1, 'color'] == theme['parse_fallback']
    assert frame.loc[2, 'color'] == theme['default_candle']
    assert all(c == theme['default_volume'] for c in frame['volume_color'])


def test_malformed_volume_color_is_mid_gray():
    rows = [[T0 + i * HOUR, 1.0, 2.0, 0.5, 1.5, 5.0] for i in range(2)]
    frame, _ = ChartDataPreparer().prepare(_chart_data(rows, volume_colors=["zzzzzz"]))

    assert frame.loc[0, 'volume_color'] == (128, 128, 128)
    assert frame.loc[1, 'volume_color'] == ChartConfig.THEME['default_volume']


def test_stats_cover_all_ohlc_values():
    rows = [
        [T0, 10.0, 12.0, 9.0, 11.0, 1.0],
        [T0 + HOUR, 11.0, 15.0, 8.0, 14.0, 3.0],
    ]
    _, stats = ChartDataPreparer().prepare(_chart_data(rows))

    assert stats.min_price == 8.0
    assert stats.max_price == 15.0
    assert stats.max_volume == 3.0


def test_empty_data_raises_no_data():
    with pytest.raises(NoDataError):
        ChartDataPreparer().prepare(_chart_data([]))
