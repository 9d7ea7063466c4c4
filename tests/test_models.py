#!/usr/bin/env python3
"""
Tests for chart request decoding
"""

import json

import pytest

from corky_charts.errors import DecodeError
from corky_charts.models import ChartData, ChartRequest, Mark

T0 = 1_700_000_000_000


def _payload(**overrides):
    payload = {
        "title": "ETHUSDT 4h",
        "ticker": "ETHUSDT",
        "timeframe": "4h",
        "data": [[T0, 100, 110, 95, 105, 1200], [T0 + 14_400_000, 105, 112, 101, 102, 900]],
        "candleColors": ["#00FF00", "#FF0000"],
        "volumeColors": ["#00FF00", "#FF0000"],
        "cols": ["time", "open", "high", "low", "close", "volume"],
        "desc": "breakout",
        "plots": {"marks": [{"time": T0, "position": "below", "color": "#0000FF", "text": "L"}]},
        "chatId": 42,
    }
    payload.update(overrides)
    return payload


def _frames(payload, source="signals", command="chart"):
    return [b"rustcharts", json.dumps([source, command, payload]).encode("utf-8")]


def test_decodes_full_envelope():
    request = ChartRequest.from_frames(_frames(_payload()))
    data = request.payload

    assert request.source_tag == "signals"
    assert request.command == "chart"
    assert data.ticker == "ETHUSDT"
    assert data.candle_count == 2
    assert data.data[0] == [float(T0), 100.0, 110.0, 95.0, 105.0, 1200.0]
    assert data.volume_colors == ["#00FF00", "#FF0000"]
    assert data.chat_id == 42
    assert data.marks == [Mark(time=T0, position="below", color="#0000FF", text="L", size=1.0)]
    assert data.output_name == "ETHUSDT_4h.png"


def test_snake_case_keys_are_accepted():
    payload = _payload()
    payload["candle_colors"] = payload.pop("candleColors")
    payload["volume_colors"] = payload.pop("volumeColors")
    payload["chat_id"] = payload.pop("chatId")
    payload["subscriber_list"] = "vip"

    data = ChartData.from_dict(payload)

    assert data.candle_colors == ["#00FF00", "#FF0000"]
    assert data.chat_id == 42
    assert data.subscriber_list == "vip"


def test_optional_fields_default():
    payload = _payload()
    for key in ("volumeColors", "plots", "chatId", "cols"):
        payload.pop(key)

    data = ChartData.from_dict(payload)

    assert data.volume_colors is None
    assert data.marks == []
    assert data.chat_id is None
    assert data.cols == []


def test_empty_data_decodes():
    data = ChartData.from_dict(_payload(data=[], candleColors=[]))
    assert data.candle_count == 0


def test_rows_without_volume_are_accepted():
    data = ChartData.from_dict(_payload(data=[[T0, 1, 2, 0.5, 1.5]]))
    assert len(data.data[0]) == 5


@pytest.mark.parametrize("frames", [
    [b"rustcharts"],
    [b"rustcharts", b"\xff\xfe"],
    [b"rustcharts", b"{not json"],
    [b"rustcharts", b'["only", "two"]'],
    [b"rustcharts", b'{"a": 1}'],
])
def test_malformed_envelopes_raise(frames):
    with pytest.raises(DecodeError):
        ChartRequest.from_frames(frames)


@pytest.mark.parametrize("overrides", [
    {"data": [[T0, 1, 2, 3]]},
    {"data": [[T0, "1", 2, 0.5, 1.5]]},
    {"data": [[T0, True, 2, 0.5, 1.5]]},
    {"data": "rows"},
    {"candleColors": "#FFFFFF"},
    {"chatId": "not-a-number"},
    {"plots": {"marks": [{"time": T0, "position": "left", "color": "#FFFFFF"}]}},
    {"plots": {"marks": [{"time": T0, "position": "above", "color": "#FFFFFF", "size": 0}]}},
])
def test_invalid_payloads_raise(overrides):
    with pytest.raises(DecodeError):
        ChartData.from_dict(_payload(**overrides))


def test_missing_required_field_raises():
    payload = _payload()
    del payload["ticker"]
    with pytest.raises(DecodeError, match="ticker"):
        ChartData.from_dict(payload)


def test_non_finite_numbers_raise():
    text = '["s", "c", {"title": "t", "ticker": "X", "timeframe": "1h", "desc": "", ' \
           '"candleColors": [], "data": [[1, NaN, 2, 0, 1]]}]'
    with pytest.raises(DecodeError):
        ChartRequest.from_json(text)
