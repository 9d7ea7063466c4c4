#!/usr/bin/env python3
"""
Tests for inbound message handling and outbound Telegram notifications
"""

import json
import logging

import pytest
import zmq

from corky_charts.chart_generator import ChartGenerator
from corky_charts.config import ServiceConfig
from corky_charts.errors import NotificationError
from corky_charts.models import ChartData
from corky_charts.notifier import TelegramNotifier, build_notification, describe_destination
from corky_charts.server import ChartServer
from corky_charts.telemetry import ServiceTelemetry

T0 = 1_700_000_000_000


class RecordingPool:
    """Accepts submissions until `capacity` is reached"""

    def __init__(self, capacity=10):
        self.capacity = capacity
        self.submitted = []
        self.telemetry = ServiceTelemetry()

    def submit(self, chart_data):
        if len(self.submitted) >= self.capacity:
            return False
        self.submitted.append(chart_data)
        return True


def _payload():
    return {
        "title": "SOLUSDT 15m",
        "ticker": "SOLUSDT",
        "timeframe": "15m",
        "data": [[T0, 20, 21, 19, 20.5, 10], [T0 + 900_000, 20.5, 22, 20, 21.5, 12]],
        "candleColors": ["#00FF00", "#00FF00"],
        "desc": "trend",
        "subscriberList": "premium",
    }


def _frames(payload):
    return [b"chart", json.dumps(["scanner", "render", payload]).encode("utf-8")]


@pytest.fixture
def server(tmp_path):
    pool = RecordingPool()
    return ChartServer(ServiceConfig(output_dir=tmp_path), pool, telemetry=pool.telemetry)


def test_valid_message_is_submitted(server, caplog):
    caplog.set_level(logging.INFO)

    assert server.handle_frames(_frames(_payload()))

    chart_data, = server.pool.submitted
    assert chart_data.ticker == "SOLUSDT"
    assert chart_data.candle_count == 2
    assert "SOLUSDT @ 15m [2 candles]" in caplog.text
    assert server.telemetry.snapshot()['counters']['requests_received'] == 1


def test_malformed_message_is_dropped(server, caplog):
    assert not server.handle_frames([b"chart", b"[1, 2"])
    assert not server.handle_frames([b"chart"])

    assert server.pool.submitted == []
    counters = server.telemetry.snapshot()['counters']
    assert counters['requests_received'] == 2
    assert counters['requests_dropped'] == 2
    assert "Failed to parse ChartRequest" in caplog.text


def test_rejected_submission_is_reported(tmp_path):
    pool = RecordingPool(capacity=0)
    server = ChartServer(ServiceConfig(output_dir=tmp_path), pool, telemetry=pool.telemetry)

    assert not server.handle_frames(_frames(_payload()))


def test_empty_chart_is_still_submitted(server):
    payload = _payload()
    payload["data"] = []

    assert server.handle_frames(_frames(payload))
    assert server.pool.submitted[0].candle_count == 0


def _chart_data(**kwargs):
    defaults = dict(title="t", ticker="BTCUSDT", timeframe="1h", data=[], candle_colors=[], desc="hello")
    defaults.update(kwargs)
    return ChartData(**defaults)


def test_build_notification_shape():
    notification = build_notification(_chart_data(chat_id=99), "/charts/BTCUSDT_1h.png")

    assert notification == {
        "topic": "telegram",
        "message": {
            "text": "hello",
            "image_path": "/charts/BTCUSDT_1h.png",
            "chat_id": 99,
            "subscriber_list": None,
        },
    }


def test_encode_produces_topic_and_envelope_frames():
    notifier = TelegramNotifier("inproc://unused")
    notification = build_notification(_chart_data(subscriber_list="vip"), "/c.png")

    topic, body = notifier.encode(notification)

    assert topic == b"telegram"
    assert json.loads(body) == ["ok", "send_message", {
        "text": "hello", "image_path": "/c.png", "chat_id": None, "subscriber_list": "vip",
    }]


def test_describe_destination():
    assert describe_destination(_chart_data(chat_id=5)) == "chat_id: 5"
    assert describe_destination(_chart_data(subscriber_list="vip")) == "subscriber_list: vip"
    assert describe_destination(_chart_data()) == "default destination"


def test_notification_reaches_the_broker():
    context = zmq.Context()
    broker = context.socket(zmq.ROUTER)
    broker.setsockopt(zmq.RCVTIMEO, 2000)
    broker.setsockopt(zmq.LINGER, 0)
    broker.bind("inproc://telegram-test")
    try:
        TelegramNotifier("inproc://telegram-test", context=context).send_chart_notification(
            _chart_data(chat_id=1), "/charts/BTCUSDT_1h.png")

        _identity, topic, body = broker.recv_multipart()
    finally:
        broker.close()
        context.term()

    assert topic == b"telegram"
    assert json.loads(body)[2]["image_path"] == "/charts/BTCUSDT_1h.png"


def test_notification_failure_raises_notification_error():
    context = zmq.Context()
    notifier = TelegramNotifier("not-a-valid-endpoint", context=context)
    try:
        with pytest.raises(NotificationError):
            notifier.send_chart_notification(_chart_data(), "/c.png")
    finally:
        context.term()


class InlinePool(RecordingPool):
    """Runs the handler on submit so the whole request path completes in the test thread"""

    def __init__(self, handler):
        super().__init__()
        self.handler = handler

    def submit(self, chart_data):
        self.handler(chart_data)
        return True


def test_empty_chart_end_to_end_logs_once(tmp_path, caplog):
    calls = []

    class Notifier:
        def send_chart_notification(self, chart_data, image_path):
            calls.append(image_path)

    output = tmp_path / "charts"
    generator = ChartGenerator(ServiceConfig(output_dir=output), notifier=Notifier())
    pool = InlinePool(generator.handle)
    server = ChartServer(ServiceConfig(output_dir=output), pool, telemetry=pool.telemetry)
    payload = _payload()
    payload["data"] = []

    caplog.set_level(logging.DEBUG)
    caplog.clear()
    assert server.handle_frames(_frames(payload))

    records = [r for r in caplog.records if r.name.startswith("corky_charts")]
    assert len(records) == 1
    assert records[0].levelno == logging.WARNING
    assert not output.exists()
    assert calls == []


def test_request_summary_is_a_single_record(server, caplog):
    caplog.set_level(logging.INFO)
    caplog.clear()

    server.handle_frames(_frames(_payload()))

    records = [r for r in caplog.records if r.name.startswith("corky_charts")]
    assert len(records) == 1
    assert "Desc: trend" in records[0].getMessage()
