#!/usr/bin/env python3
"""
Telegram Chart Notifier

Hands rendered charts to the external Telegram service over ZeroMQ.
Fire-and-forget: nothing is awaited, and a failure never affects the image
that was already written.
"""

import json
import logging
from typing import Any, Dict, Optional

import zmq

from .errors import NotificationError
from .models import ChartData

logger = logging.getLogger(__name__)

TELEGRAM_TOPIC = 'telegram'
SEND_COMMAND = 'send_message'

# Milliseconds; bounds how long a missing peer can hold a worker or shutdown
SEND_TIMEOUT_MS = 1000
LINGER_MS = 1000


def build_notification(chart_data: ChartData, image_path: str) -> Dict[str, Any]:
    """Notification body for the Telegram service"""
    return {
        'topic': TELEGRAM_TOPIC,
        'message': {
            'text': chart_data.desc,
            'image_path': image_path,
            'chat_id': chart_data.chat_id,
            'subscriber_list': chart_data.subscriber_list,
        }
    }


def describe_destination(chart_data: ChartData) -> str:
    if chart_data.chat_id is not None:
        return f"chat_id: {chart_data.chat_id}"
    if chart_data.subscriber_list:
        return f"subscriber_list: {chart_data.subscriber_list}"
    return "default destination"


class TelegramNotifier:
    """Sends chart notifications to the Telegram service"""

    def __init__(self, endpoint: str, context: Optional[zmq.Context] = None):
        """
        Initialize the notifier

        Args:
            endpoint: ZeroMQ endpoint the Telegram service is reachable through
            context: ZeroMQ context (defaults to the process-wide instance)
        """
        self.endpoint = endpoint
        self.context = context or zmq.Context.instance()

    def encode(self, notification: Dict[str, Any]) -> list:
        """Multipart frames: topic, then the ["ok", command, message] JSON envelope"""
        envelope = ["ok", SEND_COMMAND, notification['message']]
        return [notification['topic'].encode('utf-8'), json.dumps(envelope).encode('utf-8')]

    def send_chart_notification(self, chart_data: ChartData, image_path: str):
        """
        Send the chart notification

        Raises:
            NotificationError: if the message could not be handed to ZeroMQ
        """
        notification = build_notification(chart_data, image_path)
        frames = self.encode(notification)

        # Sockets are not thread-safe, so every send gets its own
        try:
            socket = self.context.socket(zmq.DEALER)
        except zmq.ZMQError as e:
            raise NotificationError(f"Could not create notification socket: {e}") from e

        try:
            socket.setsockopt(zmq.LINGER, LINGER_MS)
            socket.setsockopt(zmq.SNDTIMEO, SEND_TIMEOUT_MS)
            socket.connect(self.endpoint)
            socket.send_multipart(frames)
        except zmq.ZMQError as e:
            raise NotificationError(f"Failed to send telegram notification to {self.endpoint}: {e}") from e
        finally:
            socket.close()

        logger.info(f"📲 Telegram notification sent to {describe_destination(chart_data)}")
