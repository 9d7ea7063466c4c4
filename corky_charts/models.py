#!/usr/bin/env python3
"""
Chart Request Models

Typed views of the inbound chart request envelope. Decoding is strict about
structure (anything the renderer cannot work with raises DecodeError) and
lenient about key spelling (camelCase and snake_case are both accepted).
"""

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .errors import DecodeError

MARK_POSITIONS = ('above', 'below')


def _pick(payload: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key among alternative spellings"""
    for key in keys:
        if key in payload:
            return payload[key]
    return default


def _require(payload: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    raise DecodeError(f"Missing required field '{keys[0]}'")


def _as_number(value: Any, where: str) -> float:
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"Non-numeric value {value!r} in {where}")
    number = float(value)
    if not math.isfinite(number):
        raise DecodeError(f"Non-finite value {value!r} in {where}")
    return number


@dataclass(frozen=True)
class Mark:
    """Positional marker drawn next to the candle closest to `time`"""
    time: int
    position: str
    color: str
    text: Optional[str] = None
    size: float = 1.0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'Mark':
        if not isinstance(payload, dict):
            raise DecodeError(f"Mark must be an object, got {type(payload).__name__}")

        time = int(_as_number(_require(payload, 'time'), 'mark.time'))
        position = _require(payload, 'position')
        if position not in MARK_POSITIONS:
            raise DecodeError(f"Mark position must be one of {MARK_POSITIONS}, got {position!r}")

        color = _require(payload, 'color')
        if not isinstance(color, str):
            raise DecodeError("Mark color must be a string")

        text = payload.get('text')
        if text is not None and not isinstance(text, str):
            text = str(text)

        size = payload.get('size')
        size = 1.0 if size is None else _as_number(size, 'mark.size')
        if size <= 0:
            raise DecodeError(f"Mark size must be positive, got {size}")

        return cls(time=time, position=position, color=color, text=text, size=size)


@dataclass
class ChartData:
    """Chart payload: candle rows, colors, markers and notification routing hints"""
    title: str
    ticker: str
    timeframe: str
    data: List[List[float]]
    candle_colors: List[str]
    desc: str
    cols: List[str] = field(default_factory=list)
    volume_colors: Optional[List[str]] = None
    marks: List[Mark] = field(default_factory=list)
    chat_id: Optional[int] = None
    subscriber_list: Optional[str] = None

    @property
    def output_name(self) -> str:
        """File name of the rendered chart"""
        return f"{self.ticker}_{self.timeframe}.png"

    @property
    def candle_count(self) -> int:
        return len(self.data)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'ChartData':
        """
        Build ChartData from the decoded JSON payload.

        Raises:
            DecodeError: if a required field is missing or a row is malformed
        """
        if not isinstance(payload, dict):
            raise DecodeError(f"Chart payload must be an object, got {type(payload).__name__}")

        rows = _require(payload, 'data')
        if not isinstance(rows, list):
            raise DecodeError("'data' must be a list of rows")

        data = []
        for i, row in enumerate(rows):
            if not isinstance(row, list) or len(row) < 5:
                raise DecodeError(f"Row {i} must have at least 5 numeric fields")
            data.append([_as_number(v, f'data[{i}]') for v in row])

        candle_colors = _require(payload, 'candleColors', 'candle_colors')
        if not isinstance(candle_colors, list):
            raise DecodeError("'candleColors' must be a list")

        volume_colors = _pick(payload, 'volumeColors', 'volume_colors')
        if volume_colors is not None and not isinstance(volume_colors, list):
            raise DecodeError("'volumeColors' must be a list")

        plots = payload.get('plots') or {}
        if not isinstance(plots, dict):
            raise DecodeError("'plots' must be an object")
        marks = [Mark.from_dict(m) for m in plots.get('marks') or []]

        chat_id = _pick(payload, 'chatId', 'chat_id')
        if chat_id is not None:
            try:
                chat_id = int(chat_id)
            except (TypeError, ValueError):
                raise DecodeError(f"Invalid chat id {chat_id!r}")

        return cls(
            title=str(_require(payload, 'title')),
            ticker=str(_require(payload, 'ticker')),
            timeframe=str(_require(payload, 'timeframe')),
            data=data,
            candle_colors=[str(c) for c in candle_colors],
            desc=str(_require(payload, 'desc')),
            cols=[str(c) for c in payload.get('cols') or []],
            volume_colors=[str(c) for c in volume_colors] if volume_colors is not None else None,
            marks=marks,
            chat_id=chat_id,
            subscriber_list=_pick(payload, 'subscriberList', 'subscriber_list'),
        )


@dataclass
class ChartRequest:
    """Inbound envelope: (source tag, command, chart payload)"""
    source_tag: str
    command: str
    payload: ChartData

    @classmethod
    def from_json(cls, text: str) -> 'ChartRequest':
        try:
            envelope = json.loads(text)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Invalid JSON envelope: {e}") from e

        if not isinstance(envelope, list) or len(envelope) != 3:
            raise DecodeError("Envelope must be a [source, command, payload] triple")

        source_tag, command, payload = envelope
        return cls(
            source_tag=str(source_tag),
            command=str(command),
            payload=ChartData.from_dict(payload),
        )

    @classmethod
    def from_frames(cls, frames: Sequence[bytes]) -> 'ChartRequest':
        """Decode a multipart message; the JSON envelope is the second frame"""
        if len(frames) < 2:
            raise DecodeError("Received invalid or missing JSON payload")
        try:
            text = frames[1].decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodeError(f"Payload is not valid UTF-8: {e}") from e
        return cls.from_json(text)
