"""
Price and time label formatting shared by the axes, the summary table and the logs.
"""

from datetime import datetime, timedelta


def format_with_commas(price: float) -> str:
    """Whole-dollar price with thousands separators; small prices keep significant digits."""
    if abs(price) >= 10:
        return f"{int(round(price)):,}"
    return f"{price:.6g}"


def round_axis_price(price: float) -> float:
    """Round a tick price to a step that reads well at its magnitude."""
    if price >= 100_000:
        step = 500.0
    elif price >= 10_000:
        step = 100.0
    elif price >= 1_000:
        step = 50.0
    elif price >= 10:
        step = 10.0
    else:
        return round(price, 2)
    return round(price / step) * step


def format_axis_price(price: float) -> str:
    rounded = round_axis_price(price)
    if rounded >= 10:
        return f"${int(rounded):,}"
    return f"${rounded:,.2f}"


def format_offset_time(first_timestamp_ms: int, offset_ms: float, fmt: str = '%m-%d %H:%M') -> str:
    """Local wall-clock label for a time offset from the first candle."""
    start = datetime.fromtimestamp(first_timestamp_ms / 1000.0)
    return (start + timedelta(milliseconds=offset_ms)).strftime(fmt)


def format_timestamp(timestamp_ms: float, fmt: str = '%Y-%m-%d %H:%M:%S') -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000.0).strftime(fmt)
