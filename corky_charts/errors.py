"""
Chart Service Errors

Exception taxonomy for the chart rendering service. Only ConfigError is
fatal; everything else is handled per request or per message.
"""


class ChartServiceError(Exception):
    """Base class for all chart service errors"""


class ConfigError(ChartServiceError):
    """Output directory or service settings could not be resolved at startup"""


class DecodeError(ChartServiceError):
    """Inbound envelope or payload is malformed"""


class NoDataError(ChartServiceError):
    """Chart request carries no candle rows"""


class GeometryError(ChartServiceError):
    """Layout or drawing failed for a single request"""


class EncodingError(ChartServiceError):
    """Rasterizing or writing the image failed for a single request"""


class NotificationError(ChartServiceError):
    """Downstream notification could not be sent"""
