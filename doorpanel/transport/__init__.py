# doorpanel/transport/__init__.py

from .base import Transport, TransportReader, TransportWriter
from .errors import TransportError, TransportIOError, TransportOpenError
from .url import SerialUrlTransport

__all__ = [
    "Transport", "TransportReader", "TransportWriter",
    "TransportError", "TransportIOError", "TransportOpenError",
    "SerialUrlTransport",
]
