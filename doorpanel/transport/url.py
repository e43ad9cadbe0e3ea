# doorpanel/transport/url.py
from __future__ import annotations

from typing import Optional

import serial
from serial import SerialException

from .base import Transport
from .errors import TransportIOError, TransportOpenError


class SerialUrlTransport(Transport):
    """
    Transport implemented via pyserial URL handlers.

    The simulator is reached through ``socket://host:port``; any other pyserial
    URL (``rfc2217://``, a device path) works the same way. With timeout=None
    read(n) blocks until n bytes arrived.
    """

    def __init__(self, url: str, timeout: Optional[float] = None):
        self.url = url
        self.timeout = timeout
        self.ser: Optional[serial.SerialBase] = None

    def open(self) -> None:
        try:
            self.ser = serial.serial_for_url(
                self.url,
                timeout=self.timeout,
                write_timeout=self.timeout,
            )
        except (SerialException, ValueError) as e:
            self.ser = None
            raise TransportOpenError(str(e)) from None

    def close(self) -> None:
        if self.ser is not None:
            try:
                self.ser.close()
            finally:
                self.ser = None

    def is_open(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def read(self, n: int) -> bytes:
        ser = self.ser
        if ser is None:
            raise TransportIOError("read while transport not open")

        try:
            buf = b""
            while len(buf) < n:
                chunk = ser.read(n - len(buf))
                if not chunk:
                    # finite timeout or non-socket URL: return what we have
                    break
                buf += chunk
            return buf
        except SerialException as e:
            raise TransportIOError(f"read failed: {e}") from None

    def write(self, data: bytes) -> int:
        ser = self.ser
        if ser is None:
            raise TransportIOError("write while transport not open")

        try:
            written = ser.write(data)
            ser.flush()
            return written
        except SerialException as e:
            raise TransportIOError(f"write failed: {e}") from None
