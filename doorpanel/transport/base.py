# doorpanel/transport/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Transport(ABC):
    """
    Abstract simulator connection.

    Contract:
      - open()/close() manage the underlying connection.
      - read(n) blocks until n bytes arrived. It returns fewer than n bytes only
        when the peer closed the stream.
      - write(data) sends all of data and returns the number of bytes written.

    The connection is shared by two threads, one reading and one writing. Each
    gets its own handle via reader()/writer() so neither can do the other's job.
    """

    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def read(self, n: int) -> bytes: ...

    @abstractmethod
    def write(self, data: bytes) -> int: ...

    def reader(self) -> "TransportReader":
        return TransportReader(self)

    def writer(self) -> "TransportWriter":
        return TransportWriter(self)

    def __enter__(self) -> "Transport":
        self.open()
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()


class TransportReader:
    """Read side of a transport."""

    __slots__ = ("_transport",)

    def __init__(self, transport: Transport):
        self._transport = transport

    def read(self, n: int) -> bytes:
        return self._transport.read(n)


class TransportWriter:
    """Write side of a transport."""

    __slots__ = ("_transport",)

    def __init__(self, transport: Transport):
        self._transport = transport

    def write(self, data: bytes) -> int:
        return self._transport.write(data)
