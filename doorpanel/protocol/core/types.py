# doorpanel/protocol/core/types.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict
import struct


@dataclass(frozen=True)
class PrimitiveCodec:
    fmt: str  # little-endian struct format
    size: int


# Zusi attribute values are little-endian on the wire.
PRIMITIVES: Dict[str, PrimitiveCodec] = {
    "uint8":  PrimitiveCodec(fmt="<B", size=1),
    "int8":   PrimitiveCodec(fmt="<b", size=1),
    "uint16": PrimitiveCodec(fmt="<H", size=2),
    "int16":  PrimitiveCodec(fmt="<h", size=2),
    "uint32": PrimitiveCodec(fmt="<I", size=4),
    "int32":  PrimitiveCodec(fmt="<i", size=4),
    "float":  PrimitiveCodec(fmt="<f", size=4),
}

TEXT = "text"


def decode_value(kind: str, raw: bytes) -> Any:
    """
    Decode raw attribute bytes as ``kind``.

    Raises ValueError on a length mismatch or invalid UTF-8, NotImplementedError
    on an unknown kind.
    """
    if kind == TEXT:
        return bytes(raw).decode("utf-8")

    if kind not in PRIMITIVES:
        raise NotImplementedError(f"Unknown attribute kind '{kind}'")

    codec = PRIMITIVES[kind]
    if len(raw) != codec.size:
        raise ValueError(f"Raw bytes length {len(raw)} != expected {codec.size} for '{kind}'")
    return struct.unpack(codec.fmt, raw)[0]


def encode_value(kind: str, value: Any) -> bytes:
    if kind == TEXT:
        return str(value).encode("utf-8")

    if kind not in PRIMITIVES:
        raise NotImplementedError(f"Unknown attribute kind '{kind}'")
    return struct.pack(PRIMITIVES[kind].fmt, value)
