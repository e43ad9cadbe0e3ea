# doorpanel/protocol/core/wire.py
from __future__ import annotations

import io
import logging
import struct
from typing import Callable, List, Optional

from doorpanel.protocol.errors import DecodeError
from .node import Attribute, Node

NODE_START = 0x00000000
NODE_END = 0xFFFFFFFF

_U32 = struct.Struct("<I")
_U16 = struct.Struct("<H")

# Attributes are small scalars or short strings; anything larger means framing is lost.
MAX_ATTRIBUTE_LEN = 64 * 1024


def encode_node(node: Node) -> bytes:
    """Serialize a node tree to Zusi wire format."""
    parts: List[bytes] = [_U32.pack(NODE_START), _U16.pack(node.id)]
    for attr in node.attributes:
        parts.append(_U32.pack(len(attr.value) + _U16.size))
        parts.append(_U16.pack(attr.id))
        parts.append(bytes(attr.value))
    for child in node.children:
        parts.append(encode_node(child))
    parts.append(_U32.pack(NODE_END))
    return b"".join(parts)


class NodeReader:
    """
    Decode complete node trees from a blocking byte source.

    ``read_exact(n)`` must return n bytes, or fewer only when the stream ended.
    """

    def __init__(
        self,
        read_exact: Callable[[int], bytes],
        *,
        max_attribute_len: int = MAX_ATTRIBUTE_LEN,
        logger: Optional[logging.Logger] = None,
    ):
        self._read_exact = read_exact
        self.max_attribute_len = int(max_attribute_len)
        self._log = logger or logging.getLogger(__name__)

    # ---------------- Public API ----------------
    def read_node(self) -> Node:
        """Block until the next top-level node is complete and return it."""
        marker = self._read_u32()
        if marker != NODE_START:
            raise DecodeError(f"Expected node start, got 0x{marker:08X}")
        node = self._read_body(depth=0)
        self._log.debug(
            "Decoded node id=0x%04X attrs=%d children=%d",
            node.id,
            len(node.attributes),
            len(node.children),
        )
        return node

    # ---------------- Helpers ----------------
    def _read_body(self, depth: int) -> Node:
        node = Node(id=self._read_u16())
        while True:
            word = self._read_u32()
            if word == NODE_END:
                return node
            if word == NODE_START:
                node.children.append(self._read_body(depth + 1))
                continue
            if word < _U16.size or word - _U16.size > self.max_attribute_len:
                raise DecodeError(
                    f"Invalid attribute length {word} in node 0x{node.id:04X} (depth {depth})"
                )
            attr_id = self._read_u16()
            node.attributes.append(Attribute(id=attr_id, value=self._read(word - _U16.size)))

    def _read(self, n: int) -> bytes:
        data = self._read_exact(n) if n else b""
        if len(data) != n:
            raise DecodeError(f"Stream ended inside a node ({len(data)}/{n} bytes)")
        return data

    def _read_u32(self) -> int:
        return _U32.unpack(self._read(_U32.size))[0]

    def _read_u16(self) -> int:
        return _U16.unpack(self._read(_U16.size))[0]


def decode_node(raw: bytes) -> Node:
    """
    Decode exactly one node from ``raw``.

    Whole-buffer counterpart of ``NodeReader`` for captured traffic and tests;
    the live receive path reads from the transport instead.
    """
    buf = io.BytesIO(raw)
    node = NodeReader(buf.read).read_node()
    rest = buf.read()
    if rest:
        raise DecodeError(f"{len(rest)} trailing bytes after node 0x{node.id:04X}")
    return node
