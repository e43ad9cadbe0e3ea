# doorpanel/protocol/handshake.py
from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol as TypingProtocol

from .core import Attribute, Node, NodeReader, encode_node
from .core import defs
from .errors import ProtocolError, UnexpectedNode

# Telemetry the panel needs: speed and door status.
CAB_DATA_IDS = (defs.FTD_SPEED, defs.FTD_DOOR_STATUS)


class Writer(TypingProtocol):
    def write(self, data: bytes) -> int: ...


class HandshakeRejected(ProtocolError):
    def __init__(self, step: str, result: Optional[int]):
        super().__init__(f"{step} rejected by simulator (result={result})")
        self.step = step
        self.result = result


def hello_node(client_name: str, client_version: str) -> Node:
    return Node(defs.CONNECTION, children=[
        Node(defs.HELLO, attributes=[
            Attribute.from_u16(defs.HELLO_PROTOCOL_VERSION, defs.PROTOCOL_VERSION),
            Attribute.from_u16(defs.HELLO_CLIENT_TYPE, defs.CLIENT_TYPE_CAB),
            Attribute.from_str(defs.HELLO_CLIENT_NAME, client_name),
            Attribute.from_str(defs.HELLO_CLIENT_VERSION, client_version),
        ]),
    ])


def needed_data_node(cab_data_ids: Iterable[int] = CAB_DATA_IDS, *, operations: bool = True) -> Node:
    requests = [
        Node(defs.DATA_FTD, attributes=[
            Attribute.from_u16(defs.NEEDED_DATA_ID, data_id) for data_id in cab_data_ids
        ]),
    ]
    if operations:
        requests.append(Node(defs.DATA_OPERATION))
    return Node(defs.CLIENT_APPLICATION, children=[Node(defs.NEEDED_DATA, children=requests)])


def _expect_ack(node: Node, parent_id: int, ack_id: int, step: str) -> Node:
    ack = node.child(ack_id) if node.id == parent_id else None
    if ack is None:
        raise UnexpectedNode(
            f"{step} (0x{parent_id:04X} > 0x{ack_id:04X})",
            f"node 0x{node.id:04X} with children {[hex(c.id) for c in node.children]}",
        )
    return ack


def perform_handshake(
    reader: NodeReader,
    writer: Writer,
    *,
    client_name: str,
    client_version: str,
    cab_data_ids: Iterable[int] = CAB_DATA_IDS,
    logger: Optional[logging.Logger] = None,
) -> str:
    """
    Announce the client and subscribe to telemetry and operation events.

    Returns the simulator version string reported in ACK_HELLO.
    """
    log = logger or logging.getLogger(__name__)

    writer.write(encode_node(hello_node(client_name, client_version)))
    ack = _expect_ack(reader.read_node(), defs.CONNECTION, defs.ACK_HELLO, "ACK_HELLO")
    result = ack.value(defs.ACK_HELLO_RESULT, "uint8")
    if result != 0:
        raise HandshakeRejected("HELLO", result)

    sim_version = ack.value(defs.ACK_HELLO_SIM_VERSION, "text") or ""
    log.info(
        "HELLO_ACK sim_version=%s info=%s",
        sim_version,
        ack.value(defs.ACK_HELLO_CONNECTION_INFO, "text"),
    )

    ids = list(cab_data_ids)
    writer.write(encode_node(needed_data_node(ids)))
    ack = _expect_ack(reader.read_node(), defs.CLIENT_APPLICATION, defs.ACK_NEEDED_DATA, "ACK_NEEDED_DATA")
    result = ack.value(defs.ACK_NEEDED_DATA_RESULT, "uint8")
    if result != 0:
        raise HandshakeRejected("NEEDED_DATA", result)

    log.info("NEEDED_DATA_ACK cab_data=%s operations=on", [hex(i) for i in ids])
    return sim_version
