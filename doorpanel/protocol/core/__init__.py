# doorpanel/protocol/core/__init__.py

from .node import Attribute, Node
from .wire import NodeReader, encode_node, decode_node

__all__ = [
    "Attribute", "Node",
    "NodeReader", "encode_node", "decode_node",
]
