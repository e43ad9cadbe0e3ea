# doorpanel/protocol/__init__.py

# Core classes
from .core import Attribute, Node, NodeReader, encode_node, decode_node

__all__ = [
    "Attribute", "Node",
    "NodeReader", "encode_node", "decode_node"]
