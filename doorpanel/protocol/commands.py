# doorpanel/protocol/commands.py
from __future__ import annotations

from typing import Iterable

from .core import Attribute, Node
from .core import defs


def key_input(assignment: int, command: int) -> Node:
    """Keypress on a keyboard assignment (down or up, as encoded in ``command``)."""
    return Node(defs.INPUT_KEY, attributes=[
        Attribute.from_u16(defs.INPUT_ASSIGNMENT, assignment),
        Attribute.from_u16(defs.INPUT_COMMAND, command),
    ])


def switch_input(assignment: int, notch: int) -> Node:
    """Move the switch on ``assignment`` to an absolute notch."""
    return Node(defs.INPUT_KEY, attributes=[
        Attribute.from_u16(defs.INPUT_ASSIGNMENT, assignment),
        Attribute.from_u16(defs.INPUT_ACTION, defs.ACTION_ABSOLUTE_NOTCH),
        Attribute.from_u16(defs.INPUT_POSITION, notch),
    ])


def input_batch(inputs: Iterable[Node]) -> Node:
    return Node(defs.CLIENT_APPLICATION, children=[
        Node(defs.INPUT, children=list(inputs)),
    ])
