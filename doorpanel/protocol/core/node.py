# doorpanel/protocol/core/node.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence, Union

from .types import TEXT, decode_value, encode_value


@dataclass
class Attribute:
    id: int
    value: bytes = b""

    @classmethod
    def of(cls, attr_id: int, kind: str, value: Any) -> "Attribute":
        return cls(id=int(attr_id), value=encode_value(kind, value))

    @classmethod
    def from_u8(cls, attr_id: int, value: int) -> "Attribute":
        return cls.of(attr_id, "uint8", value)

    @classmethod
    def from_u16(cls, attr_id: int, value: int) -> "Attribute":
        return cls.of(attr_id, "uint16", value)

    @classmethod
    def from_i16(cls, attr_id: int, value: int) -> "Attribute":
        return cls.of(attr_id, "int16", value)

    @classmethod
    def from_f32(cls, attr_id: int, value: float) -> "Attribute":
        return cls.of(attr_id, "float", value)

    @classmethod
    def from_str(cls, attr_id: int, value: str) -> "Attribute":
        return cls.of(attr_id, TEXT, value)

    def decode(self, kind: str) -> Any:
        return decode_value(kind, self.value)


@dataclass
class Node:
    """
    One node of a Zusi message tree.

    Attributes and children keep their wire order. Nodes carry no behavior of
    their own beyond lookup and typed attribute decoding.
    """
    id: int
    attributes: List[Attribute] = field(default_factory=list)
    children: List["Node"] = field(default_factory=list)

    def find_attribute(self, ids: Union[int, Sequence[int]]) -> Optional[Attribute]:
        """Return the first attribute whose id is one of ``ids``."""
        wanted = (ids,) if isinstance(ids, int) else tuple(ids)
        for attr in self.attributes:
            if attr.id in wanted:
                return attr
        return None

    def value(self, ids: Union[int, Sequence[int]], kind: str) -> Optional[Any]:
        """
        Decoded value of the first matching attribute, or None.

        None means "not reported this cycle": either no attribute matched or
        its bytes do not fit ``kind``.
        """
        attr = self.find_attribute(ids)
        if attr is None:
            return None
        try:
            return attr.decode(kind)
        except ValueError:
            return None

    def children_with_id(self, node_id: int) -> Iterator["Node"]:
        return (c for c in self.children if c.id == node_id)

    def child(self, node_id: int) -> Optional["Node"]:
        return next(self.children_with_id(node_id), None)
