"""Tagged-variant representation of parsed JSON/YAML document values.

The loader returns plain Python containers; :func:`decode_node` converts them
once, at the document boundary, into a closed set of immutable node types:

* :class:`StringNode`, :class:`NumberNode`, :class:`BoolNode`,
  :class:`NullNode` -- scalars.
* :class:`ArrayNode` -- an ordered list of nodes.
* :class:`ObjectNode` -- a keyed map of nodes.

The import walker dispatches on these variants with ``isinstance`` instead of
asserting ad-hoc Python types on loosely-typed values, so a field holding the
wrong kind of value is detected in one place.

Every node knows the JSON pointer it was decoded from (``path``), which
shape errors report back to the user.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

from apicatalog.document.pointer import escape_segment
from apicatalog.exceptions import SpecParseError


@dataclass(frozen=True)
class StringNode:
    value: str
    path: str = "#"

    def to_python(self) -> str:
        return self.value


@dataclass(frozen=True)
class NumberNode:
    value: Union[int, float]
    path: str = "#"

    def to_python(self) -> Union[int, float]:
        return self.value


@dataclass(frozen=True)
class BoolNode:
    value: bool
    path: str = "#"

    def to_python(self) -> bool:
        return self.value


@dataclass(frozen=True)
class NullNode:
    path: str = "#"

    def to_python(self) -> None:
        return None


@dataclass(frozen=True)
class ArrayNode:
    items: tuple[Node, ...] = ()
    path: str = "#"

    def __iter__(self) -> Iterator[Node]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self.items]


@dataclass(frozen=True)
class ObjectNode:
    """A keyed map of nodes, in document order.

    Accessors return ``None`` when a key is absent *or* holds a value of a
    different variant, so optional fields can be probed without type checks
    at every call site.
    """

    fields: dict[str, Node] = field(default_factory=dict)
    path: str = "#"

    def __contains__(self, key: str) -> bool:
        return key in self.fields

    def __len__(self) -> int:
        return len(self.fields)

    def keys(self) -> list[str]:
        return list(self.fields)

    def get(self, key: str) -> Optional[Node]:
        return self.fields.get(key)

    def string(self, key: str) -> Optional[str]:
        node = self.fields.get(key)
        return node.value if isinstance(node, StringNode) else None

    def object(self, key: str) -> Optional[ObjectNode]:
        node = self.fields.get(key)
        return node if isinstance(node, ObjectNode) else None

    def array(self, key: str) -> Optional[ArrayNode]:
        node = self.fields.get(key)
        return node if isinstance(node, ArrayNode) else None

    def ref(self) -> Optional[str]:
        """The ``$ref`` string of this object, if it has one."""
        return self.string("$ref")

    def sorted_items(self) -> list[tuple[str, Node]]:
        """Entries in lexicographic key order.

        Maps of named members (channels, servers, components, scopes,
        properties) are walked in this order so that the created asset graph
        does not depend on document key order.
        """
        return sorted(self.fields.items(), key=lambda item: item[0])

    def to_python(self) -> dict[str, Any]:
        return {key: value.to_python() for key, value in self.fields.items()}


Node = Union[StringNode, NumberNode, BoolNode, NullNode, ArrayNode, ObjectNode]


def decode_node(value: Any, path: str = "#") -> Node:
    """Convert a parsed JSON/YAML value into its tagged node.

    YAML timestamps (``2020-01-01``) are rendered as ISO strings, since the
    catalog stores JSON only.

    Raises:
        SpecParseError: If *value* contains a type that JSON cannot express.
    """
    if value is None:
        return NullNode(path)
    if isinstance(value, bool):
        return BoolNode(value, path)
    if isinstance(value, (int, float)):
        return NumberNode(value, path)
    if isinstance(value, str):
        return StringNode(value, path)
    if isinstance(value, (datetime.date, datetime.datetime)):
        return StringNode(value.isoformat(), path)
    if isinstance(value, dict):
        return ObjectNode(
            {
                str(key): decode_node(item, f"{path}/{escape_segment(str(key))}")
                for key, item in value.items()
            },
            path,
        )
    if isinstance(value, (list, tuple)):
        return ArrayNode(
            tuple(decode_node(item, f"{path}/{index}") for index, item in enumerate(value)),
            path,
        )
    raise SpecParseError(
        f"Unsupported value of type {type(value).__name__} at {path}"
    )


def node_kind(node: Node) -> str:
    """Human-readable variant name used in shape error messages."""
    return {
        StringNode: "string",
        NumberNode: "number",
        BoolNode: "boolean",
        NullNode: "null",
        ArrayNode: "array",
        ObjectNode: "object",
    }[type(node)]
