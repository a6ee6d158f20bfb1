"""
Structured Document Models

Policy documents are nested JSON records. They are parsed once into a tagged
tree so every consumer works against three explicit node kinds instead of
inspecting raw JSON types at runtime:

- ScalarNode: a string, number or boolean leaf
- ListNode:   an ordered sequence of nodes
- MapNode:    an ordered sequence of (key, node) entries

JSON ``null`` values carry no information for the prompt and are dropped at
parse time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

ScalarValue = Union[str, int, float, bool]


@dataclass(frozen=True)
class ScalarNode:
    value: ScalarValue


@dataclass(frozen=True)
class ListNode:
    items: Tuple["Node", ...]

    def is_scalar_list(self) -> bool:
        return bool(self.items) and all(isinstance(i, ScalarNode) for i in self.items)


@dataclass(frozen=True)
class MapNode:
    entries: Tuple[Tuple[str, "Node"], ...]

    def get(self, key: str) -> Optional["Node"]:
        for k, node in self.entries:
            if k == key:
                return node
        return None

    def lookup(self, dot_path: str) -> Optional["Node"]:
        """
        Resolve a dot-separated path (``policies.visitation``).

        Returns ``None`` when any segment is missing or traverses a non-map.
        """
        current: Optional[Node] = self
        for segment in dot_path.split("."):
            if not isinstance(current, MapNode):
                return None
            current = current.get(segment)
            if current is None:
                return None
        return current


Node = Union[ScalarNode, ListNode, MapNode]


def to_node(raw: Any) -> Optional[Node]:
    """
    Convert parsed JSON into a tagged node tree.

    Raises
    ------
    TypeError
        If ``raw`` contains a value JSON cannot produce.
    """
    if raw is None:
        return None
    if isinstance(raw, (str, bool, int, float)):
        return ScalarNode(raw)
    if isinstance(raw, list):
        items = tuple(n for n in (to_node(item) for item in raw) if n is not None)
        return ListNode(items)
    if isinstance(raw, dict):
        entries = []
        for key, value in raw.items():
            node = to_node(value)
            if node is not None:
                entries.append((str(key), node))
        return MapNode(tuple(entries))
    raise TypeError(f"Unsupported document value type: {type(raw).__name__}")


@dataclass(frozen=True)
class PolicyDocument:
    """A structured policy or guide record loaded from the document store."""

    id: str
    title: str
    data: MapNode
