"""
NodeList: an ordered, filterable collection of Nodes.

Built once from an engine result set. Construction policy:
  - element        → element Node (snapshot of its outer markup)
  - non-blank text → text-only Node
  - blank text     → dropped
  - comment / PI   → dropped
  - scalars (XPath count()/boolean()) → dropped

Filtering returns a new NodeList and never changes the source list.
"""

from typing import Callable, Iterable, Iterator, Optional, Union

from . import engine


class NodeList:
    """Ordered Nodes from one query or traversal (duplicates are kept)."""

    def __init__(self, nodes: Optional[Iterable] = None):
        self._nodes = list(nodes) if nodes is not None else []

    @classmethod
    def from_result_set(cls, items: Iterable) -> "NodeList":
        """Wrap raw engine results following the construction policy above."""
        # Imported here: node.py imports this module at load time
        from .node import Node

        nodes = []
        for item in items:
            if engine.is_comment(item):
                continue
            if engine.is_element(item):
                nodes.append(Node(item))
            elif engine.is_text(item) and item.strip():
                nodes.append(Node.from_text(item))
        return cls(nodes)

    def __iter__(self) -> Iterator:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"NodeList({len(self._nodes)} nodes)"

    def count(self) -> int:
        return len(self._nodes)

    def is_empty(self) -> bool:
        return not self._nodes

    def add(self, node) -> None:
        self._nodes.append(node)

    def get(self, index: int):
        """Node at index, or None when index is out of range (negatives included)."""
        if 0 <= index < len(self._nodes):
            return self._nodes[index]
        return None

    def get_first(self):
        return self.get(0)

    def get_last(self):
        return self.get(len(self._nodes) - 1)

    def filter(self, predicate: Callable) -> "NodeList":
        return NodeList(node for node in self._nodes if predicate(node))

    def filter_by_tag_name(self, names: Union[str, Iterable[str]]) -> "NodeList":
        if not isinstance(names, str):
            names = set(names)
        return self.filter(lambda node: node.is_tag_name(names))

    def get_texts(self) -> list[str]:
        """Text of every Node, skipping empty results."""
        texts = []
        for node in self._nodes:
            text = node.get_text()
            if text:
                texts.append(text)
        return texts
