"""Arena tree: nodes live in one flat list and refer to each other by index.

A node's id is its position in the list at creation time. Nothing is ever
removed, so ids stay valid for the lifetime of the tree.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Generic, Iterator, List, Optional, TypeVar


class NodeNotFound(LookupError):
    """Raised when an id does not address a node in the arena."""

    def __init__(self, idx: int):
        super().__init__(f"node {idx} does not exist")
        self.idx = idx


@dataclass
class Node:
    """A node in an ArenaTree. Links are ids, never object references."""
    id: int
    value: Any
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)


N = TypeVar('N', bound=Node)


class ArenaTree(Generic[N]):
    def __init__(self, nodes: Optional[List[N]] = None):
        self._arena: List[N] = list(nodes) if nodes else []

    def _new_node(self, idx: int, value: Any) -> N:
        """Build the record stored at idx; subclasses pick the node type."""
        return Node(id=idx, value=value)  # type: ignore[return-value]

    def __len__(self) -> int:
        return len(self._arena)

    def __iter__(self) -> Iterator[N]:
        return iter(self._arena)

    def _exists(self, idx: int) -> bool:
        return 0 <= idx < len(self._arena)

    def get_node(self, idx: int) -> N:
        if not self._exists(idx):
            raise NodeNotFound(idx)
        return self._arena[idx]

    def add_node(self, value: Any) -> int:
        idx = len(self._arena)
        self._arena.append(self._new_node(idx, value))
        return idx

    def register_parent(self, child_idx: int, parent_idx: int) -> None:
        """Link child to parent both ways. Re-registering is a no-op."""
        for idx in (child_idx, parent_idx):
            if not self._exists(idx):
                raise NodeNotFound(idx)
        self._arena[child_idx].parent = parent_idx
        siblings = self._arena[parent_idx].children
        if child_idx not in siblings:
            siblings.append(child_idx)

    def add_child_node(self, parent_idx: int, value: Any) -> int:
        if not self._exists(parent_idx):
            raise NodeNotFound(parent_idx)
        child_idx = self.add_node(value)
        self.register_parent(child_idx, parent_idx)
        return child_idx
