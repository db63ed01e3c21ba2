"""Scene tree produced by the importers.

A :class:`ShapeNode` either carries a kernel shape (leaf geometry) or a list
of children (group).  The ``shape`` handle is borrowed from the kernel
document the tree was extracted from; keep that document alive for as long
as the tree is consulted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple


@dataclass
class ShapeNode:
    """One node of an imported scene."""

    name: str = ""
    shape: Any = None
    color: Optional[str] = None
    children: List["ShapeNode"] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return self.shape is not None

    def walk(self, depth: int = 0) -> Iterator[Tuple[int, "ShapeNode"]]:
        """Yield ``(depth, node)`` pairs in depth-first document order."""
        yield depth, self
        for child in self.children:
            yield from child.walk(depth + 1)

    def iter_shapes(self) -> Iterator[Any]:
        """Yield every shape held by this subtree, in document order."""
        for _, node in self.walk():
            if node.shape is not None:
                yield node.shape

    def to_dict(self) -> Dict[str, Any]:
        """Summarise the tree as plain data (kernel handles are omitted)."""
        data: Dict[str, Any] = {"name": self.name, "hasShape": self.shape is not None}
        if self.color is not None:
            data["color"] = self.color
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


__all__ = ["ShapeNode"]
