from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from octidx.geometry import CHILD_NUM, Array, PointLike, as_point, same_point


def _empty_children() -> List[Optional["OctreeNode"]]:
    return [None] * CHILD_NUM


@dataclass(eq=False)
class OctreeNode:
    """One cube of the octree.

    Children are ordered by octant, ``index = x_bit + 2 * y_bit + 4 * z_bit``.
    For a root with origin (0, 0, 0) and size 2::

        children[0]: origin (0, 0, 0)    children[4]: origin (0, 0, 1)
        children[1]: origin (1, 0, 0)    children[5]: origin (1, 0, 1)
        children[2]: origin (0, 1, 0)    children[6]: origin (0, 1, 1)
        children[3]: origin (1, 1, 0)    children[7]: origin (1, 1, 1)

    ``origin`` is the minimum corner of the cube. Only leaves (nodes at the
    tree's max depth) hold points; internal nodes only hold children.
    """

    depth: int
    size: float
    origin: Array
    parent_index: int = -1
    is_leaf: bool = False
    children: List[Optional["OctreeNode"]] = field(default_factory=_empty_children, repr=False)
    point_list: List[Array] = field(default_factory=list, repr=False)
    _parent_ref: Optional["weakref.ReferenceType[OctreeNode]"] = field(
        default=None, repr=False
    )

    def __post_init__(self) -> None:
        self.origin = as_point(self.origin).copy()
        self.size = float(self.size)
        if not (-1 <= int(self.parent_index) < CHILD_NUM):
            raise ValueError(f"parent_index must be in [-1, 7], got {self.parent_index}")

    @property
    def parent(self) -> Optional["OctreeNode"]:
        return None if self._parent_ref is None else self._parent_ref()

    @parent.setter
    def parent(self, node: Optional["OctreeNode"]) -> None:
        self._parent_ref = None if node is None else weakref.ref(node)

    @property
    def is_root(self) -> bool:
        return self.parent_index == -1

    def bounds(self) -> Tuple[Array, Array]:
        return self.origin.copy(), self.origin + self.size

    def num_children(self) -> int:
        return sum(1 for c in self.children if c is not None)

    def has_children(self) -> bool:
        return any(c is not None for c in self.children)

    def matching_points(self, point: PointLike) -> List[Array]:
        p = as_point(point)
        return [q for q in self.point_list if same_point(q, p)]

    def remove_points(self, point: PointLike) -> int:
        """Drop every stored point equal to ``point``; returns how many went."""
        p = as_point(point)
        kept = [q for q in self.point_list if not same_point(q, p)]
        removed = len(self.point_list) - len(kept)
        self.point_list[:] = kept
        return removed

    def detach(self) -> None:
        parent = self.parent
        if self.parent_index != -1 and parent is not None:
            if parent.children[self.parent_index] is self:
                parent.children[self.parent_index] = None
        self._parent_ref = None

    def destroy_subtree(self) -> None:
        """Destroy this node and everything below it.

        Children go first, then the node unlinks itself from its parent's slot.
        The node is unusable afterwards.
        """
        if not self.is_leaf:
            for child in self.children:
                if child is not None:
                    child.destroy_subtree()
        self.detach()
        self.children = _empty_children()
        self.point_list = []

    def __repr__(self) -> str:
        kind = "Leaf" if self.is_leaf else "Node"
        o = ", ".join(f"{v:g}" for v in np.asarray(self.origin).tolist())
        extra = f", points={len(self.point_list)}" if self.is_leaf else f", children={self.num_children()}"
        return f"OctreeNode({kind}, depth={self.depth}, origin=({o}), size={self.size:g}{extra})"
