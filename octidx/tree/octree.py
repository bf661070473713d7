from __future__ import annotations

import math
import numbers
from typing import Callable, Iterator, List, Optional, Sequence, Union

import numpy as np

from octidx.geometry import (
    CHILD_NUM,
    DEFAULT_PADDING,
    Array,
    PointLike,
    as_point,
    as_points,
    child_index,
    child_origin,
    enclosing_cube,
    find_center_in_point_cloud,
    is_point_in_bound,
)
from octidx.utils.loggers import get_logger

from .errors import PointOutOfBoundsError
from .node import OctreeNode

NodeVisitor = Callable[[OctreeNode], bool]


class Octree:
    """Octree over a 3D point cloud with a fixed maximum depth.

    Every leaf sits exactly at ``max_depth``; nodes are created lazily on
    insertion and pruned bottom-up on deletion. Points are matched by exact
    coordinate equality, so a query must carry the same float values that were
    inserted.
    """

    def __init__(
        self,
        max_depth: int,
        size: float = 0.0,
        origin: Optional[PointLike] = None,
    ) -> None:
        if isinstance(max_depth, bool) or not isinstance(max_depth, numbers.Integral):
            raise ValueError(f"max_depth must be an integer, got {max_depth!r}")
        if int(max_depth) < 0:
            raise ValueError("max_depth must be >= 0")
        if not (math.isfinite(float(size)) and float(size) >= 0.0):
            raise ValueError(f"size must be finite and >= 0, got {size!r}")

        self.max_depth = int(max_depth)
        self.size = float(size)
        self.origin: Array = (
            np.zeros(3, dtype=np.float64) if origin is None else as_point(origin).copy()
        )
        if not np.isfinite(self.origin).all():
            raise ValueError(f"origin must be finite, got {self.origin.tolist()}")
        self.root: Optional[OctreeNode] = None

    @classmethod
    def from_point_cloud(
        cls,
        points: Union[Array, Sequence[PointLike]],
        max_depth: int,
        *,
        padding: float = DEFAULT_PADDING,
    ) -> "Octree":
        tree = cls(max_depth)
        tree.convert_from_point_cloud(points, padding=padding)
        return tree

    find_center_in_point_cloud = staticmethod(find_center_in_point_cloud)

    def convert_from_point_cloud(
        self,
        points: Union[Array, Sequence[PointLike]],
        *,
        padding: float = DEFAULT_PADDING,
    ) -> bool:
        pts = as_points(points)
        if self.root is not None:
            self.root.destroy_subtree()
            self.root = None
        self.origin, self.size = enclosing_cube(pts, padding=padding)

        for i in range(pts.shape[0]):
            self.insert_point(pts[i])

        get_logger("octree").debug(
            "Inserted %d point(s): max_depth=%d origin=%s size=%g nodes=%d",
            pts.shape[0],
            self.max_depth,
            self.origin.tolist(),
            self.size,
            self.num_nodes(),
        )
        return True

    def is_point_in_bound(self, point: PointLike) -> bool:
        return is_point_in_bound(point, self.origin, self.size)

    def is_empty(self) -> bool:
        return self.root is None

    def clear(self) -> None:
        if self.root is not None:
            self.root.destroy_subtree()
            self.root = None
        self.size = 0.0
        self.origin = np.zeros(3, dtype=np.float64)

    def _new_root(self) -> OctreeNode:
        return OctreeNode(depth=0, size=self.size, origin=self.origin, parent_index=-1)

    def insert_point(self, point: PointLike, node: Optional[OctreeNode] = None) -> OctreeNode:
        """Store ``point`` in the leaf at ``max_depth`` and return that leaf.

        Only the start node (``node``, or the root) gets the strict
        ``origin < p < origin + size`` test; a miss raises
        :class:`PointOutOfBoundsError`. Below it the octant rule picks the
        child whose half-open cube ``[origin, origin + size)`` holds the point,
        so points on interior split planes are stored rather than rejected.
        """
        p = as_point(point)
        if node is None:
            if self.root is None:
                if not self.is_point_in_bound(p):
                    raise PointOutOfBoundsError(p, self.origin, self.size)
                self.root = self._new_root()
            node = self.root

        if not is_point_in_bound(p, node.origin, node.size):
            raise PointOutOfBoundsError(p, node.origin, node.size)

        # Below the start node the octant rule keeps p inside [origin, origin + size).
        while node.depth < self.max_depth:
            idx = child_index(p, node.origin, node.size)
            child = node.children[idx]
            if child is None:
                child = OctreeNode(
                    depth=node.depth + 1,
                    size=node.size / 2.0,
                    origin=child_origin(node.origin, node.size, idx),
                    parent_index=idx,
                )
                child.parent = node
                node.children[idx] = child
            node = child

        node.is_leaf = True
        node.point_list.append(p)
        return node

    def index(self, point: PointLike, node: Optional[OctreeNode] = None) -> Optional[OctreeNode]:
        """Return the leaf holding ``point``, or None.

        Without ``node`` the point is first checked against the tree's cube.
        With ``node`` the search starts there; it follows a single octant per
        level and never tries sibling branches.

        The strict containment test is applied once, at the first internal
        node of the descent; deeper levels rely on octant routing, so a point
        stored on an interior split plane is found again.
        """
        p = as_point(point)
        if node is None:
            if not self.is_point_in_bound(p):
                return None
            node = self.root

        checked = False
        while node is not None:
            if node.is_leaf:
                return node if node.matching_points(p) else None
            if not checked:
                if not is_point_in_bound(p, node.origin, node.size):
                    return None
                checked = True
            node = node.children[child_index(p, node.origin, node.size)]
        return None

    def find_points(self, point: PointLike) -> List[Array]:
        leaf = self.index(point)
        return [] if leaf is None else leaf.matching_points(point)

    def contains(self, point: PointLike) -> bool:
        return self.index(point) is not None

    def __contains__(self, point: object) -> bool:
        try:
            return self.contains(point)  # type: ignore[arg-type]
        except ValueError:
            return False

    def delete_point(self, point: PointLike) -> bool:
        """Remove every stored point equal to ``point`` and prune empty nodes."""
        p = as_point(point)
        leaf = self.index(p, self.root)
        if leaf is None:
            return False

        leaf.remove_points(p)
        self._prune(leaf)
        return True

    def _prune(self, node: Optional[OctreeNode]) -> None:
        while node is not None:
            if node.is_leaf:
                if node.point_list:
                    return
            elif node.has_children():
                return

            parent = node.parent
            if node is self.root:
                self.root = None
            node.destroy_subtree()
            node = parent

    def traverse_post_order(self, visitor: NodeVisitor, node: Optional[OctreeNode] = None) -> None:
        """Visit every node after all of its children.

        The visitor's return value has no effect: by the time a node is
        visited its subtree has already been walked.
        """
        if node is None:
            node = self.root
        if node is None:
            return
        for child in list(node.children):
            if child is not None:
                self.traverse_post_order(visitor, child)
        visitor(node)

    def traverse_pre_order(self, visitor: NodeVisitor, node: Optional[OctreeNode] = None) -> None:
        """Visit a node, then its children in index order 0-7.

        Returning False from ``visitor`` skips that node's subtree; other
        branches are still walked.
        """
        if node is None:
            node = self.root
        if node is None:
            return
        if not visitor(node):
            return
        for child in list(node.children):
            if child is not None:
                self.traverse_pre_order(visitor, child)

    def iter_nodes(self) -> Iterator[OctreeNode]:
        stack: List[OctreeNode] = [] if self.root is None else [self.root]
        while stack:
            n = stack.pop()
            yield n
            for child in reversed(n.children):
                if child is not None:
                    stack.append(child)

    def iter_leaves(self) -> Iterator[OctreeNode]:
        for n in self.iter_nodes():
            if n.is_leaf:
                yield n

    def num_nodes(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    def num_leaves(self) -> int:
        return sum(1 for _ in self.iter_leaves())

    def num_points(self) -> int:
        return sum(len(leaf.point_list) for leaf in self.iter_leaves())

    def copy(self) -> "Octree":
        out = Octree(self.max_depth, self.size, self.origin)

        def _clone(n: OctreeNode, parent: Optional[OctreeNode]) -> OctreeNode:
            c = OctreeNode(
                depth=n.depth,
                size=n.size,
                origin=n.origin,
                parent_index=n.parent_index,
                is_leaf=n.is_leaf,
            )
            c.parent = parent
            c.point_list = [q.copy() for q in n.point_list]
            for i in range(CHILD_NUM):
                child = n.children[i]
                if child is not None:
                    c.children[i] = _clone(child, c)
            return c

        if self.root is not None:
            out.root = _clone(self.root, None)
        return out

    def as_dict(self) -> dict:
        def _node(n: OctreeNode) -> dict:
            d = {
                "depth": n.depth,
                "parent_index": n.parent_index,
                "is_leaf": n.is_leaf,
                "origin": n.origin.tolist(),
                "size": n.size,
            }
            if n.is_leaf:
                d["points"] = [q.tolist() for q in n.point_list]
            else:
                d["children"] = [None if c is None else _node(c) for c in n.children]
            return d

        return {
            "max_depth": self.max_depth,
            "size": self.size,
            "origin": self.origin.tolist(),
            "num_nodes": self.num_nodes(),
            "num_leaves": self.num_leaves(),
            "num_points": self.num_points(),
            "root": None if self.root is None else _node(self.root),
        }

    def __len__(self) -> int:
        return self.num_points()

    def __repr__(self) -> str:
        if self.root is None:
            return f"Octree(empty, max_depth={self.max_depth})"
        return (
            f"Octree(max_depth={self.max_depth}, size={self.size:g}, "
            f"nodes={self.num_nodes()}, points={self.num_points()})"
        )
