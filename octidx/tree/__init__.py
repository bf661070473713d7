"""Octree data structures.

Exports :class:`Octree`, :class:`OctreeNode` and the tree error types.
"""

from __future__ import annotations

from .errors import OctreeError, PointOutOfBoundsError
from .node import OctreeNode
from .octree import NodeVisitor, Octree

__all__ = ["NodeVisitor", "Octree", "OctreeError", "OctreeNode", "PointOutOfBoundsError"]
