from ._version import __version__
from .geometry import enclosing_cube, find_center_in_point_cloud, is_point_in_bound
from .tree import NodeVisitor, Octree, OctreeError, OctreeNode, PointOutOfBoundsError

__all__ = (
    "__version__",
    "Octree",
    "OctreeNode",
    "NodeVisitor",
    "OctreeError",
    "PointOutOfBoundsError",
    "enclosing_cube",
    "find_center_in_point_cloud",
    "is_point_in_bound",
)
