from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np

from octidx.tree import Octree, OctreeNode
from octidx.utils.loggers import log_render_saved

from .plot_utils import DPI, apply_rcparams, save_fig_atomic

Array = np.ndarray

# Corner k sits at (k & 1, k >> 1 & 1, k >> 2 & 1), the same order as octants.
CUBE_CORNERS: Array = np.array(
    [[(k >> a) & 1 for a in range(3)] for k in range(8)], dtype=np.float64
)
CUBE_EDGES: tuple[tuple[int, int], ...] = tuple(
    (i, j) for i in range(8) for j in range(i + 1, 8) if bin(i ^ j).count("1") == 1
)
CUBE_FACES: tuple[tuple[int, int, int, int], ...] = (
    (0, 1, 3, 2),
    (4, 5, 7, 6),
    (0, 1, 5, 4),
    (2, 3, 7, 6),
    (0, 2, 6, 4),
    (1, 3, 7, 5),
)

_INTERNAL_COLOR = "#7f7f7f"
_LEAF_COLOR = "#1f77b4"
_POINT_COLOR = "#d62728"


@dataclass(frozen=True)
class CubeSpec:
    origin: tuple[float, float, float]
    size: float
    is_leaf: bool
    depth: int


def cube_corners(origin, size: float) -> Array:
    return np.asarray(origin, dtype=np.float64) + CUBE_CORNERS * float(size)


def cube_edges(origin, size: float) -> Array:
    c = cube_corners(origin, size)
    return np.stack([np.stack([c[i], c[j]]) for i, j in CUBE_EDGES])


def cube_faces(origin, size: float) -> Array:
    c = cube_corners(origin, size)
    return np.stack([c[list(f)] for f in CUBE_FACES])


def collect_cubes(tree: Octree, *, leaves_only: bool = False) -> List[CubeSpec]:
    out: List[CubeSpec] = []

    def _visit(node: OctreeNode) -> bool:
        if node.is_leaf or not leaves_only:
            o = node.origin
            out.append(
                CubeSpec(
                    origin=(float(o[0]), float(o[1]), float(o[2])),
                    size=float(node.size),
                    is_leaf=bool(node.is_leaf),
                    depth=int(node.depth),
                )
            )
        return True

    tree.traverse_pre_order(_visit)
    return out


def render_octree(
    tree: Octree,
    path: Path,
    *,
    points: Optional[Array] = None,
    leaves_only: bool = False,
    dpi: int = int(DPI),
    elev: float = 20.0,
    azim: float = -60.0,
) -> int:
    """Draw every node as a cube and save the figure; returns the cube count.

    Internal nodes are thin wireframes, leaves are translucent solids.
    """
    from mpl_toolkits.mplot3d.art3d import Line3DCollection, Poly3DCollection

    plt = apply_rcparams()
    cubes = collect_cubes(tree, leaves_only=leaves_only)

    fig = plt.figure(figsize=(6.0, 6.0))
    ax = fig.add_subplot(projection="3d")
    try:
        internal = [cube_edges(c.origin, c.size) for c in cubes if not c.is_leaf]
        if internal:
            ax.add_collection3d(
                Line3DCollection(
                    np.concatenate(internal), colors=_INTERNAL_COLOR, linewidths=0.4, alpha=0.6
                )
            )

        leaves = [cube_faces(c.origin, c.size) for c in cubes if c.is_leaf]
        if leaves:
            ax.add_collection3d(
                Poly3DCollection(
                    np.concatenate(leaves),
                    facecolors=_LEAF_COLOR,
                    edgecolors=_LEAF_COLOR,
                    linewidths=0.2,
                    alpha=0.25,
                )
            )

        if points is not None and len(points):
            pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
            ax.scatter(pts[:, 0], pts[:, 1], pts[:, 2], s=1.0, c=_POINT_COLOR, depthshade=False)

        lo = tree.origin
        hi = tree.origin + tree.size
        if tree.size > 0.0:
            ax.set_xlim(lo[0], hi[0])
            ax.set_ylim(lo[1], hi[1])
            ax.set_zlim(lo[2], hi[2])
        ax.set_xlabel("x")
        ax.set_ylabel("y")
        ax.set_zlabel("z")
        ax.view_init(elev=float(elev), azim=float(azim))

        save_fig_atomic(fig, Path(path), dpi=int(dpi))
    finally:
        plt.close(fig)

    log_render_saved(path, len(cubes))
    return len(cubes)
