from __future__ import annotations

from pathlib import Path

import numpy as np

from octidx.tree import Octree
from octidx.visualization import collect_cubes, cube_edges, cube_faces, render_octree


def _tree() -> Octree:
    tree = Octree(2, 4.0, (0.0, 0.0, 0.0))
    tree.insert_point((0.5, 0.5, 0.5))
    tree.insert_point((3.5, 3.5, 3.5))
    return tree


def test_cube_edges_are_axis_aligned_with_unit_length() -> None:
    edges = cube_edges((1.0, 2.0, 3.0), 2.0)
    assert edges.shape == (12, 2, 3)
    lengths = np.linalg.norm(edges[:, 1] - edges[:, 0], axis=1)
    assert np.allclose(lengths, 2.0)

    changed = np.count_nonzero(edges[:, 1] != edges[:, 0], axis=1)
    assert np.all(changed == 1)
    assert np.allclose(edges.reshape(-1, 3).min(axis=0), [1.0, 2.0, 3.0])
    assert np.allclose(edges.reshape(-1, 3).max(axis=0), [3.0, 4.0, 5.0])


def test_cube_faces_lie_on_the_cube_boundary() -> None:
    faces = cube_faces((0.0, 0.0, 0.0), 1.0)
    assert faces.shape == (6, 4, 3)
    for face in faces:
        # Each face is flat on one axis at 0 or 1.
        flat = [a for a in range(3) if np.all(face[:, a] == face[0, a])]
        assert len(flat) == 1
        assert face[0, flat[0]] in (0.0, 1.0)


def test_collect_cubes_marks_leaves() -> None:
    tree = _tree()
    cubes = collect_cubes(tree)
    assert len(cubes) == 5
    assert cubes[0].depth == 0 and not cubes[0].is_leaf
    assert sum(c.is_leaf for c in cubes) == 2

    leaves = collect_cubes(tree, leaves_only=True)
    assert len(leaves) == 2
    assert all(c.is_leaf and c.depth == 2 and c.size == 1.0 for c in leaves)

    assert collect_cubes(Octree(2)) == []


def test_render_writes_png(tmp_path: Path) -> None:
    tree = _tree()
    out = tmp_path / "figs" / "octree.png"
    pts = np.array([[0.5, 0.5, 0.5], [3.5, 3.5, 3.5]])

    n = render_octree(tree, out, points=pts, dpi=40)
    assert n == 5
    assert out.exists() and out.stat().st_size > 0
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"
    assert not out.with_suffix(".png.tmp").exists()

    n_leaves = render_octree(tree, tmp_path / "leaves.png", leaves_only=True, dpi=40)
    assert n_leaves == 2
