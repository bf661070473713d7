from __future__ import annotations

import numpy as np
import pytest

from octidx.tree import Octree, OctreeError, PointOutOfBoundsError


def test_octant_placement_creates_single_child() -> None:
    tree = Octree(1, 2.0, (0.0, 0.0, 0.0))
    leaf = tree.insert_point((1.5, 0.5, 1.5))

    root = tree.root
    assert root is not None
    present = [i for i, c in enumerate(root.children) if c is not None]
    assert present == [5]

    child = root.children[5]
    assert child is leaf
    assert np.array_equal(child.origin, [1.0, 0.0, 1.0])
    assert child.size == 1.0
    assert child.depth == 1
    assert child.parent_index == 5
    assert child.parent is root
    assert child.is_leaf and not root.is_leaf


def test_every_leaf_sits_at_max_depth() -> None:
    rng = np.random.default_rng(0)
    pts = rng.uniform(-3.0, 3.0, size=(200, 3))
    tree = Octree.from_point_cloud(pts, 4)

    assert tree.num_points() == 200
    for node in tree.iter_nodes():
        assert node.depth <= 4
        if node.is_leaf:
            assert node.depth == 4
            assert node.point_list
        else:
            assert node.has_children()
            assert node.point_list == []
        if node.parent is not None:
            assert node.parent.children[node.parent_index] is node
            assert node.size == pytest.approx(node.parent.size / 2.0)


def test_stored_points_are_references() -> None:
    tree = Octree(2, 4.0, (0.0, 0.0, 0.0))
    p = np.array([1.0, 2.0, 3.0])
    leaf = tree.insert_point(p)
    assert leaf.point_list[0] is p

    pts = np.array([[0.5, 0.5, 0.5], [1.5, 2.5, 3.5]])
    tree2 = Octree.from_point_cloud(pts, 2)
    stored = tree2.find_points(pts[1])
    assert len(stored) == 1
    assert np.shares_memory(stored[0], pts)


def test_out_of_bounds_insertion_raises_without_creating_root() -> None:
    tree = Octree(3, 2.0, (0.0, 0.0, 0.0))
    with pytest.raises(PointOutOfBoundsError) as info:
        tree.insert_point((3.0, 0.5, 0.5))
    assert isinstance(info.value, OctreeError)
    assert isinstance(info.value, ValueError)
    assert info.value.point == (3.0, 0.5, 0.5)
    assert info.value.size == 2.0
    assert tree.is_empty()


def test_boundary_points_are_rejected() -> None:
    tree = Octree(2, 2.0, (0.0, 0.0, 0.0))
    tree.insert_point((1.0, 1.0, 1.0))
    with pytest.raises(PointOutOfBoundsError):
        tree.insert_point((0.0, 0.0, 0.0))
    with pytest.raises(PointOutOfBoundsError):
        tree.insert_point((2.0, 2.0, 2.0))
    assert tree.num_points() == 1


def test_points_on_interior_split_planes_are_indexed() -> None:
    tree = Octree(2, 2.0, (0.0, 0.0, 0.0))
    leaf = tree.insert_point((1.0, 1.0, 1.0))
    assert leaf.parent_index == 0
    assert leaf.parent is not None and leaf.parent.parent_index == 7
    assert np.array_equal(leaf.origin, [1.0, 1.0, 1.0])
    assert tree.index((1.0, 1.0, 1.0)) is leaf

    pts = np.array([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0], [2.0, 2.0, 2.0]])
    cloud = Octree.from_point_cloud(pts, 5)
    for p in pts:
        assert cloud.index(p) is not None


def test_empty_tree_without_cube_rejects_points() -> None:
    tree = Octree(3)
    assert tree.size == 0.0
    assert np.array_equal(tree.origin, [0.0, 0.0, 0.0])
    with pytest.raises(PointOutOfBoundsError):
        tree.insert_point((0.0, 0.0, 0.0))
    assert tree.is_empty()


def test_insert_from_explicit_start_node() -> None:
    tree = Octree(2, 4.0, (0.0, 0.0, 0.0))
    tree.insert_point((3.0, 3.0, 3.0))
    upper = tree.root.children[7]
    assert upper is not None

    leaf = tree.insert_point((3.5, 2.5, 3.5), node=upper)
    assert leaf.depth == 2
    assert tree.index((3.5, 2.5, 3.5)) is leaf

    with pytest.raises(PointOutOfBoundsError):
        tree.insert_point((1.0, 1.0, 1.0), node=upper)


def test_zero_depth_tree_keeps_points_in_root() -> None:
    tree = Octree(0, 2.0, (0.0, 0.0, 0.0))
    leaf = tree.insert_point((0.5, 1.5, 0.5))
    leaf2 = tree.insert_point((1.5, 0.5, 1.5))
    assert leaf is tree.root and leaf2 is tree.root
    assert tree.root.is_leaf
    assert len(tree.root.point_list) == 2
    assert tree.num_nodes() == 1


def test_constructor_validation() -> None:
    with pytest.raises(ValueError):
        Octree(-1)
    with pytest.raises(ValueError):
        Octree(2, -1.0)
    with pytest.raises(ValueError):
        Octree(2, 1.0, (0.0, 0.0))
    tree = Octree(2, 4.0, (0.0, 0.0, 0.0))
    with pytest.raises(ValueError):
        tree.insert_point((1.0, 1.0))


@pytest.mark.parametrize(
    "args",
    [
        (2.5,),
        (2.0,),
        ("3",),
        (True,),
        (2, float("nan")),
        (2, float("inf")),
        (2, 1.0, (float("nan"), 0.0, 0.0)),
        (2, 1.0, (0.0, float("-inf"), 0.0)),
    ],
)
def test_constructor_rejects_non_integral_depth_and_non_finite_cube(args: tuple) -> None:
    with pytest.raises(ValueError):
        Octree(*args)


def test_constructor_accepts_numpy_integer_depth() -> None:
    tree = Octree(np.int64(3), 2.0)
    assert tree.max_depth == 3 and isinstance(tree.max_depth, int)


def test_from_point_cloud_rebuilds_cleanly() -> None:
    a = np.array([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]])
    b = np.array([[10.0, 10.0, 10.0], [12.0, 11.0, 10.5], [11.0, 10.0, 12.0]])

    tree = Octree.from_point_cloud(a, 3)
    assert tree.convert_from_point_cloud(b) is True
    assert tree.num_points() == 3
    assert tree.index(a[0]) is None
    for p in b:
        assert tree.is_point_in_bound(p)
        assert tree.index(p) is not None
