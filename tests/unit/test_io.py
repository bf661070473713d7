from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from octidx.io import PointCloudFormatError, load_point_cloud

_PLY = """ply
format ascii 1.0
comment hand written
element vertex 3
property float x
property float y
property float z
property uchar red
property uchar green
element face 1
property list uchar int vertex_indices
end_header
0 0 0 255 0
1 2 3 0 255
-1 0.5 2 1 1
3 0 1 2
"""


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_ascii_ply_reads_vertex_coordinates(tmp_path: Path) -> None:
    p = _write(tmp_path / "cloud.ply", _PLY)
    pts = load_point_cloud(p)
    assert pts.shape == (3, 3)
    assert pts.dtype == np.float64
    assert np.array_equal(pts, [[0.0, 0.0, 0.0], [1.0, 2.0, 3.0], [-1.0, 0.5, 2.0]])


def test_scale_multiplies_coordinates(tmp_path: Path) -> None:
    p = _write(tmp_path / "cloud.ply", _PLY)
    pts = load_point_cloud(p, scale=5.0)
    assert np.array_equal(pts[1], [5.0, 10.0, 15.0])


def test_ply_property_order_is_respected(tmp_path: Path) -> None:
    text = (
        "ply\nformat ascii 1.0\nelement vertex 2\n"
        "property float nx\nproperty float z\nproperty float y\nproperty float x\n"
        "end_header\n9 3 2 1\n9 6 5 4\n"
    )
    pts = load_point_cloud(_write(tmp_path / "ordered.ply", text))
    assert np.array_equal(pts, [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])


@pytest.mark.parametrize(
    "text",
    [
        "solid\n",
        "ply\nformat binary_little_endian 1.0\nelement vertex 1\nproperty float x\nend_header\n",
        "ply\nformat ascii 1.0\nelement vertex 3\nproperty float x\nproperty float y\n"
        "property float z\nend_header\n0 0 0\n",
        "ply\nformat ascii 1.0\nelement vertex 1\nproperty float x\nproperty float y\nend_header\n0 0\n",
        "ply\nformat ascii 1.0\nelement face 0\nend_header\n",
        "ply\nformat ascii 1.0\nelement vertex 1\nproperty float x\n",
    ],
)
def test_malformed_ply_is_rejected(tmp_path: Path, text: str) -> None:
    with pytest.raises(PointCloudFormatError):
        load_point_cloud(_write(tmp_path / "bad.ply", text))


def test_xyz_skips_comments_and_extra_columns(tmp_path: Path) -> None:
    p = _write(tmp_path / "cloud.xyz", "# x y z intensity\n1 2 3 9\n4 5 6 9\n")
    pts = load_point_cloud(p)
    assert np.array_equal(pts, [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])

    single = load_point_cloud(_write(tmp_path / "one.txt", "7 8 9\n"))
    assert single.shape == (1, 3)


def test_explicit_format_overrides_suffix(tmp_path: Path) -> None:
    p = _write(tmp_path / "cloud.dat", _PLY)
    pts = load_point_cloud(p, fmt="PLY")
    assert pts.shape == (3, 3)

    with pytest.raises(ValueError):
        load_point_cloud(p, fmt="obj")


def test_non_finite_coordinates_are_rejected(tmp_path: Path) -> None:
    p = _write(tmp_path / "nan.xyz", "1 2 3\n1 nan 3\n")
    with pytest.raises(PointCloudFormatError):
        load_point_cloud(p)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_point_cloud(tmp_path / "nope.ply")
