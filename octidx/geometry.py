from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np

Array = np.ndarray
PointLike = Union[Array, Sequence[float]]

CHILD_NUM = 8
DEFAULT_PADDING = 1e-6


def as_point(p: PointLike) -> Array:
    x = np.asarray(p, dtype=np.float64)
    if x.shape != (3,):
        raise ValueError(f"Point must have shape (3,), got {x.shape}")
    return x


def as_points(points: Union[Array, Sequence[PointLike]]) -> Array:
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] != 3:
        raise ValueError(f"points must have shape (N, 3), got {pts.shape}")
    return pts


def same_point(a: Array, b: Array) -> bool:
    return bool(a[0] == b[0] and a[1] == b[1] and a[2] == b[2])


def is_point_in_bound(point: PointLike, origin: PointLike, size: float) -> bool:
    """Strict containment: ``origin < point < origin + size`` on every axis."""
    p = as_point(point)
    o = as_point(origin)
    s = float(size)
    return bool(np.all(p > o) and np.all(p < o + s))


def octant_bits(point: Array, origin: Array, size: float) -> Tuple[int, int, int]:
    half = float(size) / 2.0
    x_bit = 0 if point[0] < origin[0] + half else 1
    y_bit = 0 if point[1] < origin[1] + half else 1
    z_bit = 0 if point[2] < origin[2] + half else 1
    return x_bit, y_bit, z_bit


def child_index(point: Array, origin: Array, size: float) -> int:
    x_bit, y_bit, z_bit = octant_bits(point, origin, size)
    return x_bit + 2 * y_bit + 4 * z_bit


def child_origin(origin: Array, size: float, index: int) -> Array:
    if not (0 <= int(index) < CHILD_NUM):
        raise ValueError(f"child index must be in [0, {CHILD_NUM - 1}], got {index}")
    half = float(size) / 2.0
    bits = np.array([index & 1, (index >> 1) & 1, (index >> 2) & 1], dtype=np.float64)
    return np.asarray(origin, dtype=np.float64) + bits * half


def find_center_in_point_cloud(points: Union[Array, Sequence[PointLike]]) -> Array:
    pts = as_points(points)
    if pts.shape[0] == 0:
        raise ValueError("Cannot compute the center of an empty point cloud")
    # Halve first so clouds near the float64 limit do not overflow.
    return pts.min(axis=0) / 2.0 + pts.max(axis=0) / 2.0


def enclosing_cube(
    points: Union[Array, Sequence[PointLike]], padding: float = DEFAULT_PADDING
) -> Tuple[Array, float]:
    """Return ``(origin, size)`` of a cube holding every point strictly inside.

    The cube is centred on the bounding-box midpoint and its half edge is half
    of the largest bounding-box extent, grown by ``padding`` times that half
    edge or by a few ulps of the largest coordinate, whichever is larger. A
    single point (zero extent) gets a half edge of ``padding`` times its
    largest coordinate magnitude, or ``padding`` near the origin.
    """
    if padding <= 0.0:
        raise ValueError("padding must be > 0")
    pts = as_points(points)
    if pts.shape[0] == 0:
        raise ValueError("Cannot compute an enclosing cube for an empty point cloud")
    if not np.isfinite(pts).all():
        raise ValueError("Point cloud contains non-finite coordinates")

    lo = pts.min(axis=0)
    hi = pts.max(axis=0)
    with np.errstate(over="ignore"):
        extent = hi - lo
    if not np.isfinite(extent).all():
        raise ValueError("Point cloud is too spread out for a finite enclosing cube")

    center = lo + extent / 2.0
    half = float(np.max(extent)) / 2.0
    magnitude = float(np.max(np.abs(pts)))

    if half > 0.0:
        slack = max(float(padding) * half, 4.0 * float(np.spacing(magnitude)))
    else:
        slack = float(padding) * max(magnitude, 1.0)

    # Rounding in the centre and origin can still leave a point on a face.
    with np.errstate(over="ignore"):
        for _ in range(64):
            half += slack
            origin = center - half
            size = 2.0 * half
            if not (np.isfinite(origin).all() and np.isfinite(origin + size).all()):
                raise ValueError("Point cloud is too large for a finite enclosing cube")
            if np.all(pts > origin) and np.all(pts < origin + size):
                return origin, size
            slack *= 2.0
    raise ValueError("Could not place every point strictly inside the enclosing cube")
