"""Point-cloud readers.

Two text formats are understood: ASCII PLY (only the ``vertex`` element's
``x``/``y``/``z`` properties are read) and whitespace-separated XYZ files whose
first three columns are coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

import numpy as np

from octidx.utils.loggers import log_point_cloud_loaded

Array = np.ndarray

_PLY_SUFFIXES = (".ply",)


class PointCloudFormatError(ValueError):
    pass


@dataclass
class _PlyElement:
    name: str
    count: int
    properties: List[str] = field(default_factory=list)


def _parse_ply_header(lines: List[str], path: Path) -> tuple[list[_PlyElement], int]:
    if not lines or lines[0].strip() != "ply":
        raise PointCloudFormatError(f"{path}: missing 'ply' magic line")

    elements: list[_PlyElement] = []
    fmt = None
    for i, raw in enumerate(lines[1:], start=1):
        tok = raw.split()
        if not tok or tok[0] in ("comment", "obj_info"):
            continue
        if tok[0] == "format":
            fmt = tok[1] if len(tok) > 1 else None
        elif tok[0] == "element":
            if len(tok) != 3:
                raise PointCloudFormatError(f"{path}: malformed element line {raw.strip()!r}")
            try:
                count = int(tok[2])
            except ValueError as exc:
                raise PointCloudFormatError(f"{path}: bad element count in {raw.strip()!r}") from exc
            elements.append(_PlyElement(name=tok[1], count=count))
        elif tok[0] == "property":
            if not elements:
                raise PointCloudFormatError(f"{path}: property before any element")
            elements[-1].properties.append(tok[-1])
        elif tok[0] == "end_header":
            if fmt != "ascii":
                raise PointCloudFormatError(
                    f"{path}: only ASCII PLY is supported, got format {fmt!r}"
                )
            return elements, i + 1

    raise PointCloudFormatError(f"{path}: no end_header line")


def _load_ply(path: Path) -> Array:
    lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    elements, body_start = _parse_ply_header(lines, path)

    offset = body_start
    for el in elements:
        if el.name != "vertex":
            offset += el.count
            continue
        try:
            cols = tuple(el.properties.index(axis) for axis in ("x", "y", "z"))
        except ValueError as exc:
            raise PointCloudFormatError(f"{path}: vertex element lacks x/y/z properties") from exc
        body = lines[offset : offset + el.count]
        if len(body) < el.count:
            raise PointCloudFormatError(
                f"{path}: expected {el.count} vertices, found {len(body)}"
            )
        if el.count == 0:
            return np.empty((0, 3), dtype=np.float64)
        try:
            return np.loadtxt(body, dtype=np.float64, usecols=cols, ndmin=2)
        except ValueError as exc:
            raise PointCloudFormatError(f"{path}: unreadable vertex data: {exc}") from exc

    raise PointCloudFormatError(f"{path}: no vertex element")


def _load_xyz(path: Path) -> Array:
    try:
        pts = np.loadtxt(path, dtype=np.float64, usecols=(0, 1, 2), comments="#", ndmin=2)
    except (ValueError, IndexError) as exc:
        raise PointCloudFormatError(f"{path}: unreadable XYZ data: {exc}") from exc
    return pts.reshape(-1, 3)


def load_point_cloud(
    path: Union[str, Path],
    *,
    scale: float = 1.0,
    fmt: str = "auto",
) -> Array:
    """Read an ``(N, 3)`` float64 array of points, multiplied by ``scale``."""
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Point cloud not found: {p}")

    kind = str(fmt).strip().lower()
    if kind == "auto":
        kind = "ply" if p.suffix.lower() in _PLY_SUFFIXES else "xyz"
    if kind == "ply":
        pts = _load_ply(p)
    elif kind == "xyz":
        pts = _load_xyz(p)
    else:
        raise ValueError(f"fmt must be one of: auto, ply, xyz (got {fmt!r})")

    if not np.isfinite(pts).all():
        raise PointCloudFormatError(f"{p}: point cloud contains non-finite coordinates")

    pts = pts * float(scale)
    log_point_cloud_loaded(p, int(pts.shape[0]), float(scale))
    return pts
