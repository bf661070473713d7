from __future__ import annotations

from collections import Counter
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import numpy as np
import typer

from octidx.cfg import Config, ConfigError, load_config
from octidx.cfg.loader import validate_config
from octidx.io import PointCloudFormatError, load_point_cloud
from octidx.tree import Octree
from octidx.utils.loggers import configure_logging, log_tree_built

from .validators import normalize_choice, parse_point


def validate_point(text: Any, *, option: str = "--point") -> tuple[float, float, float]:
    try:
        return parse_point(text, name=option)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def validate_format(fmt: Any, *, option: str = "--format") -> str:
    try:
        return normalize_choice(fmt, allowed=("auto", "ply", "xyz"), name=option)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def resolve_config(
    config_path: Optional[Path],
    *,
    depth: Optional[int] = None,
    scale: Optional[float] = None,
    fmt: Optional[str] = None,
    verbose: bool = False,
) -> Config:
    """Load the YAML config (or defaults) and apply command-line overrides."""
    try:
        cfg = load_config(config_path) if config_path is not None else Config()
        if depth is not None:
            cfg = replace(cfg, octree=replace(cfg.octree, max_depth=int(depth)))
        if scale is not None:
            cfg = replace(cfg, cloud=replace(cfg.cloud, scale=float(scale)))
        if fmt is not None:
            cfg = replace(cfg, cloud=replace(cfg.cloud, format=validate_format(fmt)))
        if verbose:
            cfg = replace(cfg, logging=replace(cfg.logging, level="DEBUG"))
        validate_config(cfg)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    configure_logging(cfg.logging)
    return cfg


def load_points(path: Path, cfg: Config) -> np.ndarray:
    try:
        pts = load_point_cloud(path, scale=cfg.cloud.scale, fmt=cfg.cloud.format)
    except (FileNotFoundError, PointCloudFormatError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    if pts.shape[0] == 0:
        raise typer.BadParameter(f"{path}: point cloud is empty")
    return pts


def build_tree(pts: np.ndarray, cfg: Config) -> Octree:
    tree = Octree.from_point_cloud(pts, cfg.octree.max_depth, padding=cfg.octree.padding)
    log_tree_built(
        tree.max_depth, tree.origin.tolist(), tree.size, tree.num_nodes(), tree.num_leaves()
    )
    return tree


def tree_summary(tree: Octree, *, full: bool = False) -> dict:
    nodes_per_depth = Counter(n.depth for n in tree.iter_nodes())
    counts = [len(leaf.point_list) for leaf in tree.iter_leaves()]
    out: dict = {
        "max_depth": tree.max_depth,
        "origin": tree.origin.tolist(),
        "size": tree.size,
        "num_nodes": tree.num_nodes(),
        "num_leaves": len(counts),
        "num_points": int(sum(counts)),
        "max_points_per_leaf": int(max(counts)) if counts else 0,
        "nodes_per_depth": {str(d): int(nodes_per_depth[d]) for d in sorted(nodes_per_depth)},
    }
    if full:
        out["tree"] = tree.as_dict()
    return out
