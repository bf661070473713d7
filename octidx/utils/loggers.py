from __future__ import annotations

import logging
from logging import Logger
from pathlib import Path
from typing import Sequence

from octidx.cfg.schema import LoggingConfig

_DEFAULT_LOGGER_NAME = "octidx"


def get_logger(name: str | None = None) -> Logger:
    base = logging.getLogger(_DEFAULT_LOGGER_NAME)
    if not base.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        base.addHandler(handler)
        base.setLevel(logging.INFO)
        base.propagate = False
    return base if name is None else base.getChild(str(name))


def set_log_level(level: str | int) -> None:
    lvl = level if isinstance(level, int) else logging.getLevelName(str(level).strip().upper())
    if not isinstance(lvl, int):
        raise ValueError(f"Unknown log level: {level!r}")
    get_logger().setLevel(lvl)


def configure_logging(cfg: LoggingConfig) -> Logger:
    set_log_level(cfg.level)
    return get_logger()


def log_point_cloud_loaded(path: Path | str, n_points: int, scale: float) -> None:
    get_logger("io").info("Loaded %d point(s) from %s (scale=%g).", n_points, path, scale)


def log_tree_built(
    max_depth: int,
    origin: Sequence[float],
    size: float,
    n_nodes: int,
    n_leaves: int,
) -> None:
    o = ", ".join(f"{float(v):.4g}" for v in origin)
    get_logger("octree").info(
        "Octree built: max_depth=%d origin=(%s) size=%.4g nodes=%d leaves=%d",
        max_depth,
        o,
        size,
        n_nodes,
        n_leaves,
    )


def log_render_saved(path: Path | str, n_cubes: int) -> None:
    get_logger("render").info("Saved %d cube(s) to %s", n_cubes, path)
