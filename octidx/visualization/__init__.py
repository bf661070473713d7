"""Rendering helpers for octree cubes (matplotlib, headless)."""

from __future__ import annotations

from .cubes import CubeSpec, collect_cubes, cube_edges, cube_faces, render_octree

__all__ = ["CubeSpec", "collect_cubes", "cube_edges", "cube_faces", "render_octree"]
