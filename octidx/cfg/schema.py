from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True)
class OctreeConfig:
    max_depth: int = 6
    padding: float = 1e-6


@dataclass(frozen=True)
class PointCloudConfig:
    scale: float = 1.0
    format: Literal["auto", "ply", "xyz"] = "auto"


@dataclass(frozen=True)
class RenderConfig:
    leaves_only: bool = False
    show_points: bool = True
    dpi: int = 150
    elev: float = 20.0
    azim: float = -60.0


@dataclass(frozen=True)
class LoggingConfig:
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@dataclass(frozen=True)
class Config:
    octree: OctreeConfig = field(default_factory=OctreeConfig)
    cloud: PointCloudConfig = field(default_factory=PointCloudConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
