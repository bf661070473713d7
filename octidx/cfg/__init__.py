from __future__ import annotations

from .schema import (
    Config,
    LoggingConfig,
    OctreeConfig,
    PointCloudConfig,
    RenderConfig,
)
from .loader import ConfigError, load_config, loads_config, to_dict, validate_config

__all__ = [
    "Config",
    "OctreeConfig",
    "PointCloudConfig",
    "RenderConfig",
    "LoggingConfig",
    "ConfigError",
    "load_config",
    "loads_config",
    "validate_config",
    "to_dict",
]
