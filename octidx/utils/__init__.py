from __future__ import annotations

from .atomic import atomic_replace, atomic_write_bytes, atomic_write_json, atomic_write_text
from .loggers import configure_logging, get_logger, set_log_level

__all__ = [
    "atomic_replace",
    "atomic_write_bytes",
    "atomic_write_json",
    "atomic_write_text",
    "configure_logging",
    "get_logger",
    "set_log_level",
]
