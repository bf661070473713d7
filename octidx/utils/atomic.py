from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import numpy as np

__all__ = [
    "atomic_replace",
    "atomic_write_bytes",
    "atomic_write_text",
    "atomic_write_json",
]


def atomic_replace(src: Path, dst: Path) -> None:
    os.replace(src, dst)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write ``data`` next to ``path`` and swap it in, so readers never see a partial file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with open(tmp, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        atomic_replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    atomic_write_bytes(path, text.encode(encoding))


def _json_default(obj: Any) -> Any:
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def atomic_write_json(path: Path, payload: Any, *, indent: int = 2) -> None:
    # numpy arrays and scalars are written as lists and plain numbers.
    text = json.dumps(payload, indent=indent, sort_keys=False, default=_json_default)
    atomic_write_text(Path(path), text + "\n")
