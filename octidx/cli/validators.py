from __future__ import annotations

import math
from typing import Any


def parse_point(text: Any, *, name: str = "point") -> tuple[float, float, float]:
    raw = str(text).strip().strip("()[]")
    parts = [p for p in raw.replace(",", " ").split() if p]
    if len(parts) != 3:
        raise ValueError(f"{name} must have three coordinates 'x,y,z', got {text!r}")
    try:
        x, y, z = (float(p) for p in parts)
    except ValueError as exc:
        raise ValueError(f"{name} coordinates must be numbers, got {text!r}") from exc
    if not all(math.isfinite(v) for v in (x, y, z)):
        raise ValueError(f"{name} coordinates must be finite, got {text!r}")
    return x, y, z


def normalize_choice(value: Any, *, allowed: tuple[str, ...], name: str) -> str:
    v = str(value).strip().lower()
    allowed_norm = tuple(str(a).strip().lower() for a in allowed)
    if v not in set(allowed_norm):
        raise ValueError(f"{name} must be one of: {', '.join(allowed_norm)}")
    return v
