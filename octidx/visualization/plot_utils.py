from __future__ import annotations

import io
from pathlib import Path
from typing import Any

from octidx.utils.atomic import atomic_write_bytes

DPI: int = 150

_CUBE_RCPARAMS: dict[str, Any] = {
    "figure.dpi": DPI,
    "savefig.dpi": DPI,
    "font.size": 9,
    "axes.labelsize": 9,
    "xtick.labelsize": 7,
    "ytick.labelsize": 7,
    "axes.unicode_minus": False,
    "axes3d.grid": False,
}


def apply_rcparams():
    """Select the headless backend, apply the shared style and return ``pyplot``."""
    import matplotlib

    try:
        matplotlib.use("Agg")
    except Exception:
        pass
    import matplotlib.pyplot as plt

    plt.rcParams.update({k: v for k, v in _CUBE_RCPARAMS.items() if k in plt.rcParams})
    return plt


def save_fig_atomic(fig, path: Path, *, dpi: int = DPI, bbox_inches: str = "tight") -> None:
    path = Path(path)
    fmt = path.suffix.lstrip(".").lower() or "png"
    buf = io.BytesIO()
    fig.savefig(buf, dpi=int(dpi), bbox_inches=bbox_inches, format=fmt)
    atomic_write_bytes(path, buf.getvalue())
