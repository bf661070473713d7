from __future__ import annotations

from typing import Sequence


class OctreeError(ValueError):
    pass


class PointOutOfBoundsError(OctreeError):
    def __init__(self, point: Sequence[float], origin: Sequence[float], size: float) -> None:
        self.point = tuple(float(v) for v in point)
        self.origin = tuple(float(v) for v in origin)
        self.size = float(size)
        super().__init__(
            f"The point {self.point} is out of boundary of the cube "
            f"origin={self.origin}, size={self.size}"
        )
