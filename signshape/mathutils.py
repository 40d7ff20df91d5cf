"""Small numeric helpers and a polar point type."""

from __future__ import annotations

import math
from dataclasses import dataclass

EPSILON = 1e-9
FLAT_TRIANGLE_AREA = 0.0001


def get_maximum(r: float, g: float, b: float) -> float:
    """Return the largest of three values."""
    if r >= g:
        return r if r >= b else b
    return g if g >= b else b


def get_minimum(r: float, g: float, b: float) -> float:
    """Return the smallest of three values."""
    if r <= g:
        return r if r <= b else b
    return g if g <= b else b


@dataclass
class PolarPoint:
    """A 2D point in polar form: radius ``phi`` and angle ``theta``.

    Points order by their angle only.
    """

    phi: float = 0.0
    theta: float = 0.0

    @classmethod
    def from_euclidean(cls, x: float, y: float) -> PolarPoint:
        """Build a polar point from Cartesian coordinates, angle in [0, 2*pi)."""
        theta = math.atan2(y, x)
        if theta < 0:
            theta += 2 * math.pi
        return cls(phi=math.hypot(x, y), theta=theta)

    def to_euclidean(self) -> tuple[float, float]:
        """Return the Cartesian coordinates ``(x, y)`` of this point."""
        return self.phi * math.cos(self.theta), self.phi * math.sin(self.theta)

    def __lt__(self, other: PolarPoint) -> bool:
        if not isinstance(other, PolarPoint):
            return NotImplemented
        return self.theta < other.theta

    def __gt__(self, other: PolarPoint) -> bool:
        if not isinstance(other, PolarPoint):
            return NotImplemented
        return self.theta > other.theta

    def __str__(self) -> str:
        return f"[{self.phi}, {self.theta}]"