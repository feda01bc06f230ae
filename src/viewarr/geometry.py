"""Small screen-space geometry types shared by the transform and the viewer.

Conventions
-----------
- Points and vectors are ``(x, y)`` tuples of floats.
- Screen space has its origin at the top-left with Y increasing downward.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

__all__ = [
    "Point",
    "Rect",
    "rotate_point",
]

Point = Tuple[float, float]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in screen coordinates.

    Parameters
    ----------
    x, y : float
        Top-left corner.
    width, height : float
        Extent; may be zero for an empty rectangle.
    """

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_center_size(cls, center: Point, size: Point) -> "Rect":
        return cls(
            float(center[0]) - 0.5 * size[0],
            float(center[1]) - 0.5 * size[1],
            float(size[0]),
            float(size[1]),
        )

    @property
    def min(self) -> Point:
        return (self.x, self.y)

    @property
    def max(self) -> Point:
        return (self.x + self.width, self.y + self.height)

    @property
    def size(self) -> Point:
        return (self.width, self.height)

    @property
    def center(self) -> Point:
        return (self.x + 0.5 * self.width, self.y + 0.5 * self.height)

    def contains(self, pos: Point) -> bool:
        """Return True if ``pos`` lies inside (edges inclusive)."""
        x_max, y_max = self.max
        return self.x <= pos[0] <= x_max and self.y <= pos[1] <= y_max

    def intersect(self, other: "Rect") -> "Rect":
        """Return the overlap; width/height are zero when disjoint."""
        x0 = max(self.x, other.x)
        y0 = max(self.y, other.y)
        x1 = min(self.max[0], other.max[0])
        y1 = min(self.max[1], other.max[1])
        return Rect(x0, y0, max(0.0, x1 - x0), max(0.0, y1 - y0))

    def corners(self) -> Tuple[Point, Point, Point, Point]:
        """Corners clockwise on screen: top-left, top-right, bottom-right, bottom-left."""
        x_max, y_max = self.max
        return ((self.x, self.y), (x_max, self.y), (x_max, y_max), (self.x, y_max))


def rotate_point(point: Point, pivot: Point, degrees: float) -> Point:
    """Rotate ``point`` about ``pivot`` by ``degrees``.

    A positive angle maps the offset ``(dx, dy)`` to
    ``(dx*cos - dy*sin, dx*sin + dy*cos)``.
    """
    if degrees == 0.0:
        return (float(point[0]), float(point[1]))
    theta = math.radians(degrees)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    dx = point[0] - pivot[0]
    dy = point[1] - pivot[1]
    return (
        pivot[0] + dx * cos_t - dy * sin_t,
        pivot[1] + dx * sin_t + dy * cos_t,
    )
