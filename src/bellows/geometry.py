"""2D geometry kernel shared by the bellows diagram generators."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

__all__ = [
    "PARALLEL_EPSILON",
    "AffineTransform",
    "BoundsAccumulator",
    "Intersection",
    "IntersectionKind",
    "Point",
    "Segment",
    "ieee_div",
    "intersect",
    "ray_from",
    "slope",
]

Point = tuple[float, float]
Segment = tuple[Point, Point]

PARALLEL_EPSILON = 1e-4


class IntersectionKind(str, Enum):
    """Outcome of intersecting two infinite lines."""

    POINT = "point"
    PARALLEL = "parallel"


@dataclass(frozen=True, slots=True)
class Intersection:
    """Result of :func:`intersect`.

    Parallel (or nearly parallel) lines still carry a point: the origin. Callers
    that draw unconditionally keep working, callers that care can branch on
    :attr:`is_parallel`.
    """

    kind: IntersectionKind
    point: Point

    @property
    def is_parallel(self) -> bool:
        return self.kind is IntersectionKind.PARALLEL


def intersect(line_a: Segment, line_b: Segment) -> Intersection:
    """Intersect two infinite lines, each given by two points on it."""

    (x1, y1), (x2, y2) = line_a
    (x3, y3), (x4, y4) = line_b
    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < PARALLEL_EPSILON:
        return Intersection(IntersectionKind.PARALLEL, (0.0, 0.0))
    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    return Intersection(IntersectionKind.POINT, (x1 + t * (x2 - x1), y1 + t * (y2 - y1)))


def slope(line: Segment) -> float:
    """Direction angle of *line* in radians."""

    (x1, y1), (x2, y2) = line
    return math.atan2(y2 - y1, x2 - x1)


def ray_from(point: Point, angle: float, length: float) -> Segment:
    """Segment starting at *point* running *length* along *angle*.

    Negative lengths are valid and point backwards.
    """

    x, y = point
    return (x, y), (x + length * math.cos(angle), y + length * math.sin(angle))


def ieee_div(numerator: float, denominator: float) -> float:
    """Divide like IEEE-754 floats do: ``x/0`` is ``±inf`` and ``0/0`` is ``nan``."""

    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(np.float64(numerator), denominator))


@dataclass(frozen=True, slots=True)
class AffineTransform:
    """2D affine matrix ``[[a, c, e], [b, d, f], [0, 0, 1]]`` (SVG ordering)."""

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> "AffineTransform":
        return cls()

    def translate(self, dx: float, dy: float) -> "AffineTransform":
        """Return ``self * translate(dx, dy)``."""

        return AffineTransform(
            a=self.a,
            b=self.b,
            c=self.c,
            d=self.d,
            e=self.e + self.a * dx + self.c * dy,
            f=self.f + self.b * dx + self.d * dy,
        )

    def compose(self, other: "AffineTransform") -> "AffineTransform":
        """Return ``self * other`` (apply *other* first)."""

        return AffineTransform(
            a=self.a * other.a + self.c * other.b,
            b=self.b * other.a + self.d * other.b,
            c=self.a * other.c + self.c * other.d,
            d=self.b * other.c + self.d * other.d,
            e=self.a * other.e + self.c * other.f + self.e,
            f=self.b * other.e + self.d * other.f + self.f,
        )

    def apply(self, point: Point) -> Point:
        x, y = point
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def is_translation(self) -> bool:
        return self.a == 1.0 and self.b == 0.0 and self.c == 0.0 and self.d == 1.0

    def as_array(self) -> np.ndarray:
        return np.array(
            [[self.a, self.c, self.e], [self.b, self.d, self.f], [0.0, 0.0, 1.0]],
            dtype=float,
        )

    def to_svg(self) -> str:
        return f"matrix({self.a:g} {self.b:g} {self.c:g} {self.d:g} {self.e:g} {self.f:g})"


class BoundsAccumulator:
    """Running min/max of every segment drawn in sheet coordinates.

    Not thread safe; each generation call owns its own instance.
    """

    __slots__ = ("min_x", "min_y", "max_x", "max_y")

    def __init__(self) -> None:
        self.min_x = math.inf
        self.min_y = math.inf
        self.max_x = -math.inf
        self.max_y = -math.inf

    @property
    def is_empty(self) -> bool:
        return self.min_x > self.max_x or self.min_y > self.max_y

    def extend(self, matrix: AffineTransform, start: Point, end: Point) -> None:
        sx, sy = matrix.apply(start)
        ex, ey = matrix.apply(end)
        self.min_x = min(self.min_x, sx, ex)
        self.min_y = min(self.min_y, sy, ey)
        self.max_x = max(self.max_x, sx, ex)
        self.max_y = max(self.max_y, sy, ey)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.min_x, self.min_y, self.max_x, self.max_y

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y
