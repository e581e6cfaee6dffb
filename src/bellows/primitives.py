"""Vector drawing instructions emitted by the bellows generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Union

from .geometry import AffineTransform, Point

__all__ = [
    "CUT_STROKE",
    "MOUNTAIN_STROKE",
    "VALLEY_STROKE",
    "ANNOTATION_STROKE",
    "LABEL_FILL",
    "Diagram",
    "DrawPrimitive",
    "Group",
    "Line",
    "Polyline",
    "Text",
    "ViewBox",
    "iter_flattened",
]

CUT_STROKE = "#1a1a2e"
VALLEY_STROKE = "#2563eb"
MOUNTAIN_STROKE = "#e11d48"
ANNOTATION_STROKE = "#22c55e"
LABEL_FILL = "#64748b"


@dataclass(frozen=True, slots=True)
class Line:
    """Straight stroke between two points."""

    start: Point
    end: Point
    stroke: str = CUT_STROKE
    stroke_width: float = 1.0
    dash: tuple[float, ...] | None = None


@dataclass(frozen=True, slots=True)
class Polyline:
    """Open or closed chain of points."""

    points: tuple[Point, ...]
    stroke: str = CUT_STROKE
    stroke_width: float = 1.0
    closed: bool = False
    fill: str | None = None
    dash: tuple[float, ...] | None = None


@dataclass(frozen=True, slots=True)
class Text:
    """Text label; ``rotation`` is in degrees, clockwise on a y-down sheet."""

    position: Point
    content: str
    font_size: float = 10.0
    anchor: str = "middle"
    fill: str = LABEL_FILL
    rotation: float = 0.0


@dataclass(frozen=True, slots=True)
class Group:
    """Children drawn through a shared transform and default stroke style."""

    transform: AffineTransform
    children: tuple["DrawPrimitive", ...]
    stroke: str | None = None
    dash: tuple[float, ...] | None = None
    name: str | None = None


DrawPrimitive = Union[Line, Polyline, Text, Group]


@dataclass(frozen=True, slots=True)
class ViewBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def contains(self, min_x: float, min_y: float, max_x: float, max_y: float) -> bool:
        return self.x <= min_x and self.y <= min_y and self.max_x >= max_x and self.max_y >= max_y

    def to_svg(self) -> str:
        return f"{self.x:g} {self.y:g} {self.width:g} {self.height:g}"


@dataclass(slots=True)
class Diagram:
    """Ordered primitives (later ones draw on top) plus their enclosing view box."""

    primitives: list[DrawPrimitive]
    view_box: ViewBox
    diagnostics: list[str] = field(default_factory=list)

    def groups(self) -> list[Group]:
        return [primitive for primitive in self.primitives if isinstance(primitive, Group)]


def iter_flattened(
    primitives: tuple[DrawPrimitive, ...] | list[DrawPrimitive],
    transform: AffineTransform | None = None,
    stroke: str | None = None,
    dash: tuple[float, ...] | None = None,
) -> Iterator[tuple[DrawPrimitive, AffineTransform, str | None, tuple[float, ...] | None]]:
    """Yield leaf primitives with the transform and inherited style of their groups."""

    matrix = transform or AffineTransform.identity()
    for primitive in primitives:
        if isinstance(primitive, Group):
            child_matrix = matrix.compose(primitive.transform)
            yield from iter_flattened(
                primitive.children,
                child_matrix,
                primitive.stroke or stroke,
                primitive.dash if primitive.dash is not None else dash,
            )
        else:
            yield primitive, matrix, stroke, dash
