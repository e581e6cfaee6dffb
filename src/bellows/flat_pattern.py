"""Four/five face flat pattern ("high precision" mode).

Front and rear sizes are inner dimensions and the fold depth is the fold
width, so each outer dimension is ``inner + 2 * fold``. Every side face is a
trapezoid whose inner and outer fold lines taper linearly from the rear edge
(top of the face) to the front edge (bottom of the face).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from .geometry import AffineTransform, BoundsAccumulator, Point
from .params import BellowsParameters, PageSize, round_half_up
from .primitives import (
    ANNOTATION_STROKE,
    CUT_STROKE,
    MOUNTAIN_STROKE,
    VALLEY_STROKE,
    Diagram,
    DrawPrimitive,
    Group,
    Line,
    Polyline,
    Text,
    ViewBox,
)

__all__ = [
    "ANNOTATION_PAD",
    "FACE_GAP",
    "FaceAxis",
    "FaceSpec",
    "OuterDimensions",
    "RowParity",
    "VIEW_MARGIN",
    "content_bounds",
    "flat_pattern_summary",
    "generate_flat_pattern",
    "outer_dimensions",
    "seam_flap_reach",
    "taper",
]

logger = logging.getLogger(__name__)

FACE_GAP = 10.0
START_X = 20.0
START_Y = 20.0
VIEW_MARGIN = 10.0
ANNOTATION_PAD = 30.0
FOLD_DASH = (4.0, 4.0)
FACE_STROKE_WIDTH = 0.8
ARROW_SIZE = 4.0


class RowParity(Enum):
    EVEN = 0
    ODD = 1

    @classmethod
    def of(cls, row: int) -> "RowParity":
        return cls.EVEN if row % 2 == 0 else cls.ODD


class FaceAxis(Enum):
    """Which pair of bellows sides a face belongs to.

    Width and height faces put their inner folds on opposite row parities so
    neighbouring faces fold the opposite way once joined.
    """

    WIDTH = "width"
    HEIGHT = "height"

    @property
    def inner_parity(self) -> RowParity:
        return RowParity.EVEN if self is FaceAxis.WIDTH else RowParity.ODD


@dataclass(frozen=True, slots=True)
class OuterDimensions:
    fold: float
    folds: int
    length: float
    seam_allowance: float
    front_inner_width: float
    front_inner_height: float
    rear_inner_width: float
    rear_inner_height: float

    @property
    def front_outer_width(self) -> float:
        return self.front_inner_width + 2 * self.fold

    @property
    def front_outer_height(self) -> float:
        return self.front_inner_height + 2 * self.fold

    @property
    def rear_outer_width(self) -> float:
        return self.rear_inner_width + 2 * self.fold

    @property
    def rear_outer_height(self) -> float:
        return self.rear_inner_height + 2 * self.fold


def outer_dimensions(params: BellowsParameters) -> OuterDimensions:
    """Normalise the inputs the way the flat pattern consumes them."""

    fold = max(params.fold_depth, 1.0)
    folds = max(2, round_half_up(params.folds))
    return OuterDimensions(
        fold=fold,
        folds=folds,
        length=folds * fold,
        seam_allowance=max(0.0, params.seam_allowance),
        front_inner_width=params.front_width,
        front_inner_height=params.front_height,
        rear_inner_width=params.rear_width,
        rear_inner_height=params.rear_height,
    )


def taper(back: float, front: float, length: float, position: float) -> float:
    """Inset of a fold line at *position* along a face tapering from *back* to *front*."""

    return ((back - front) / 2 / length) * position


@dataclass(frozen=True, slots=True)
class FaceSpec:
    axis: FaceAxis
    back_outer: float
    front_outer: float
    back_inner: float
    front_inner: float
    fold: float
    folds: int
    length: float

    @classmethod
    def for_axis(cls, axis: FaceAxis, dims: OuterDimensions) -> "FaceSpec":
        if axis is FaceAxis.WIDTH:
            back_inner, front_inner = dims.rear_inner_width, dims.front_inner_width
        else:
            back_inner, front_inner = dims.rear_inner_height, dims.front_inner_height
        return cls(
            axis=axis,
            back_outer=back_inner + 2 * dims.fold,
            front_outer=front_inner + 2 * dims.fold,
            back_inner=back_inner,
            front_inner=front_inner,
            fold=dims.fold,
            folds=dims.folds,
            length=dims.length,
        )

    @property
    def origin(self) -> Point:
        return (-self.back_outer / 2, -self.length / 2)

    @property
    def front_offset(self) -> float:
        return (self.back_outer - self.front_outer) / 2

    def inner_taper(self, position: float) -> float:
        if self.back_inner == self.front_inner:
            return 0.0
        return taper(self.back_inner, self.front_inner, self.length, position)

    def outer_taper(self, position: float) -> float:
        if self.back_outer == self.front_outer:
            return 0.0
        return taper(self.back_outer, self.front_outer, self.length, position)

    def leading_edge(self) -> tuple[Point, Point]:
        x, y = self.origin
        return (x, y), (x + self.front_offset, y + self.length)


class _FaceCanvas:
    """Collects a group's lines while folding them into the sheet bounds."""

    def __init__(self, matrix: AffineTransform, bounds: BoundsAccumulator) -> None:
        self.matrix = matrix
        self.bounds = bounds
        self.children: list[DrawPrimitive] = []

    def line(
        self,
        start: Point,
        end: Point,
        stroke: str = CUT_STROKE,
        dash: tuple[float, ...] | None = None,
    ) -> None:
        self.children.append(Line(start, end, stroke=stroke, stroke_width=FACE_STROKE_WIDTH, dash=dash))
        self.bounds.extend(self.matrix, start, end)


def _draw_face(canvas: _FaceCanvas, spec: FaceSpec) -> None:
    x, y = spec.origin
    fold = spec.fold
    half = (spec.back_outer - spec.back_inner) / 2
    fold_in = x + half
    fold_out = x
    back_outer, back_inner = spec.back_outer, spec.back_inner
    inner = spec.axis.inner_parity

    canvas.line((x, y), (x + spec.front_offset, y + spec.length))
    canvas.line((x + back_outer, y), (x + back_outer - spec.front_offset, y + spec.length))
    for row in range(1, spec.folds):
        if RowParity.of(row) is inner:
            t = spec.inner_taper(row * fold)
            row_y = y + row * fold
            canvas.line((fold_in + back_inner - t, row_y), (fold_in + back_inner - t + half, row_y))

    canvas.line((x, y), (x + back_outer, y))
    canvas.line(
        (x + spec.front_offset, y + spec.length),
        (x + spec.front_outer + spec.front_offset, y + spec.length),
    )

    for row in range(1, spec.folds):
        row_y = y + row * fold
        if RowParity.of(row) is inner:
            t = spec.inner_taper(row * fold)
            canvas.line((fold_in + t, row_y), (fold_in + back_inner - t, row_y), VALLEY_STROKE, FOLD_DASH)
        else:
            t = spec.outer_taper(row * fold)
            canvas.line((fold_out + t, row_y), (fold_out + back_outer - t, row_y), MOUNTAIN_STROKE, FOLD_DASH)

    # Leading-side connectors are cut lines, trailing-side ones are folds.
    for row in range(spec.folds):
        t = spec.inner_taper(row * fold)
        t2 = spec.inner_taper((row + 1) * fold)
        row_y = y + row * fold
        next_y = y + (row + 1) * fold
        if RowParity.of(row) is inner:
            canvas.line((fold_in + t, row_y), (fold_in - half + t2, next_y))
        else:
            canvas.line((fold_out + t, row_y), (fold_in + t2, next_y))

    for row in range(spec.folds):
        t = spec.inner_taper(row * fold)
        t2 = spec.inner_taper((row + 1) * fold)
        row_y = y + row * fold
        next_y = y + (row + 1) * fold
        if RowParity.of(row) is inner:
            canvas.line(
                (fold_in + back_inner - t, row_y),
                (fold_out + back_outer - t2, next_y),
                VALLEY_STROKE,
                FOLD_DASH,
            )
        else:
            canvas.line(
                (fold_out + back_outer - t, row_y),
                (fold_in + back_inner - t2, next_y),
                VALLEY_STROKE,
                FOLD_DASH,
            )


def _seam_flap_corners(spec: FaceSpec, seam_allowance: float) -> tuple[Point, Point, Point, Point] | None:
    if seam_allowance <= 0:
        return None
    start, end = spec.leading_edge()
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length = math.hypot(dx, dy)
    if length == 0 or not math.isfinite(length):
        return None
    # Outward normal of the leading edge (points away from the face interior).
    nx = -dy / length * seam_allowance
    ny = dx / length * seam_allowance
    return start, end, (end[0] + nx, end[1] + ny), (start[0] + nx, start[1] + ny)


def seam_flap_reach(spec: FaceSpec, seam_allowance: float) -> float:
    """Horizontal distance the seam flap extends beyond the face's leading edge."""

    corners = _seam_flap_corners(spec, seam_allowance)
    if corners is None:
        return 0.0
    start, _, _, flap_start = corners
    return start[0] - flap_start[0]


def _draw_seam_flap(canvas: _FaceCanvas, spec: FaceSpec, seam_allowance: float) -> None:
    corners = _seam_flap_corners(spec, seam_allowance)
    if corners is None:
        return
    start, end, flap_end, flap_start = corners
    canvas.line(start, flap_start)
    canvas.line(end, flap_end)
    canvas.line(flap_start, flap_end)


def _arrowhead(tail: Point, tip: Point, color: str) -> Polyline | None:
    dx = tip[0] - tail[0]
    dy = tip[1] - tail[1]
    length = math.hypot(dx, dy)
    if length == 0:
        return None
    ux = dx / length
    uy = dy / length
    size = ARROW_SIZE
    left = (tip[0] - ux * size - uy * size * 0.6, tip[1] - uy * size + ux * size * 0.6)
    right = (tip[0] - ux * size + uy * size * 0.6, tip[1] - uy * size - ux * size * 0.6)
    return Polyline((left, tip, right), stroke=color, closed=True, fill=color)


def _dimension(start: Point, end: Point, label: str, color: str) -> list[DrawPrimitive]:
    items: list[DrawPrimitive] = [Line(start, end, stroke=color)]
    for tail, tip in ((end, start), (start, end)):
        head = _arrowhead(tail, tip, color)
        if head is not None:
            items.append(head)
    mid = ((start[0] + end[0]) / 2, (start[1] + end[1]) / 2)
    items.append(Text((mid[0], mid[1] - 2), label, font_size=10, fill=color))
    return items


def flat_pattern_summary(dims: OuterDimensions) -> str:
    return (
        f"Front inner: {dims.front_inner_width:.1f}x{dims.front_inner_height:.1f}mm | "
        f"Rear inner: {dims.rear_inner_width:.1f}x{dims.rear_inner_height:.1f}mm | "
        f"Fold width: {dims.fold:.1f}mm | "
        f"Folds: {dims.folds} | "
        f"Length: {dims.length:.1f}mm | "
        f"Seam allowance: {dims.seam_allowance:.1f}mm"
    )


def generate_flat_pattern(params: BellowsParameters) -> tuple[Diagram, str]:
    """Lay out the width/height faces left to right and annotate the sheet."""

    dims = outer_dimensions(params)
    width_face = FaceSpec.for_axis(FaceAxis.WIDTH, dims)
    height_face = FaceSpec.for_axis(FaceAxis.HEIGHT, dims)
    faces = (width_face, height_face, width_face, height_face)
    page = PageSize.parse(params.page_size)
    bounds = BoundsAccumulator()
    primitives: list[DrawPrimitive] = []
    diagnostics: list[str] = []

    seam_shift = 0.0
    if params.use_five_faces:
        if seam_flap_reach(width_face, dims.seam_allowance) > 0.0:
            seam_shift = dims.seam_allowance
        else:
            diagnostics.append("Five-face layout requested but the seam flap is empty.")

    cursor_x = START_X
    cursor_y = START_Y
    for index, spec in enumerate(faces):
        # The flap takes a seam-wide strip to the left of the first face.
        extra = seam_shift if index == 0 else 0.0
        matrix = AffineTransform.identity().translate(
            cursor_x + spec.back_outer / 2 + extra,
            cursor_y + spec.length / 2,
        )
        canvas = _FaceCanvas(matrix, bounds)
        _draw_face(canvas, spec)
        primitives.append(Group(matrix, tuple(canvas.children), name=f"face-{index + 1}-{spec.axis.value}"))
        if index == 0 and seam_shift > 0.0:
            flap = _FaceCanvas(matrix, bounds)
            _draw_seam_flap(flap, spec, dims.seam_allowance)
            primitives.append(Group(matrix, tuple(flap.children), name="seam-flap"))
        cursor_x += spec.back_outer + FACE_GAP + extra

    if params.show_annotations:
        rect = ((0.0, 0.0), (page.width, 0.0), (page.width, page.height), (0.0, page.height))
        primitives.append(
            Group(
                AffineTransform.identity(),
                (Polyline(rect, stroke=ANNOTATION_STROKE, closed=True, dash=FOLD_DASH),),
                stroke=ANNOTATION_STROKE,
                dash=FOLD_DASH,
                name="page",
            )
        )

    pad = ANNOTATION_PAD if params.show_annotations else 0.0
    min_x = min(bounds.min_x - VIEW_MARGIN - pad, -pad)
    min_y = min(bounds.min_y - VIEW_MARGIN - pad, -pad)
    max_x = max(bounds.max_x + VIEW_MARGIN + pad, page.width + pad)
    max_y = max(bounds.max_y + VIEW_MARGIN + pad, page.height + pad)
    view_box = ViewBox(min_x, min_y, max_x - min_x, max_y - min_y)

    if params.show_annotations:
        top_y = min_y + 12
        right_x = max_x - 12
        children: list[DrawPrimitive] = []
        children.extend(
            _dimension((min_x + 20, top_y), (max_x - 20, top_y), f"sheet width {view_box.width:.1f}mm", ANNOTATION_STROKE)
        )
        children.extend(
            _dimension(
                (right_x, min_y + 20),
                (right_x, max_y - 20),
                f"sheet height {view_box.height:.1f}mm",
                ANNOTATION_STROKE,
            )
        )
        children.append(
            Text(
                ((min_x + max_x) / 2, min_y + 28),
                f"Folds: {dims.folds} / Fold width: {dims.fold:.1f}mm",
                font_size=11,
                fill=ANNOTATION_STROKE,
            )
        )
        children.append(
            Text(
                (min_x + 20, max_y - 12),
                f"Seam allowance: {dims.seam_allowance:.1f}mm",
                font_size=10,
                anchor="start",
                fill=ANNOTATION_STROKE,
            )
        )
        primitives.append(Group(AffineTransform.identity(), tuple(children), stroke=ANNOTATION_STROKE, name="dimensions"))

    logger.debug(
        "Flat pattern: %d folds of %.2f mm, content bounds %s, five faces=%s",
        dims.folds,
        dims.fold,
        bounds.as_tuple(),
        params.use_five_faces,
    )
    for message in diagnostics:
        logger.debug(message)
    diagram = Diagram(primitives=primitives, view_box=view_box, diagnostics=diagnostics)
    return diagram, flat_pattern_summary(dims)


def content_bounds(diagram: Diagram) -> tuple[float, float, float, float]:
    """Sheet-space bounds of the face and seam-flap groups of *diagram*."""

    bounds = BoundsAccumulator()
    for group in diagram.groups():
        if group.name is None or not (group.name.startswith("face-") or group.name == "seam-flap"):
            continue
        for child in group.children:
            if isinstance(child, Line):
                bounds.extend(group.transform, child.start, child.end)
    return bounds.as_tuple()
