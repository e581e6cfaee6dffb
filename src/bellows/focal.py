"""Focal-geometry ("BD compatible") side-panel generator.

The panel length and fold count are derived from a camera model: the maximum
flex-panel diagonal is the focal distance times a flex factor, and the panel
length follows from the taper between the front and rear standards. The side
panel is then pleated by walking probe lines from the rear edge to the front
edge and zig-zagging between the left and right silhouettes.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from .geometry import Point, Segment, ieee_div, intersect, ray_from, slope
from .params import FocalGeometryInput
from .primitives import CUT_STROKE, VALLEY_STROKE, Diagram, DrawPrimitive, Line, ViewBox

__all__ = [
    "FocalGeometry",
    "PleatState",
    "PleatWalk",
    "focal_geometry",
    "focal_summary",
    "generate_focal_geometry",
    "walk_pleats",
]

logger = logging.getLogger(__name__)

DASH = (6.0, 6.0)
RAY_LENGTH = 10000.0
QUARTER_TURN = math.pi / 4


@dataclass(frozen=True, slots=True)
class FocalGeometry:
    """Quantities derived from :class:`FocalGeometryInput`."""

    front_std_size: float
    rear_std_size: float
    flex_panel_side: float
    panel_length: float
    num_folds: int
    canvas_width: float
    canvas_height: float

    @property
    def fold_spacing(self) -> float:
        return ieee_div(self.panel_length, self.num_folds)


def focal_geometry(data: FocalGeometryInput) -> FocalGeometry:
    flex_panel_side = data.camera_focal_distance * data.flex_factor
    half_size_delta = (data.rear_std_size - data.front_std_size) / 2
    # Impossible geometry (taper wider than the flex panel) collapses to zero length.
    panel_length = math.sqrt(max(flex_panel_side**2 - half_size_delta**2, 0.0))
    quotient = ieee_div(panel_length, data.fold_distance)
    num_folds = math.ceil(quotient) if math.isfinite(quotient) else 0
    if data.rear_std_size > data.front_std_size:
        canvas_width = 2 * data.rear_std_size
    else:
        canvas_width = 1.5 * data.front_std_size
    return FocalGeometry(
        front_std_size=data.front_std_size,
        rear_std_size=data.rear_std_size,
        flex_panel_side=flex_panel_side,
        panel_length=panel_length,
        num_folds=num_folds,
        canvas_width=canvas_width,
        canvas_height=1.5 * panel_length,
    )


class PleatState(Enum):
    """Orientation of the pleat rays cast on an even probe."""

    DOWN = "down"
    UP = "up"

    def toggled(self) -> "PleatState":
        return PleatState.UP if self is PleatState.DOWN else PleatState.DOWN


@dataclass(frozen=True, slots=True)
class _PleatRays:
    left: Segment
    left_other: Segment
    right: Segment
    right_other: Segment


def _cast_rays(state: PleatState, left: Point, right: Point, angle: float, sign: float) -> _PleatRays:
    rising = (-angle + QUARTER_TURN) * sign
    falling = (angle + QUARTER_TURN) * sign
    if state is PleatState.DOWN:
        return _PleatRays(
            left=ray_from(left, rising, RAY_LENGTH),
            left_other=ray_from(left, -falling, -RAY_LENGTH),
            right=ray_from(right, -rising, -RAY_LENGTH),
            right_other=ray_from(right, falling, -RAY_LENGTH),
        )
    return _PleatRays(
        left=ray_from(left, -falling, RAY_LENGTH),
        left_other=ray_from(left, rising, -RAY_LENGTH),
        right=ray_from(right, falling, -RAY_LENGTH),
        right_other=ray_from(right, -rising, -RAY_LENGTH),
    )


@dataclass(slots=True)
class PleatWalk:
    """Output of :func:`walk_pleats`."""

    lines: list[Line]
    vertices: list[tuple[Point, Point]]
    states: list[PleatState]
    parallel_hits: int = 0


def walk_pleats(
    start_line: Segment,
    fold_spacing: float,
    num_folds: int,
    right_edge: Segment,
    left_edge: Segment,
    angle: float,
    sign: float,
) -> PleatWalk:
    """Zig-zag between *left_edge* and *right_edge* starting from *start_line*.

    ``start_line`` runs right to left along the rear edge. Probes move towards
    the front by half a fold spacing per step; even probes close a pleat and
    flip :class:`PleatState`, odd probes only receive a valley line.
    """

    walk = PleatWalk(lines=[], vertices=[], states=[])
    if num_folds <= 0:
        return walk

    (rear_right, rear_left) = start_line
    prev_right = rear_right
    prev_left = rear_left
    previous: _PleatRays | None = None
    state = PleatState.DOWN

    def _hit(line_a: Segment, line_b: Segment) -> Point:
        result = intersect(line_a, line_b)
        if result.is_parallel:
            walk.parallel_hits += 1
        return result.point

    for step in range(2 * num_folds + 1):
        offset = fold_spacing * 0.5 * step
        probe = (
            (rear_right[0], rear_right[1] - offset),
            (rear_left[0], rear_left[1] - offset),
        )
        left_point = _hit(left_edge, probe)
        right_point = _hit(right_edge, probe)

        if step % 2 == 0:
            rays = _cast_rays(state, prev_left, prev_right, angle, sign)
            state = state.toggled()
            walk.states.append(state)
            if previous is not None:
                if state is PleatState.DOWN:
                    left_from, left_to = previous.left, rays.left
                    right_from, right_to = previous.right, rays.right
                else:
                    left_from, left_to = previous.left_other, rays.left_other
                    right_from, right_to = previous.right_other, rays.right_other
                left_vertex = _hit(left_from, left_to)
                right_vertex = _hit(right_from, right_to)
                walk.lines.append(Line(left_from[0], left_vertex, stroke=CUT_STROKE))
                walk.lines.append(Line(right_from[0], right_vertex, stroke=CUT_STROKE))
                walk.lines.append(Line(left_vertex, right_vertex, stroke=VALLEY_STROKE, dash=DASH))
                walk.vertices.append((left_vertex, right_vertex))
            previous = rays
        else:
            walk.lines.append(Line(left_point, right_point, stroke=VALLEY_STROKE, dash=DASH))

        prev_left = left_point
        prev_right = right_point

    return walk


def focal_summary(geometry: FocalGeometry) -> str:
    return (
        f"Front: {geometry.front_std_size:.1f}mm | "
        f"Rear: {geometry.rear_std_size:.1f}mm | "
        f"Folds: {geometry.num_folds} | "
        f"Panel length: {geometry.panel_length:.1f}mm"
    )


def generate_focal_geometry(data: FocalGeometryInput) -> tuple[Diagram, str]:
    """Draw the pleated side panel for the focal-geometry model."""

    geometry = focal_geometry(data)
    diagnostics: list[str] = []
    if geometry.panel_length == 0.0:
        diagnostics.append("Flex panel is shorter than the standard size difference; panel length clamped to 0.")
    if geometry.num_folds == 0 and geometry.panel_length > 0.0:
        diagnostics.append("Fold distance does not yield a finite fold count; pleats were skipped.")

    center_x = geometry.canvas_width / 2
    center_y = geometry.canvas_height / 2
    top = center_y - geometry.panel_length / 2
    bottom = center_y + geometry.panel_length / 2

    front_left = (center_x - geometry.front_std_size / 2, top)
    front_right = (center_x + geometry.front_std_size / 2, top)
    rear_left = (center_x - geometry.rear_std_size / 2, bottom)
    rear_right = (center_x + geometry.rear_std_size / 2, bottom)

    primitives: list[DrawPrimitive] = [
        Line((center_x, bottom), (center_x, top), stroke=CUT_STROKE, dash=DASH),
        Line(front_left, front_right, stroke=CUT_STROKE, stroke_width=2.0),
        Line(rear_left, rear_right, stroke=CUT_STROKE, stroke_width=2.0),
        Line(front_right, rear_right, stroke=CUT_STROKE, stroke_width=2.0),
        Line(front_left, rear_left, stroke=CUT_STROKE, stroke_width=2.0),
    ]

    edge_angle = slope((rear_right, front_right))
    walk = walk_pleats(
        (rear_right, rear_left),
        geometry.fold_spacing,
        geometry.num_folds,
        (rear_right, front_right),
        (rear_left, front_left),
        -edge_angle,
        -1.0,
    )
    primitives.extend(walk.lines)
    if walk.parallel_hits:
        diagnostics.append(f"{walk.parallel_hits} pleat intersection(s) were parallel and fell back to the origin.")

    for message in diagnostics:
        logger.debug(message)
    logger.debug(
        "Focal layout: panel length %.2f, %d folds, %d pleat lines",
        geometry.panel_length,
        geometry.num_folds,
        len(walk.lines),
    )
    view_box = ViewBox(0.0, 0.0, geometry.canvas_width, geometry.canvas_height)
    diagram = Diagram(primitives=primitives, view_box=view_box, diagnostics=diagnostics)
    return diagram, focal_summary(geometry)
