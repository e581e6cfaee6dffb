"""Single tapered-prism unfolding (the standard bellows layout)."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .geometry import AffineTransform
from .params import BellowsParameters, PageSize
from .primitives import (
    ANNOTATION_STROKE,
    CUT_STROKE,
    LABEL_FILL,
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

__all__ = ["FoldLine", "MARGIN", "generate_standard", "standard_fold_lines", "standard_summary"]

logger = logging.getLogger(__name__)

MARGIN = 30.0
ANNOTATION_PAD = 30.0
VALLEY_DASH = (2.0, 3.0)
MOUNTAIN_DASH = (6.0, 4.0)


@dataclass(frozen=True, slots=True)
class FoldLine:
    """One vertical fold line of the standard layout."""

    index: int
    x: float
    y: float
    width: float
    height: float
    kind: str

    @property
    def is_mountain(self) -> bool:
        return self.kind == "mountain"


def standard_fold_lines(params: BellowsParameters) -> list[FoldLine]:
    """Interpolate the cross-section linearly from front (index 0) to rear (index ``folds``)."""

    folds = int(params.folds)
    count = max(folds, 0) + 1
    # linspace pins both endpoints, so index 0 and index ``folds`` are exact.
    widths = np.linspace(params.front_width, params.rear_width, count)
    heights = np.linspace(params.front_height, params.rear_height, count)
    lines: list[FoldLine] = []
    for index in range(count):
        lines.append(
            FoldLine(
                index=index,
                x=MARGIN + index * params.fold_depth,
                y=MARGIN,
                width=float(widths[index]),
                height=float(heights[index]),
                kind="valley" if index % 2 == 0 else "mountain",
            )
        )
    return lines


def standard_summary(params: BellowsParameters) -> str:
    return (
        f"Front: {params.front_width:.1f}x{params.front_height:.1f}mm | "
        f"Rear: {params.rear_width:.1f}x{params.rear_height:.1f}mm | "
        f"Folds: {params.folds} | "
        f"Depth: {params.fold_depth:.1f}mm | "
        f"Length: {params.fold_depth * params.folds:.1f}mm"
    )


def _dimension_group(total_width: float, max_height: float) -> Group:
    width_y = MARGIN - 12
    height_x = MARGIN - 12
    label_x = height_x - 6
    label_y = MARGIN + max_height / 2
    children: tuple[DrawPrimitive, ...] = (
        Line((MARGIN, width_y), (MARGIN + total_width, width_y), stroke=LABEL_FILL),
        Text(
            (MARGIN + total_width / 2, width_y - 6),
            f"width: {total_width:.1f} mm",
            font_size=10,
        ),
        Line((height_x, MARGIN), (height_x, MARGIN + max_height), stroke=LABEL_FILL),
        Text(
            (label_x, label_y),
            f"height: {max_height:.1f} mm",
            font_size=10,
            rotation=-90.0,
        ),
    )
    return Group(AffineTransform.identity(), children, stroke=LABEL_FILL, name="dimensions")


def _page_group(params: BellowsParameters) -> Group:
    page = PageSize.parse(params.page_size)
    rect = (
        (0.0, 0.0),
        (page.width, 0.0),
        (page.width, page.height),
        (0.0, page.height),
    )
    children: tuple[DrawPrimitive, ...] = (
        Polyline(rect, stroke=ANNOTATION_STROKE, closed=True, dash=(4.0, 4.0)),
        Text(
            (page.width - 5, 15.0),
            page.label,
            font_size=10,
            anchor="end",
            fill=ANNOTATION_STROKE,
        ),
    )
    return Group(
        AffineTransform.identity(),
        children,
        stroke=ANNOTATION_STROKE,
        dash=(4.0, 4.0),
        name="page",
    )


def generate_standard(params: BellowsParameters) -> tuple[Diagram, str]:
    """Draw the standard tapered unfolding.

    Inputs are trusted: non-positive depths or zero folds yield a degenerate
    drawing, never an exception.
    """

    lines = standard_fold_lines(params)
    total_width = params.fold_depth * params.folds
    max_height = max(params.front_height, params.rear_height)
    logger.debug(
        "Standard layout: %d fold lines, total width %.2f, max height %.2f",
        len(lines),
        total_width,
        max_height,
    )

    outline = [(line.x, line.y) for line in lines]
    outline.extend((line.x, line.y + line.height) for line in reversed(lines))
    primitives: list[DrawPrimitive] = [
        Polyline(tuple(outline), stroke=CUT_STROKE, stroke_width=2.0, closed=True)
    ]

    for line in lines:
        if line.is_mountain:
            stroke, dash = MOUNTAIN_STROKE, MOUNTAIN_DASH
        else:
            stroke, dash = VALLEY_STROKE, VALLEY_DASH
        primitives.append(Line((line.x, line.y), (line.x, line.y + line.height), stroke=stroke, dash=dash))
        primitives.append(Text((line.x, line.y - 5), line.kind, font_size=10, fill=LABEL_FILL))

    primitives.append(_dimension_group(total_width, max_height))

    page = PageSize.parse(params.page_size)
    pad = ANNOTATION_PAD if params.show_annotations else 0.0
    if params.show_annotations:
        primitives.append(_page_group(params))

    bounds_width = MARGIN * 2 + total_width + 20
    bounds_height = MARGIN * 2 + max_height + 20
    view_box = ViewBox(
        0.0,
        0.0,
        max(bounds_width, page.width) + pad,
        max(bounds_height, page.height) + pad,
    )
    return Diagram(primitives=primitives, view_box=view_box), standard_summary(params)
